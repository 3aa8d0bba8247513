"""Integration tests for Order API endpoints.

Covers:
- Order creation via POST /api/v1/orders/ (with coupon, shipping, idempotency).
- Domain exception mapping (400, 404).
- Status update via PATCH /api/v1/orders/{id}/ with stock reversal.
- List, retrieve and soft delete.
- Authentication enforcement.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.coupons.models import Coupon
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.products.models import Product

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


def detail_url(order_id):
    return f"{URL}{order_id}/"


def order_payload(product, quantity=2, **extra):
    payload = {"items": [{"product_id": str(product.id), "quantity": quantity}]}
    payload.update(extra)
    return payload


# ===========================================================================
# Create
# ===========================================================================


class TestCreateOrder:
    def test_create_returns_201_with_server_totals(self, auth_client, customer, brigadeiro):
        response = auth_client.post(
            URL,
            order_payload(
                brigadeiro,
                customer_id=str(customer.id),
                subtotal="1.00",
                total_amount="1.00",
            ),
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["subtotal"] == "20.00"
        assert data["total_amount"] == "20.00"
        assert data["status"] == OrderStatus.OPEN
        assert data["customer_phone"] == "11987654321"
        assert len(data["items"]) == 1
        assert data["items"][0]["product_sku"] == "BRI-001"
        assert len(data["status_history"]) == 1

    def test_create_with_coupon_and_shipping(
        self, auth_client, customer, brigadeiro, bemvindo10
    ):
        response = auth_client.post(
            URL,
            order_payload(
                brigadeiro,
                quantity=3,
                customer_id=str(customer.id),
                coupon_code="bemvindo10",
                shipping_fee="7.00",
            ),
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["coupon_code"] == "BEMVINDO10"
        assert data["discount_amount"] == "3.00"
        assert data["total_amount"] == "34.00"

    def test_idempotency_key_header(self, auth_client, brigadeiro):
        first = auth_client.post(
            URL,
            order_payload(brigadeiro, quantity=1),
            format="json",
            HTTP_IDEMPOTENCY_KEY="key-1",
        )
        second = auth_client.post(
            URL,
            order_payload(brigadeiro, quantity=1),
            format="json",
            HTTP_IDEMPOTENCY_KEY="key-1",
        )

        assert first.json()["id"] == second.json()["id"]
        assert Order.objects.count() == 1

    def test_empty_items_is_400(self, auth_client):
        response = auth_client.post(URL, {"items": []}, format="json")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid order payload."
        assert "items" in response.json()["errors"]

    def test_duplicate_products_is_400(self, auth_client, brigadeiro):
        line = {"product_id": str(brigadeiro.id), "quantity": 1}
        response = auth_client.post(URL, {"items": [line, line]}, format="json")

        assert response.status_code == 400

    def test_unknown_customer_is_404(self, auth_client, brigadeiro):
        response = auth_client.post(
            URL, order_payload(brigadeiro, customer_id=str(uuid4())), format="json"
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Customer not found."

    def test_unknown_product_is_404(self, auth_client):
        response = auth_client.post(
            URL,
            {"items": [{"product_id": str(uuid4()), "quantity": 1}]},
            format="json",
        )

        assert response.status_code == 404

    def test_coupon_without_phone_is_400(self, auth_client, brigadeiro, bemvindo10):
        response = auth_client.post(
            URL,
            order_payload(brigadeiro, quantity=3, coupon_code="BEMVINDO10"),
            format="json",
        )

        assert response.status_code == 400
        assert "customer_phone" in response.json()["detail"]

    def test_rejected_coupon_is_400_and_nothing_changes(
        self, auth_client, customer, brigadeiro, bemvindo10
    ):
        response = auth_client.post(
            URL,
            order_payload(
                brigadeiro,
                quantity=1,
                customer_id=str(customer.id),
                coupon_code="BEMVINDO10",
            ),
            format="json",
        )

        assert response.status_code == 400
        assert "R$ 20.00" in response.json()["detail"]
        assert Product.objects.get(id=brigadeiro.id).stock_quantity == 5
        assert Coupon.objects.get(code="BEMVINDO10").usage_count == 0
        assert Order.objects.count() == 0

    def test_requires_authentication(self, api_client, brigadeiro):
        response = api_client.post(URL, order_payload(brigadeiro), format="json")

        assert response.status_code == 401


# ===========================================================================
# Update
# ===========================================================================


class TestUpdateOrder:
    @pytest.fixture()
    def order(self, auth_client, customer, brigadeiro):
        response = auth_client.post(
            URL,
            order_payload(brigadeiro, customer_id=str(customer.id)),
            format="json",
        )
        return response.json()

    def test_cancel_by_label_restores_stock(self, auth_client, order, brigadeiro):
        assert Product.objects.get(id=brigadeiro.id).stock_quantity == 3

        response = auth_client.patch(
            detail_url(order["id"]), {"status": "Cancelado"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["status"] == OrderStatus.CANCELLED
        assert Product.objects.get(id=brigadeiro.id).stock_quantity == 5

    def test_history_records_username(self, auth_client, order):
        auth_client.patch(detail_url(order["id"]), {"status": "READY"}, format="json")

        response = auth_client.get(detail_url(order["id"]))
        latest = next(
            h for h in response.json()["status_history"] if h["new_status"] == "READY"
        )
        assert latest["old_status"] == "OPEN"
        assert latest["changed_by"] == "atendente"

    def test_finalize_updates_customer(self, auth_client, order, customer):
        auth_client.patch(
            detail_url(order["id"]), {"status": "FINALIZED"}, format="json"
        )

        response = auth_client.get(f"/api/v1/customers/{customer.id}/")
        assert response.json()["total_spent"] == "20.00"

    def test_unknown_status_is_400(self, auth_client, order):
        response = auth_client.patch(
            detail_url(order["id"]), {"status": "SHIPPED"}, format="json"
        )

        assert response.status_code == 400

    def test_merge_fields(self, auth_client, order):
        response = auth_client.put(
            detail_url(order["id"]),
            {"delivery_address": "Rua Nova, 5", "origin": "ifood"},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["delivery_address"] == "Rua Nova, 5"
        assert response.json()["origin"] == "ifood"

    def test_unknown_order_is_404(self, auth_client):
        response = auth_client.patch(
            detail_url(uuid4()), {"status": "READY"}, format="json"
        )

        assert response.status_code == 404


# ===========================================================================
# Read / Delete
# ===========================================================================


class TestReadAndDelete:
    def test_list_is_paginated(self, auth_client, brigadeiro, bolo):
        auth_client.post(URL, order_payload(brigadeiro, quantity=1), format="json")
        auth_client.post(URL, order_payload(bolo, quantity=1), format="json")

        response = auth_client.get(URL)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert "items" not in data["results"][0]

    def test_list_filters_by_status(self, auth_client, brigadeiro, bolo):
        first = auth_client.post(URL, order_payload(brigadeiro, quantity=1), format="json")
        auth_client.post(URL, order_payload(bolo, quantity=1), format="json")
        auth_client.patch(
            detail_url(first.json()["id"]), {"status": "READY"}, format="json"
        )

        response = auth_client.get(URL, {"status": "READY"})

        assert [o["id"] for o in response.json()["results"]] == [first.json()["id"]]

    def test_retrieve_unknown_is_404(self, auth_client):
        response = auth_client.get(detail_url(uuid4()))

        assert response.status_code == 404

    def test_delete_hides_order(self, auth_client, brigadeiro):
        created = auth_client.post(
            URL, order_payload(brigadeiro, quantity=1), format="json"
        ).json()

        response = auth_client.delete(detail_url(created["id"]))

        assert response.status_code == 204
        assert auth_client.get(detail_url(created["id"])).status_code == 404
        assert Order.objects.filter(id=created["id"]).exists()
