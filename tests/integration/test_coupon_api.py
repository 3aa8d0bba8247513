"""Integration tests for Coupon API endpoints.

Covers:
- Anonymous POST /api/v1/coupons/verify/ for the storefront.
- Verify followed by checkout with the same coupon.
- Staff CRUD keyed by code (409 on duplicates and on redeemed coupons).
"""

from __future__ import annotations

import pytest

from modules.coupons.models import Coupon

pytestmark = pytest.mark.integration

URL = "/api/v1/coupons/"
VERIFY_URL = "/api/v1/coupons/verify/"


# ===========================================================================
# Verify
# ===========================================================================


class TestVerifyCoupon:
    def test_anonymous_verify_valid_coupon(self, api_client, bemvindo10):
        response = api_client.post(
            VERIFY_URL, {"code": "bemvindo10", "cart_total": "30.00"}, format="json"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["discount"] == "3.00"
        assert data["applied_coupon"] == {
            "code": "BEMVINDO10",
            "discount_type": "percentual",
            "discount_value": "10.00",
        }

    def test_cart_below_minimum_is_200_with_valid_false(self, api_client, bemvindo10):
        response = api_client.post(
            VERIFY_URL, {"code": "BEMVINDO10", "cart_total": "15.00"}, format="json"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["message"] == "Minimum cart value for this coupon is R$ 20.00."
        assert data["discount"] == "0.00"
        assert "applied_coupon" not in data

    def test_unknown_code(self, api_client):
        response = api_client.post(
            VERIFY_URL, {"code": "NOPE", "cart_total": "15.00"}, format="json"
        )

        assert response.json() == {
            "valid": False,
            "message": "Coupon not found.",
            "discount": "0.00",
        }

    def test_negative_cart_total_is_400(self, api_client, bemvindo10):
        response = api_client.post(
            VERIFY_URL, {"code": "BEMVINDO10", "cart_total": "-1"}, format="json"
        )

        assert response.status_code == 400

    def test_verify_then_checkout_then_verify_again(
        self, api_client, auth_client, customer, brigadeiro, bemvindo10
    ):
        verify = {
            "code": "BEMVINDO10",
            "cart_total": "30.00",
            "customer_phone": "(11) 98765-4321",
        }
        assert api_client.post(VERIFY_URL, verify, format="json").json()["valid"]

        order = auth_client.post(
            "/api/v1/orders/",
            {
                "customer_id": str(customer.id),
                "coupon_code": "BEMVINDO10",
                "items": [{"product_id": str(brigadeiro.id), "quantity": 3}],
            },
            format="json",
        )
        assert order.status_code == 201
        assert order.json()["total_amount"] == "27.00"

        again = api_client.post(VERIFY_URL, verify, format="json").json()
        assert again["valid"] is False
        assert again["message"] == "Coupon already used by this customer."


# ===========================================================================
# CRUD
# ===========================================================================


class TestCouponCrud:
    def test_create(self, auth_client):
        response = auth_client.post(
            URL,
            {
                "code": "festa15",
                "discount_type": "fixo",
                "discount_value": "15.00",
                "usage_limit": 20,
                "minimum_cart_value": "60.00",
            },
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["code"] == "FESTA15"
        assert data["usage_count"] == 0
        assert data["status"] == "Ativo"

    def test_create_duplicate_is_409(self, auth_client, bemvindo10):
        response = auth_client.post(
            URL,
            {
                "code": "BEMVINDO10",
                "discount_type": "fixo",
                "discount_value": "1.00",
                "usage_limit": 1,
            },
            format="json",
        )

        assert response.status_code == 409

    def test_create_invalid_is_400(self, auth_client):
        response = auth_client.post(
            URL,
            {"code": "X", "discount_type": "percentual", "discount_value": "150"},
            format="json",
        )

        assert response.status_code == 400

    def test_retrieve_by_code_case_insensitive(self, auth_client, bemvindo10):
        response = auth_client.get(f"{URL}bemvindo10/")

        assert response.status_code == 200
        assert response.json()["code"] == "BEMVINDO10"

    def test_list(self, auth_client, bemvindo10):
        response = auth_client.get(URL)

        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_deactivate(self, auth_client, bemvindo10):
        response = auth_client.patch(
            f"{URL}BEMVINDO10/", {"status": "Inativo"}, format="json"
        )

        assert response.status_code == 200
        assert Coupon.objects.get(code="BEMVINDO10").status == "Inativo"

    def test_delete_redeemed_coupon_is_409(
        self, auth_client, customer, brigadeiro, bemvindo10
    ):
        auth_client.post(
            "/api/v1/orders/",
            {
                "customer_id": str(customer.id),
                "coupon_code": "BEMVINDO10",
                "items": [{"product_id": str(brigadeiro.id), "quantity": 3}],
            },
            format="json",
        )

        response = auth_client.delete(f"{URL}BEMVINDO10/")

        assert response.status_code == 409

    def test_delete_unused_coupon(self, auth_client, bemvindo10):
        response = auth_client.delete(f"{URL}BEMVINDO10/")

        assert response.status_code == 204

    def test_crud_requires_authentication(self, api_client, bemvindo10):
        assert api_client.get(URL).status_code == 401
