"""Order DRF serializers for API input/output.

Input serializers check the shape of the request at the HTTP edge; the
business rules live in ``OrderService``, which receives the Pydantic DTOs
from ``dtos.py``.  ``created_at`` and every amount are read-only: the
server computes them.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation payload.

    ``subtotal``, ``total`` and ``discount`` sent by clients are ignored.
    """

    items = CreateOrderItemSerializer(many=True, allow_empty=False)
    customer_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    customer_phone = serializers.CharField(
        required=False, default="", allow_blank=True, max_length=30
    )
    coupon_code = serializers.CharField(
        required=False, default="", allow_blank=True, max_length=50
    )
    shipping_fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, default="0.00"
    )
    origin = serializers.CharField(
        required=False, allow_null=True, default=None, max_length=30
    )
    notes = serializers.CharField(required=False, default="", allow_blank=True)
    delivery_address = serializers.CharField(
        required=False, default="", allow_blank=True
    )
    scheduled_for = serializers.DateTimeField(
        required=False, allow_null=True, default=None
    )


class UpdateOrderSerializer(serializers.Serializer):
    status = serializers.CharField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    delivery_address = serializers.CharField(required=False, allow_blank=True)
    scheduled_for = serializers.DateTimeField(required=False, allow_null=True)
    origin = serializers.CharField(required=False, max_length=30)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Line item with the product's current name and SKU."""

    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_sku",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "changed_by",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "customer_phone",
            "coupon_code",
            "status",
            "origin",
            "subtotal",
            "discount_amount",
            "shipping_fee",
            "total_amount",
            "notes",
            "delivery_address",
            "scheduled_for",
            "stock_released_at",
            "customer_accrued_at",
            "created_at",
            "updated_at",
            "items",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "status",
            "origin",
            "total_amount",
            "created_at",
        ]
        read_only_fields = fields
