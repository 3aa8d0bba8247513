"""Coupon DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.coupons.models import Coupon


class VerifyCouponSerializer(serializers.Serializer):
    """Validates the ``POST /coupons/verify/`` payload."""

    code = serializers.CharField(max_length=50, allow_blank=True)
    cart_total = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0
    )
    customer_phone = serializers.CharField(
        required=False, default="", allow_blank=True
    )


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = [
            "code",
            "description",
            "status",
            "discount_type",
            "discount_value",
            "minimum_cart_value",
            "usage_limit",
            "usage_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AppliedCouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = ["code", "discount_type", "discount_value"]
        read_only_fields = fields
