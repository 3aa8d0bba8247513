"""Product DRF serializers.

Business rules live in ``ProductService``; this module only shapes
responses.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "category",
            "price",
            "stock_quantity",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
