"""Customer DRF serializers.

Responses only; input goes through the Pydantic DTOs in ``dtos.py``.
The document is masked to its last four digits.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    document = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "phone",
            "email",
            "document",
            "document_type",
            "addresses",
            "total_spent",
            "last_purchase_at",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_document(self, obj: Customer) -> str | None:
        if not obj.document:
            return None
        return f"***{obj.document[-4:]}"
