"""Shipping DRF serializers."""

from __future__ import annotations

from rest_framework import serializers


class ShippingQuoteRequestSerializer(serializers.Serializer):
    destination = serializers.CharField(max_length=500)


class ShippingQuoteSerializer(serializers.Serializer):
    destination = serializers.CharField()
    distance_km = serializers.DecimalField(max_digits=10, decimal_places=2)
    fee = serializers.DecimalField(max_digits=10, decimal_places=2)
    cached = serializers.BooleanField()
