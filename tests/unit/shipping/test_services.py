"""Unit tests for ShippingService and the fee formula."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.shipping.dtos import ShippingQuoteRequestDTO
from modules.shipping.exceptions import ShippingNotConfigured
from modules.shipping.services import ShippingService, calculate_fee

pytestmark = pytest.mark.unit


class FakeClient:
    def __init__(self, km):
        self.km = Decimal(km)
        self.calls = []

    def distance_km(self, origin, destination):
        self.calls.append((origin, destination))
        return self.km


@pytest.fixture(autouse=True)
def _shipping_settings(settings):
    settings.SHIPPING_BASE_FEE = Decimal("5.00")
    settings.SHIPPING_FEE_PER_KM = Decimal("1.50")
    settings.SHIPPING_ORIGIN_ADDRESS = "Rua da Loja, 100"


class TestCalculateFee:
    def test_base_plus_per_km(self):
        assert calculate_fee(Decimal("4")) == Decimal("11.00")

    def test_rounded_to_cents(self):
        # 5.00 + 1.50 * 3.333 = 9.9995
        assert calculate_fee(Decimal("3.333")) == Decimal("10.00")


class TestQuote:
    def test_quotes_distance_and_fee(self):
        client = FakeClient("4.2")
        result = ShippingService(client).quote(
            ShippingQuoteRequestDTO(destination="Rua A, 1")
        )

        assert result.distance_km == Decimal("4.20")
        assert result.fee == Decimal("11.30")
        assert not result.cached
        assert client.calls == [("Rua da Loja, 100", "Rua A, 1")]

    def test_second_quote_uses_cache(self):
        client = FakeClient("4.2")
        service = ShippingService(client)
        service.quote(ShippingQuoteRequestDTO(destination="Rua A, 1"))

        again = service.quote(ShippingQuoteRequestDTO(destination="rua a,  1"))

        assert again.cached
        assert again.fee == Decimal("11.30")
        assert len(client.calls) == 1

    def test_not_configured_without_api_key(self, settings):
        settings.GOOGLE_MAPS_API_KEY = ""

        with pytest.raises(ShippingNotConfigured):
            ShippingService().quote(ShippingQuoteRequestDTO(destination="Rua A, 1"))

    def test_blank_destination_rejected(self):
        with pytest.raises(ValidationError):
            ShippingQuoteRequestDTO(destination="   ")
