"""Shipping fee quotes.

``fee = SHIPPING_BASE_FEE + SHIPPING_FEE_PER_KM * km``, rounded half up to
cents.  Distances are cached per destination in the Django cache, since
the same neighbourhoods are quoted over and over.  The fee is only a
quote: clients pass it back as ``shipping_fee`` when creating the order.
"""

from __future__ import annotations

import hashlib
from decimal import Decimal
from typing import Optional

import structlog
from django.conf import settings
from django.core.cache import cache

from modules.shipping.client import DistanceMatrixClient
from modules.shipping.dtos import ShippingQuoteDTO, ShippingQuoteRequestDTO
from modules.shipping.exceptions import ShippingNotConfigured
from shared.domain.money import to_currency

logger = structlog.get_logger(__name__)

CACHE_PREFIX = "shipping:distance:"


def calculate_fee(distance_km: Decimal) -> Decimal:
    return to_currency(
        settings.SHIPPING_BASE_FEE + settings.SHIPPING_FEE_PER_KM * distance_km
    )


class ShippingService:
    def __init__(self, client: Optional[DistanceMatrixClient] = None) -> None:
        self._client = client

    def _get_client(self) -> DistanceMatrixClient:
        if self._client is not None:
            return self._client
        if not settings.GOOGLE_MAPS_API_KEY or not settings.SHIPPING_ORIGIN_ADDRESS:
            raise ShippingNotConfigured("Shipping quotes are not configured.")
        self._client = DistanceMatrixClient(
            api_key=settings.GOOGLE_MAPS_API_KEY,
            base_url=settings.GOOGLE_MAPS_DISTANCE_MATRIX_URL,
            timeout=settings.SHIPPING_HTTP_TIMEOUT_SECONDS,
        )
        return self._client

    def quote(self, dto: ShippingQuoteRequestDTO) -> ShippingQuoteDTO:
        """Raises ``ShippingNotConfigured``, ``ShippingProviderError`` or
        ``DestinationNotFound``."""
        key = CACHE_PREFIX + hashlib.sha256(
            dto.destination.casefold().encode()
        ).hexdigest()

        cached = cache.get(key)
        if cached is not None:
            distance = Decimal(cached)
            logger.info("shipping.quote_cache_hit", distance_km=str(distance))
            return ShippingQuoteDTO(
                destination=dto.destination,
                distance_km=distance.quantize(Decimal("0.01")),
                fee=calculate_fee(distance),
                cached=True,
            )

        distance = self._get_client().distance_km(
            settings.SHIPPING_ORIGIN_ADDRESS, dto.destination
        )
        cache.set(key, str(distance), timeout=settings.SHIPPING_QUOTE_CACHE_SECONDS)
        fee = calculate_fee(distance)
        logger.info("shipping.quoted", distance_km=str(distance), fee=str(fee))
        return ShippingQuoteDTO(
            destination=dto.destination,
            distance_km=distance.quantize(Decimal("0.01")),
            fee=fee,
        )
