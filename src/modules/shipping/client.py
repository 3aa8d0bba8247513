"""HTTP client for the Google Distance Matrix API.

Only driving distance is used; durations are ignored.  Network failures
and provider-level errors are raised as ``ShippingProviderError`` so the
view can answer 502 without leaking provider details.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
import structlog

from modules.shipping.exceptions import DestinationNotFound, ShippingProviderError

logger = structlog.get_logger(__name__)

_METERS_PER_KM = Decimal(1000)


class DistanceMatrixClient:
    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    def distance_km(self, origin: str, destination: str) -> Decimal:
        """Driving distance between two addresses, in kilometres.

        Raises:
            ShippingProviderError: transport failure or non-OK response.
            DestinationNotFound: no route for this destination.
        """
        params = {
            "origins": origin,
            "destinations": destination,
            "mode": "driving",
            "units": "metric",
            "language": "pt-BR",
            "key": self._api_key,
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(self._base_url, params=params)
                response.raise_for_status()
                body: Dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("shipping.provider_unreachable", error=str(exc))
            raise ShippingProviderError("Distance provider unavailable.") from exc

        if body.get("status") != "OK":
            logger.warning("shipping.provider_error", provider_status=body.get("status"))
            raise ShippingProviderError("Distance provider rejected the request.")

        try:
            element = body["rows"][0]["elements"][0]
        except (KeyError, IndexError) as exc:
            raise ShippingProviderError("Malformed distance provider response.") from exc

        if element.get("status") != "OK":
            raise DestinationNotFound("No route found to the destination address.")

        meters = Decimal(element["distance"]["value"])
        return meters / _METERS_PER_KM
