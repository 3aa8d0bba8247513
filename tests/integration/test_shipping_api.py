"""Integration tests for POST /api/v1/shipping/quote/.

The Distance Matrix provider is replaced with ``httpx.MockTransport`` by
patching the client factory used by the service.
"""

from __future__ import annotations

import httpx
import pytest

from modules.shipping import services as shipping_services
from modules.shipping.client import DistanceMatrixClient

pytestmark = pytest.mark.integration

URL = "/api/v1/shipping/quote/"


@pytest.fixture()
def shipping_settings(settings):
    settings.GOOGLE_MAPS_API_KEY = "test-key"
    settings.SHIPPING_ORIGIN_ADDRESS = "Rua da Loja, 100"
    return settings


@pytest.fixture()
def provider(monkeypatch, shipping_settings):
    """Route provider calls to a mock transport answering with ``state``."""
    state = {"body": None, "status_code": 200, "calls": 0}

    def handler(request):
        state["calls"] += 1
        return httpx.Response(state["status_code"], json=state["body"])

    def factory(**kwargs):
        return DistanceMatrixClient(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(shipping_services, "DistanceMatrixClient", factory)
    return state


def route(meters):
    return {
        "status": "OK",
        "rows": [{"elements": [{"status": "OK", "distance": {"value": meters}}]}],
    }


class TestShippingQuote:
    def test_anonymous_quote(self, api_client, provider):
        provider["body"] = route(4000)

        response = api_client.post(URL, {"destination": "Rua A, 1"}, format="json")

        assert response.status_code == 200
        data = response.json()
        assert data["distance_km"] == "4.00"
        assert data["fee"] == "11.00"
        assert data["cached"] is False

    def test_repeated_destination_is_cached(self, api_client, provider):
        provider["body"] = route(4000)

        api_client.post(URL, {"destination": "Rua A, 1"}, format="json")
        response = api_client.post(URL, {"destination": "RUA A, 1"}, format="json")

        assert response.json()["cached"] is True
        assert provider["calls"] == 1

    def test_no_route_is_400(self, api_client, provider):
        provider["body"] = {
            "status": "OK",
            "rows": [{"elements": [{"status": "NOT_FOUND"}]}],
        }

        response = api_client.post(URL, {"destination": "???"}, format="json")

        assert response.status_code == 400

    def test_provider_failure_is_502(self, api_client, provider):
        provider["status_code"] = 503
        provider["body"] = {}

        response = api_client.post(URL, {"destination": "Rua A, 1"}, format="json")

        assert response.status_code == 502

    def test_not_configured_is_503(self, api_client, settings):
        settings.GOOGLE_MAPS_API_KEY = ""

        response = api_client.post(URL, {"destination": "Rua A, 1"}, format="json")

        assert response.status_code == 503

    def test_missing_destination_is_400(self, api_client, shipping_settings):
        response = api_client.post(URL, {}, format="json")

        assert response.status_code == 400
