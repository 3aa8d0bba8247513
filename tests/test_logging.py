import logging
import uuid

import pytest

from config.settings import mask_sensitive_data


class TestCorrelationIdMiddleware:
    def test_returns_provided_request_id(self, client):
        custom_id = "my-custom-request-id-123"
        response = client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        assert response["X-Request-ID"] == custom_id

    def test_generates_uuid_when_no_request_id(self, client):
        response = client.get("/health")
        request_id = response["X-Request-ID"]
        parsed = uuid.UUID(request_id, version=4)
        assert str(parsed) == request_id

    def test_api_client_fixture_header_is_echoed(self, api_client_with_correlation):
        api_client, cid = api_client_with_correlation
        response = api_client.post(
            "/api/v1/coupons/verify/", {"code": "X", "cart_total": "1"}, format="json"
        )
        assert response["X-Request-ID"] == cid

    def test_correlation_id_in_logs(self, client, caplog):
        custom_id = "log-test-correlation-456"
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        found = any(custom_id in record.getMessage() for record in caplog.records)
        assert found, (
            f"correlation_id '{custom_id}' not found in log records: "
            f"{[r.getMessage() for r in caplog.records]}"
        )


class TestSensitiveDataMasking:
    @pytest.mark.parametrize(
        "value",
        [
            "123.456.789-00",  # CPF
            "12.345.678/0001-90",  # CNPJ
            "(11) 98765-4321",  # phone
            "11987654321",
        ],
    )
    def test_documents_and_phones_are_masked(self, value):
        result = mask_sensitive_data(None, None, {"event": "test", "data": value})
        assert value not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_password_masked_in_log_output(self):
        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_api_key_masked_in_log_output(self):
        event_dict = {"event": "test", "url": "distancematrix?key=AIzaSecret"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "AIzaSecret" not in result["url"]

    def test_non_sensitive_data_unchanged(self):
        event_dict = {"event": "coupon.verified", "code": "BEMVINDO10"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["code"] == "BEMVINDO10"
        assert result["event"] == "coupon.verified"
