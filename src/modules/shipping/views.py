"""Shipping API views."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.shipping.dtos import ShippingQuoteRequestDTO
from modules.shipping.exceptions import (
    DestinationNotFound,
    ShippingNotConfigured,
    ShippingProviderError,
)
from modules.shipping.serializers import (
    ShippingQuoteRequestSerializer,
    ShippingQuoteSerializer,
)
from modules.shipping.services import ShippingService


class ShippingViewSet(ViewSet):
    permission_classes = [AllowAny]
    throttle_scope = "shipping_quote"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ShippingService()

    @action(detail=False, methods=["post"])
    def quote(self, request: Request) -> Response:
        """POST /api/v1/shipping/quote/ ``{"destination": "..."}``"""
        serializer = ShippingQuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            dto = ShippingQuoteRequestDTO(
                destination=serializer.validated_data["destination"]
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = self._service.quote(dto)
        except DestinationNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except ShippingNotConfigured as exc:
            return Response(
                {"detail": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        except ShippingProviderError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_502_BAD_GATEWAY)

        return Response(ShippingQuoteSerializer(result.model_dump()).data)
