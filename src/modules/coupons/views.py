"""Coupon API views.

CRUD for staff plus ``POST /coupons/verify/``, which the storefront calls
anonymously before checkout.  A rejected coupon is a normal 200 answer
with ``valid: false``; it is not an error.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.coupons.dtos import CreateCouponDTO, UpdateCouponDTO, VerifyCouponDTO
from modules.coupons.exceptions import CouponAlreadyExists, CouponInUse, CouponNotFound
from modules.coupons.filters import CouponFilter
from modules.coupons.models import Coupon
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.coupons.serializers import (
    AppliedCouponSerializer,
    CouponSerializer,
    VerifyCouponSerializer,
)
from modules.coupons.services import CouponService

NOT_FOUND = {"detail": "Coupon not found."}


class CouponViewSet(ListModelMixin, GenericViewSet):
    filterset_class = CouponFilter
    search_fields = ["code", "description"]
    ordering_fields = ["code", "usage_count", "created_at"]
    ordering = ["code"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Coupon.objects.all()
    serializer_class = CouponSerializer
    lookup_value_regex = "[^/]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CouponService(repository=CouponDjangoRepository())

    def get_permissions(self):
        if self.action == "verify":
            return [AllowAny()]
        return super().get_permissions()

    def get_throttles(self) -> list[BaseThrottle]:
        self.throttle_scope = "coupon_verify" if self.action == "verify" else None
        return super().get_throttles()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/coupons/{code}/"""
        try:
            coupon = self._service.get_coupon(pk)
        except CouponNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(CouponSerializer(coupon).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/coupons/"""
        data = request.data

        try:
            dto = CreateCouponDTO(
                code=data.get("code", ""),
                discount_type=data.get("discount_type", ""),
                discount_value=data.get("discount_value", 0),
                usage_limit=data.get("usage_limit", 0),
                minimum_cart_value=data.get("minimum_cart_value", "0.00"),
                description=data.get("description", ""),
                status=data.get("status", "Ativo"),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            coupon = self._service.create_coupon(dto)
        except CouponAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/coupons/{code}/"""
        data = request.data

        try:
            dto = UpdateCouponDTO(
                description=data.get("description"),
                status=data.get("status"),
                discount_type=data.get("discount_type"),
                discount_value=data.get("discount_value"),
                minimum_cart_value=data.get("minimum_cart_value"),
                usage_limit=data.get("usage_limit"),
            )
            coupon = self._service.update_coupon(pk, dto)
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except CouponNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        return Response(CouponSerializer(coupon).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/coupons/{code}/"""
        try:
            self._service.delete_coupon(pk)
        except CouponNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except CouponInUse as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    @action(detail=False, methods=["post"])
    def verify(self, request: Request) -> Response:
        """POST /api/v1/coupons/verify/

        Body: ``{"code", "cart_total", "customer_phone"?}``.  Without a
        phone the once-per-customer rule is not checked here; it is
        always checked again when the order is created.
        """
        serializer = VerifyCouponSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = VerifyCouponDTO(
            code=data["code"],
            cart_total=data["cart_total"],
            customer_phone=data.get("customer_phone", ""),
        )
        evaluation = self._service.verify(dto)

        body = {
            "valid": evaluation.valid,
            "message": evaluation.message,
            "discount": str(evaluation.discount),
        }
        if evaluation.valid:
            body["applied_coupon"] = AppliedCouponSerializer(evaluation.coupon).data
        return Response(body)
