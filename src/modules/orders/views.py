"""Order API views.

Exposes ``OrderService`` over HTTP.  Domain exceptions are caught and
translated into status codes; anything else propagates to DRF, and the
service's atomic block guarantees nothing was written.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, UpdateOrderDTO
from modules.orders.exceptions import (
    CouponRejected,
    CustomerNotFound,
    InactiveCustomer,
    InactiveProduct,
    MissingCustomerPhone,
    OrderNotFound,
    ProductNotFound,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderSerializer,
)
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository

NOT_FOUND = {"detail": "Order not found."}


class OrderViewSet(GenericViewSet):
    """Order creation, status updates, listing and soft delete."""

    queryset = Order.objects.alive()
    filterset_class = OrderFilter
    search_fields = ["order_number", "customer__name", "customer_phone"]
    ordering_fields = ["created_at", "total_amount", "status", "scheduled_for"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            coupon_repository=CouponDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Define escopos de throttling por ação."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header: a repeated
        key returns the order created the first time.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        if not create_serializer.is_valid():
            return Response(
                {"detail": "Invalid order payload.", "errors": create_serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        data = create_serializer.validated_data
        try:
            dto = CreateOrderDTO(
                items=[
                    CreateOrderItemDTO(
                        product_id=item["product_id"],
                        quantity=item["quantity"],
                    )
                    for item in data["items"]
                ],
                customer_id=data.get("customer_id"),
                customer_phone=data.get("customer_phone", ""),
                coupon_code=data.get("coupon_code", ""),
                shipping_fee=data.get("shipping_fee"),
                origin=data.get("origin") or None,
                notes=data.get("notes", ""),
                delivery_address=data.get("delivery_address", ""),
                scheduled_for=data.get("scheduled_for"),
                idempotency_key=request.headers.get("Idempotency-Key"),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self._service.create_order(dto)
        except CustomerNotFound:
            return Response(
                {"detail": "Customer not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except ProductNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except (
            InactiveCustomer,
            InactiveProduct,
            MissingCustomerPhone,
            CouponRejected,
        ) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        return Order.objects.alive().select_related("customer")

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filters: status, customer, origin, coupon, date range, total range.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except OrderNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Update / Destroy
    # ------------------------------------------------------------------

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/orders/{pk}/

        ``status`` accepts the code (``CANCELLED``) or its label
        (``Cancelado``).  Other supplied fields are merged.
        """
        update_serializer = UpdateOrderSerializer(data=request.data)
        if not update_serializer.is_valid():
            return Response(
                {"detail": "Invalid order payload.", "errors": update_serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        data = update_serializer.validated_data
        try:
            dto = UpdateOrderDTO(
                status=data.get("status"),
                notes=data.get("notes"),
                delivery_address=data.get("delivery_address"),
                scheduled_for=data.get("scheduled_for"),
                origin=data.get("origin"),
                changed_by=request.user.get_username(),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self._service.update_order(pk, dto)
        except OrderNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/"""
        try:
            self._service.delete_order(pk)
        except OrderNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
