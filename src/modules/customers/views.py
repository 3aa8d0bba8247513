"""Customer API views.

Exposes ``CustomerService`` over HTTP.  Domain exceptions are caught and
translated into status codes; anything else propagates to DRF.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.customers.dtos import AddAddressDTO, CreateCustomerDTO, UpdateCustomerDTO
from modules.customers.exceptions import CustomerAlreadyExists, CustomerNotFound
from modules.customers.filters import CustomerFilter
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer
from modules.customers.services import CustomerService

NOT_FOUND = {"detail": "Customer not found."}


class CustomerViewSet(ListModelMixin, GenericViewSet):
    """Customer CRUD plus the append-only address book."""

    filterset_class = CustomerFilter
    search_fields = ["name", "email", "phone"]
    ordering_fields = ["name", "created_at", "total_spent", "last_purchase_at"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Customer.objects.alive()
    serializer_class = CustomerSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CustomerService(repository=CustomerDjangoRepository())

    def get_queryset(self):
        return Customer.objects.alive()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/"""
        try:
            customer = self._service.get_customer(pk)
        except CustomerNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(CustomerSerializer(customer).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/customers/"""
        data = request.data

        try:
            dto = CreateCustomerDTO(
                name=data.get("name", ""),
                phone=data.get("phone", ""),
                email=data.get("email"),
                document=data.get("document"),
                document_type=data.get("document_type") or None,
                address=data.get("address"),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            customer = self._service.create_customer(dto)
        except CustomerAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        return Response(
            CustomerSerializer(customer).data, status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/customers/{pk}/"""
        data = request.data

        try:
            dto = UpdateCustomerDTO(
                name=data.get("name"),
                phone=data.get("phone"),
                email=data.get("email"),
                is_active=data.get("is_active"),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            customer = self._service.update_customer(pk, dto)
        except CustomerNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except CustomerAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        return Response(CustomerSerializer(customer).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/customers/{pk}/"""
        try:
            self._service.delete_customer(pk)
        except CustomerNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="addresses")
    def add_address(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/customers/{pk}/addresses/ ``{"address": "..."}``"""
        try:
            dto = AddAddressDTO(address=request.data.get("address") or "")
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            customer = self._service.add_address(pk, dto)
        except CustomerNotFound:
            return Response(NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        return Response(CustomerSerializer(customer).data)
