"""Catalogue endpoints.

``ProductService`` does the work; this module only turns request bodies
into DTOs and domain exceptions into ``{"detail": ...}`` responses.
Stock moved by orders never passes through here.
"""

from __future__ import annotations

from typing import Any

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService

CREATE_FIELDS = ("sku", "name", "price", "description", "category", "stock_quantity")
UPDATE_FIELDS = ("name", "price", "description", "category", "stock_quantity", "status")


def _detail(message: str, code: int) -> Response:
    return Response({"detail": message}, status=code)


def _supplied(data: Any, fields: tuple[str, ...]) -> dict[str, Any]:
    """Keys of ``data`` among ``fields`` that the client actually sent."""
    return {field: data[field] for field in fields if field in data}


class ProductViewSet(ListModelMixin, GenericViewSet):
    """Bakery catalogue.

    ``PATCH .../stock/`` records a manual count (for example after a
    production batch); prices and descriptions go through ``update``.
    """

    filterset_class = ProductFilter
    search_fields = ["name", "sku", "description", "category"]
    ordering_fields = ["name", "price", "stock_quantity", "created_at"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Product.objects.alive()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def get_queryset(self):
        return Product.objects.alive()

    def _apply(self, pk: str | None, dto: UpdateProductDTO) -> Response:
        try:
            product = self._service.update_product(pk, dto)
        except ProductNotFound:
            return _detail("Product not found.", status.HTTP_404_NOT_FOUND)
        return Response(ProductSerializer(product).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(pk)
        except ProductNotFound:
            return _detail("Product not found.", status.HTTP_404_NOT_FOUND)
        return Response(ProductSerializer(product).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        payload = _supplied(request.data, CREATE_FIELDS)
        try:
            dto = CreateProductDTO(**payload)
        except (PydanticValidationError, ValueError) as exc:
            return _detail(str(exc), status.HTTP_400_BAD_REQUEST)

        try:
            product = self._service.create_product(dto)
        except ProductAlreadyExists as exc:
            return _detail(str(exc), status.HTTP_409_CONFLICT)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/

        Only the fields present in the body are written.
        """
        payload = _supplied(request.data, UPDATE_FIELDS)
        try:
            dto = UpdateProductDTO(**payload)
        except (PydanticValidationError, ValueError) as exc:
            return _detail(str(exc), status.HTTP_400_BAD_REQUEST)
        return self._apply(pk, dto)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    @action(detail=True, methods=["patch"], url_path="stock")
    def update_stock(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/stock/ with ``{"stock_quantity": N}``."""
        if request.data.get("stock_quantity") is None:
            return _detail(
                "Field 'stock_quantity' is required.", status.HTTP_400_BAD_REQUEST
            )
        try:
            dto = UpdateProductDTO(stock_quantity=request.data["stock_quantity"])
        except (PydanticValidationError, ValueError) as exc:
            return _detail(str(exc), status.HTTP_400_BAD_REQUEST)
        return self._apply(pk, dto)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/ (soft delete)."""
        try:
            self._service.delete_product(pk)
        except ProductNotFound:
            return _detail("Product not found.", status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
