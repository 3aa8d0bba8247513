"""Order DTOs for the Service Layer.

Pydantic v2 contracts between the API layer and ``OrderService``.
DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: one line item; the price is resolved by the
  service from the catalogue, never taken from the client.
- ``CreateOrderDTO``: order creation, with optional coupon context.
- ``UpdateOrderDTO``: status change and/or mutable fields.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import OrderStatus
from shared.domain.normalizers import canonical_code, digits_only

_STATUS_BY_LABEL = {label.casefold(): value for value, label in OrderStatus.choices}


def parse_status(value: Any) -> Any:
    """Accept ``"CANCELLED"``, ``"cancelled"`` or the label ``"Cancelado"``."""
    if not isinstance(value, str):
        return value
    return _STATUS_BY_LABEL.get(value.strip().casefold(), value.strip().upper())


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one item, each product once.
    - ``shipping_fee`` cannot be negative.
    - ``coupon_code`` is canonicalised to uppercase and
      ``customer_phone`` to digits.
    """

    model_config = ConfigDict(frozen=True)

    items: List[CreateOrderItemDTO]
    customer_id: Optional[UUID] = None
    customer_phone: str = ""
    coupon_code: str = ""
    shipping_fee: Decimal = Decimal("0.00")
    origin: Optional[str] = None
    notes: str = ""
    delivery_address: str = ""
    scheduled_for: Optional[datetime] = None
    idempotency_key: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @field_validator("shipping_fee")
    @classmethod
    def shipping_fee_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Shipping fee cannot be negative.")
        return v

    @field_validator("customer_phone", mode="before")
    @classmethod
    def canonicalise_phone(cls, v: Optional[str]) -> str:
        return digits_only(v)

    @field_validator("coupon_code", mode="before")
    @classmethod
    def canonicalise_coupon(cls, v: Optional[str]) -> str:
        return canonical_code(v)

    @model_validator(mode="after")
    def no_duplicate_products(self):
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        return self


class UpdateOrderDTO(BaseModel):
    """Partial update: only non-``None`` fields are applied.

    Items, amounts and the coupon are fixed at creation and cannot be
    changed here.
    """

    model_config = ConfigDict(frozen=True)

    status: Optional[OrderStatus] = None
    notes: Optional[str] = None
    delivery_address: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    origin: Optional[str] = None
    changed_by: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def normalise_status(cls, v: Any) -> Any:
        return parse_status(v)
