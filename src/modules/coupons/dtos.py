"""Coupon DTOs for the Service Layer.

Pydantic v2 contracts; immutable (``frozen=True``).  Codes are
canonicalised to uppercase and phones to digits before they reach the
service.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from shared.domain.normalizers import canonical_code, digits_only

DiscountTypeLiteral = Literal["percentual", "fixo"]
CouponStatusLiteral = Literal["Ativo", "Inativo"]


class CreateCouponDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    discount_type: DiscountTypeLiteral
    discount_value: Decimal
    usage_limit: int
    minimum_cart_value: Decimal = Decimal("0.00")
    description: str = ""
    status: CouponStatusLiteral = "Ativo"

    @field_validator("code")
    @classmethod
    def canonicalise_code(cls, v: str) -> str:
        v = canonical_code(v)
        if not v:
            raise ValueError("Code must not be empty.")
        return v

    @field_validator("discount_value")
    @classmethod
    def value_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Discount value must be greater than zero.")
        return v

    @field_validator("minimum_cart_value")
    @classmethod
    def minimum_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Minimum cart value cannot be negative.")
        return v

    @field_validator("usage_limit")
    @classmethod
    def limit_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Usage limit must be at least 1.")
        return v

    @model_validator(mode="after")
    def percentage_at_most_100(self) -> Self:
        if self.discount_type == "percentual" and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100.")
        return self


class UpdateCouponDTO(BaseModel):
    """Partial update.  The code is the identity and cannot change."""

    model_config = ConfigDict(frozen=True)

    description: str | None = None
    status: CouponStatusLiteral | None = None
    discount_type: DiscountTypeLiteral | None = None
    discount_value: Decimal | None = None
    minimum_cart_value: Decimal | None = None
    usage_limit: int | None = None

    @field_validator("discount_value")
    @classmethod
    def value_must_be_positive(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v <= 0:
            raise ValueError("Discount value must be greater than zero.")
        return v

    @field_validator("minimum_cart_value")
    @classmethod
    def minimum_must_be_non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("Minimum cart value cannot be negative.")
        return v

    @field_validator("usage_limit")
    @classmethod
    def limit_must_be_positive(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("Usage limit must be at least 1.")
        return v


class VerifyCouponDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    cart_total: Decimal
    customer_phone: str = ""

    @field_validator("code")
    @classmethod
    def canonicalise_code(cls, v: str) -> str:
        return canonical_code(v)

    @field_validator("cart_total")
    @classmethod
    def total_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Cart total cannot be negative.")
        return v

    @field_validator("customer_phone", mode="before")
    @classmethod
    def canonicalise_phone(cls, v: str | None) -> str:
        return digits_only(v)
