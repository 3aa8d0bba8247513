"""Shipping DTOs."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator


class ShippingQuoteRequestDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    destination: str

    @field_validator("destination")
    @classmethod
    def destination_must_not_be_empty(cls, v: str) -> str:
        v = " ".join(v.split())
        if not v:
            raise ValueError("Destination address must not be empty.")
        return v


class ShippingQuoteDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    destination: str
    distance_km: Decimal
    fee: Decimal
    cached: bool = False
