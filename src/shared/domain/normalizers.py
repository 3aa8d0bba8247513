"""Input normalisation shared across bounded contexts."""

from __future__ import annotations

import re


def digits_only(value: str | None) -> str:
    """Strip every non-digit character (phones, CPF/CNPJ)."""
    return re.sub(r"\D", "", value or "")


def canonical_code(value: str | None) -> str:
    """Coupon codes are case-insensitive and stored uppercased."""
    return (value or "").strip().upper()
