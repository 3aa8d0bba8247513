"""Currency helpers.

All monetary values are ``Decimal`` in BRL with two decimal places.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_currency(value: Union[Decimal, int, str]) -> Decimal:
    """Quantize *value* to cents, rounding half up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_brl(value: Decimal) -> str:
    """``Decimal("20")`` -> ``"R$ 20.00"``."""
    return f"R$ {to_currency(value)}"
