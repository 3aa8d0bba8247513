"""Coupon Evaluator.

Pure eligibility check shared by ``POST /coupons/verify/`` and the
authoritative re-check inside order creation.  Checks run in a fixed
order and the first failure wins, so the same cart always gets the same
message:

1. coupon missing
2. coupon not active
3. usage limit reached
4. cart below the minimum value
5. already redeemed by this customer

The discount is ``subtotal * value / 100`` for ``percentual`` coupons and
``value`` for ``fixo`` ones, never more than the subtotal, rounded half up
to cents.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from modules.coupons.models import Coupon, DiscountType
from shared.domain.money import ZERO, format_brl, to_currency

MSG_NOT_FOUND = "Coupon not found."
MSG_INACTIVE = "Coupon is not active."
MSG_EXHAUSTED = "Coupon usage limit reached."
MSG_BELOW_MINIMUM = "Minimum cart value for this coupon is {minimum}."
MSG_ALREADY_USED = "Coupon already used by this customer."
MSG_APPLIED = "Coupon applied."


@dataclass(frozen=True)
class CouponEvaluation:
    valid: bool
    message: str
    discount: Decimal = ZERO
    coupon: Optional[Coupon] = None


def compute_discount(discount_type: str, value: Decimal, subtotal: Decimal) -> Decimal:
    if discount_type == DiscountType.PERCENTAGE:
        raw = subtotal * value / Decimal(100)
    else:
        raw = value
    return to_currency(max(ZERO, min(raw, subtotal)))


def evaluate_coupon(
    coupon: Optional[Coupon],
    subtotal: Decimal,
    already_redeemed: bool = False,
) -> CouponEvaluation:
    """Decide whether *coupon* applies to a cart of *subtotal*.

    ``already_redeemed`` is whether a redemption exists for the customer's
    phone; pass ``False`` when no phone is known.
    """
    if coupon is None:
        return CouponEvaluation(valid=False, message=MSG_NOT_FOUND)
    if not coupon.is_active:
        return CouponEvaluation(valid=False, message=MSG_INACTIVE, coupon=coupon)
    if coupon.is_exhausted:
        return CouponEvaluation(valid=False, message=MSG_EXHAUSTED, coupon=coupon)
    if subtotal < coupon.minimum_cart_value:
        return CouponEvaluation(
            valid=False,
            message=MSG_BELOW_MINIMUM.format(
                minimum=format_brl(coupon.minimum_cart_value)
            ),
            coupon=coupon,
        )
    if already_redeemed:
        return CouponEvaluation(valid=False, message=MSG_ALREADY_USED, coupon=coupon)

    discount = compute_discount(
        coupon.discount_type, Decimal(coupon.discount_value), Decimal(subtotal)
    )
    return CouponEvaluation(
        valid=True, message=MSG_APPLIED, discount=discount, coupon=coupon
    )
