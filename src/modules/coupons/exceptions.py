"""Coupon domain exceptions.

Raised by the Service Layer and the ``RedemptionTracker``; views
translate them into HTTP responses.
"""

from __future__ import annotations


class CouponNotFound(Exception):
    """No coupon exists with the given code."""


class CouponAlreadyExists(Exception):
    """A coupon with the same (canonical) code already exists."""


class CouponInUse(Exception):
    """The coupon has redemptions on record and cannot be deleted."""


class CouponRejected(Exception):
    """The coupon cannot be applied; ``str(exc)`` is the customer-facing reason."""


class CouponExhausted(CouponRejected):
    """The usage limit was reached, possibly by a concurrent order."""


class CouponAlreadyUsed(CouponRejected):
    """The customer phone already redeemed this coupon."""
