"""Coupon repository interface.

Besides CRUD keyed by canonical code, exposes the store-level primitives
the ``RedemptionTracker`` relies on: row locking, conditional usage
increments and redemption records.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.coupons.models import Coupon, CouponRedemption


class ICouponRepository(IRepository["Coupon"]):
    """Repository contract for the Coupon aggregate."""

    @abstractmethod
    def get_for_update(self, code: str) -> Optional[Coupon]:
        """Retrieve a coupon and lock its row until commit."""

    @abstractmethod
    def increment_usage(self, code: str) -> bool:
        """Bump ``usage_count`` only while active and below the limit."""

    @abstractmethod
    def decrement_usage(self, code: str) -> bool:
        """Lower ``usage_count`` by one, never below zero."""

    @abstractmethod
    def redemption_exists(self, code: str, customer_phone: str) -> bool:
        """Whether the phone already redeemed the coupon."""

    @abstractmethod
    def add_redemption(
        self, code: str, customer_phone: str, order_id: UUID
    ) -> CouponRedemption:
        """Insert a redemption; raises ``IntegrityError`` on a duplicate phone."""

    @abstractmethod
    def delete_redemption(self, code: str, order_id: UUID) -> int:
        """Remove the redemption recorded for an order."""

    @abstractmethod
    def has_redemptions(self, code: str) -> bool:
        """Whether any redemption references the coupon."""
