"""Redemption Tracker: coupon usage bookkeeping for orders.

``redeem`` and ``release`` run inside the order service's atomic block,
next to the stock movements, so an order's coupon effects commit or roll
back with the rest of the order.

Over-redemption is prevented by the store, not by the earlier evaluation:

- the usage bump is ``UPDATE ... WHERE usage_count < usage_limit``; zero
  rows updated means another order took the last use;
- the redemption row is guarded by a unique ``(coupon, customer_phone)``
  constraint; a violation means the same phone redeemed concurrently.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from django.db import IntegrityError, transaction

from modules.coupons.evaluator import MSG_ALREADY_USED, MSG_EXHAUSTED
from modules.coupons.exceptions import CouponAlreadyUsed, CouponExhausted
from modules.coupons.models import CouponRedemption
from modules.coupons.repositories.interfaces import ICouponRepository
from shared.domain.normalizers import canonical_code, digits_only
from shared.domain.transactions import require_atomic_block

logger = structlog.get_logger(__name__)


class RedemptionTracker:
    def __init__(self, coupon_repository: ICouponRepository) -> None:
        self._coupon_repo = coupon_repository

    def has_redeemed(self, code: str, customer_phone: str) -> bool:
        phone = digits_only(customer_phone)
        if not phone:
            return False
        return self._coupon_repo.redemption_exists(code, phone)

    def redeem(self, code: str, customer_phone: str, order_id: UUID) -> CouponRedemption:
        """Consume one use of *code* for *customer_phone* on *order_id*.

        Raises:
            CouponExhausted: the conditional increment updated no row.
            CouponAlreadyUsed: the phone already holds a redemption.
        """
        require_atomic_block("Coupon bookkeeping")
        code = canonical_code(code)
        phone = digits_only(customer_phone)
        log = logger.bind(code=code, order_id=str(order_id))

        if not self._coupon_repo.increment_usage(code):
            log.warning("coupon.redemption_race_exhausted")
            raise CouponExhausted(MSG_EXHAUSTED)

        try:
            with transaction.atomic():
                redemption = self._coupon_repo.add_redemption(code, phone, order_id)
        except IntegrityError:
            log.warning("coupon.redemption_race_already_used")
            raise CouponAlreadyUsed(MSG_ALREADY_USED)

        log.info("coupon.redeemed")
        return redemption

    def release(self, code: str, order_id: UUID) -> None:
        """Undo ``redeem`` for a cancelled order."""
        require_atomic_block("Coupon bookkeeping")
        code = canonical_code(code)
        log = logger.bind(code=code, order_id=str(order_id))

        removed = self._coupon_repo.delete_redemption(code, order_id)
        if not self._coupon_repo.decrement_usage(code):
            log.warning("coupon.release_usage_already_zero")
        log.info("coupon.released", redemptions_removed=removed)

