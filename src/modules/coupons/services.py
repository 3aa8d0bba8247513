"""Coupon service layer (Use Cases).

CRUD keyed by canonical code plus the read-only ``verify`` check used
before checkout.  Usage counters are not writable here; they belong to
the ``RedemptionTracker``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.coupons.evaluator import CouponEvaluation, evaluate_coupon
from modules.coupons.exceptions import CouponAlreadyExists, CouponInUse, CouponNotFound
from modules.coupons.models import Coupon
from modules.coupons.redemptions import RedemptionTracker

if TYPE_CHECKING:
    from modules.coupons.dtos import CreateCouponDTO, UpdateCouponDTO, VerifyCouponDTO
    from modules.coupons.repositories.interfaces import ICouponRepository

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = (
    "description",
    "status",
    "discount_type",
    "discount_value",
    "minimum_cart_value",
    "usage_limit",
)


class CouponService:
    def __init__(self, repository: ICouponRepository) -> None:
        self._repo = repository
        self._tracker = RedemptionTracker(repository)

    @transaction.atomic
    def create_coupon(self, dto: CreateCouponDTO) -> Coupon:
        """Raises ``CouponAlreadyExists`` when the code is taken."""
        if self._repo.get_by_id(dto.code):
            logger.warning("coupon.duplicate_code", code=dto.code)
            raise CouponAlreadyExists(f"Coupon '{dto.code}' already exists.")

        coupon = Coupon(
            code=dto.code,
            description=dto.description,
            status=dto.status,
            discount_type=dto.discount_type,
            discount_value=dto.discount_value,
            minimum_cart_value=dto.minimum_cart_value,
            usage_limit=dto.usage_limit,
        )
        coupon = self._repo.save(coupon)
        logger.info("coupon.created", code=coupon.code)
        return coupon

    @transaction.atomic
    def update_coupon(self, code: str, dto: UpdateCouponDTO) -> Coupon:
        """Apply the supplied fields; the row is locked while editing.

        Raises:
            CouponNotFound: no coupon with that code.
            ValueError: the new limit is below the uses already consumed,
                or a percentage would exceed 100.
        """
        coupon = self._repo.get_for_update(code)
        if not coupon:
            raise CouponNotFound(f"Coupon '{code}' not found.")

        for field in UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(coupon, field, value)

        if coupon.usage_limit < coupon.usage_count:
            raise ValueError(
                f"Usage limit cannot be lower than current usage ({coupon.usage_count})."
            )
        if coupon.discount_type == "percentual" and coupon.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100.")

        coupon = self._repo.save(coupon)
        logger.info("coupon.updated", code=coupon.code)
        return coupon

    def list_coupons(self, filters: Optional[Dict[str, Any]] = None) -> List[Coupon]:
        return self._repo.list(filters)

    def get_coupon(self, code: str) -> Coupon:
        coupon = self._repo.get_by_id(code)
        if not coupon:
            raise CouponNotFound(f"Coupon '{code}' not found.")
        return coupon

    @transaction.atomic
    def delete_coupon(self, code: str) -> None:
        """Raises ``CouponInUse`` once any order has redeemed the coupon."""
        if not self._repo.get_by_id(code):
            raise CouponNotFound(f"Coupon '{code}' not found.")
        if self._repo.has_redemptions(code):
            raise CouponInUse(
                f"Coupon '{code}' has redemptions; set it to Inativo instead."
            )
        self._repo.delete(code)

    def verify(self, dto: VerifyCouponDTO) -> CouponEvaluation:
        """Evaluate a coupon against a cart without touching any counter."""
        coupon = self._repo.get_by_id(dto.code) if dto.code else None
        already_redeemed = bool(coupon) and self._tracker.has_redeemed(
            coupon.code, dto.customer_phone
        )
        evaluation = evaluate_coupon(coupon, dto.cart_total, already_redeemed)
        logger.info(
            "coupon.verified",
            code=dto.code,
            valid=evaluation.valid,
            reason=evaluation.message,
        )
        return evaluation
