"""Django ORM implementation of the Coupon repository.

Usage counters are never read into Python and written back: both
directions are single conditional ``UPDATE`` statements whose affected
row count tells the caller whether the move happened.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.coupons.models import Coupon, CouponRedemption, CouponStatus
from modules.coupons.repositories.interfaces import ICouponRepository
from shared.domain.normalizers import canonical_code

logger = structlog.get_logger(__name__)


class CouponDjangoRepository(ICouponRepository):
    """Concrete Coupon repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Coupon]:
        return Coupon.objects.filter(code=canonical_code(id)).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Coupon]:
        queryset = Coupon.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Coupon) -> Coupon:
        entity.save()
        logger.info("coupon.saved", code=entity.code)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        deleted, _ = Coupon.objects.filter(code=canonical_code(id)).delete()
        if deleted:
            logger.info("coupon.deleted", code=canonical_code(id))
        return bool(deleted)

    def get_for_update(self, code: str) -> Optional[Coupon]:
        return (
            Coupon.objects.select_for_update()
            .filter(code=canonical_code(code))
            .first()
        )

    def increment_usage(self, code: str) -> bool:
        updated = Coupon.objects.filter(
            code=canonical_code(code),
            status=CouponStatus.ACTIVE,
            usage_count__lt=F("usage_limit"),
        ).update(usage_count=F("usage_count") + 1, updated_at=timezone.now())
        return updated == 1

    def decrement_usage(self, code: str) -> bool:
        updated = Coupon.objects.filter(
            code=canonical_code(code),
            usage_count__gt=0,
        ).update(usage_count=F("usage_count") - 1, updated_at=timezone.now())
        return updated == 1

    def redemption_exists(self, code: str, customer_phone: str) -> bool:
        return CouponRedemption.objects.filter(
            coupon_id=canonical_code(code),
            customer_phone=customer_phone,
        ).exists()

    def add_redemption(
        self, code: str, customer_phone: str, order_id: UUID
    ) -> CouponRedemption:
        return CouponRedemption.objects.create(
            coupon_id=canonical_code(code),
            customer_phone=customer_phone,
            order_id=order_id,
        )

    def delete_redemption(self, code: str, order_id: UUID) -> int:
        deleted, _ = CouponRedemption.objects.filter(
            coupon_id=canonical_code(code),
            order_id=order_id,
        ).delete()
        return deleted

    def has_redemptions(self, code: str) -> bool:
        return CouponRedemption.objects.filter(
            coupon_id=canonical_code(code)
        ).exists()
