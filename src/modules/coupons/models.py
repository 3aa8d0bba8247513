"""Coupon and redemption models.

Business rules implemented:
- The uppercased code is the primary key, so codes are unique by
  construction and look-ups are case-insensitive once canonicalised.
- ``usage_count`` never exceeds ``usage_limit`` (check constraint); it
  moves only through conditional ``UPDATE`` statements issued by the
  ``RedemptionTracker``.
- A customer phone redeems a given coupon at most once, enforced by a
  unique constraint on ``(coupon, customer_phone)``.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from shared.domain.normalizers import canonical_code, digits_only


class CouponStatus(models.TextChoices):
    ACTIVE = "Ativo", "Ativo"
    INACTIVE = "Inativo", "Inativo"


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentual", "Percentual"
    FIXED = "fixo", "Fixo"


class Coupon(BaseModel):
    id = None
    code = models.CharField(max_length=50, primary_key=True)
    description = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(
        max_length=10,
        choices=CouponStatus.choices,
        default=CouponStatus.ACTIVE,
    )
    discount_type = models.CharField(max_length=12, choices=DiscountType.choices)
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    minimum_cart_value = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    usage_limit = models.PositiveIntegerField()
    usage_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "coupons"
        ordering = ["code"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(usage_count__lte=models.F("usage_limit")),
                name="coupons_usage_within_limit",
            ),
            models.CheckConstraint(
                condition=models.Q(discount_value__gt=0),
                name="coupons_discount_positive",
            ),
        ]

    @property
    def is_active(self) -> bool:
        return self.status == CouponStatus.ACTIVE

    @property
    def is_exhausted(self) -> bool:
        return self.usage_count >= self.usage_limit

    def save(self, *args, **kwargs) -> None:
        self.code = canonical_code(self.code)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.code} ({self.usage_count}/{self.usage_limit})"


class CouponRedemption(BaseModel):
    """Evidence that a customer phone consumed its one use of a coupon.

    ``created_at`` is the redemption timestamp.
    """

    coupon = models.ForeignKey(
        Coupon,
        on_delete=models.PROTECT,
        related_name="redemptions",
    )
    customer_phone = models.CharField(max_length=20)
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="coupon_redemptions",
    )

    class Meta:
        db_table = "coupon_redemptions"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["coupon", "customer_phone"],
                name="coupon_redemptions_one_per_phone",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        self.customer_phone = digits_only(self.customer_phone)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.coupon_id} by ***{self.customer_phone[-4:]}"
