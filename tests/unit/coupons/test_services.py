"""Unit tests for CouponService (CRUD and verify)."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.coupons.dtos import CreateCouponDTO, UpdateCouponDTO, VerifyCouponDTO
from modules.coupons.evaluator import MSG_ALREADY_USED, MSG_NOT_FOUND
from modules.coupons.exceptions import CouponAlreadyExists, CouponInUse, CouponNotFound
from modules.coupons.models import Coupon, CouponRedemption
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.coupons.services import CouponService
from modules.orders.models import Order

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return CouponService(CouponDjangoRepository())


def redeem_for(coupon, phone):
    order = Order.objects.create(customer_phone=phone, coupon_code=coupon.code)
    Coupon.objects.filter(code=coupon.code).update(usage_count=1)
    return CouponRedemption.objects.create(
        coupon=coupon, customer_phone=phone, order=order
    )


# ===========================================================================
# DTOs
# ===========================================================================


class TestCouponDTOs:
    def test_code_is_canonicalised(self):
        dto = CreateCouponDTO(
            code=" natal5 ", discount_type="fixo", discount_value="5", usage_limit=3
        )
        assert dto.code == "NATAL5"

    def test_percentage_over_100_rejected(self):
        with pytest.raises(ValidationError):
            CreateCouponDTO(
                code="X", discount_type="percentual", discount_value="120", usage_limit=1
            )

    def test_unknown_discount_type_rejected(self):
        with pytest.raises(ValidationError):
            CreateCouponDTO(
                code="X", discount_type="brinde", discount_value="1", usage_limit=1
            )

    def test_zero_usage_limit_rejected(self):
        with pytest.raises(ValidationError):
            CreateCouponDTO(
                code="X", discount_type="fixo", discount_value="1", usage_limit=0
            )

    def test_verify_dto_normalises_phone_and_code(self):
        dto = VerifyCouponDTO(
            code="bemvindo10", cart_total="30", customer_phone="(11) 98765-4321"
        )
        assert dto.code == "BEMVINDO10"
        assert dto.customer_phone == "11987654321"


# ===========================================================================
# CRUD
# ===========================================================================


class TestCreateCoupon:
    def test_creates_with_zero_usage(self, service):
        coupon = service.create_coupon(
            CreateCouponDTO(
                code="natal5", discount_type="fixo", discount_value="5", usage_limit=3
            )
        )
        assert coupon.code == "NATAL5"
        assert coupon.usage_count == 0
        assert coupon.status == "Ativo"

    def test_duplicate_code_case_insensitive(self, service, bemvindo10):
        with pytest.raises(CouponAlreadyExists):
            service.create_coupon(
                CreateCouponDTO(
                    code="bemvindo10",
                    discount_type="fixo",
                    discount_value="5",
                    usage_limit=3,
                )
            )


class TestUpdateCoupon:
    def test_updates_supplied_fields(self, service, bemvindo10):
        coupon = service.update_coupon(
            "bemvindo10", UpdateCouponDTO(status="Inativo", usage_limit=50)
        )
        assert coupon.status == "Inativo"
        assert coupon.usage_limit == 50
        assert coupon.discount_value == Decimal("10")

    def test_limit_below_usage_rejected(self, service, bemvindo10):
        Coupon.objects.filter(code="BEMVINDO10").update(usage_count=5)
        with pytest.raises(ValueError):
            service.update_coupon("BEMVINDO10", UpdateCouponDTO(usage_limit=4))

    def test_switch_to_percentage_over_100_rejected(self, service):
        Coupon.objects.create(
            code="FIXO200",
            discount_type="fixo",
            discount_value=Decimal("200"),
            usage_limit=1,
        )
        with pytest.raises(ValueError):
            service.update_coupon("FIXO200", UpdateCouponDTO(discount_type="percentual"))

    def test_missing_coupon(self, service):
        with pytest.raises(CouponNotFound):
            service.update_coupon("NOPE", UpdateCouponDTO(status="Inativo"))


class TestDeleteCoupon:
    def test_deletes_unused_coupon(self, service, bemvindo10):
        service.delete_coupon("bemvindo10")
        assert not Coupon.objects.filter(code="BEMVINDO10").exists()

    def test_redeemed_coupon_cannot_be_deleted(self, service, bemvindo10):
        redeem_for(bemvindo10, "11987654321")
        with pytest.raises(CouponInUse):
            service.delete_coupon("BEMVINDO10")

    def test_missing_coupon(self, service):
        with pytest.raises(CouponNotFound):
            service.delete_coupon("NOPE")


# ===========================================================================
# Verify
# ===========================================================================


class TestVerify:
    def test_valid_cart(self, service, bemvindo10):
        result = service.verify(
            VerifyCouponDTO(code="bemvindo10", cart_total=Decimal("30.00"))
        )
        assert result.valid
        assert result.discount == Decimal("3.00")
        assert result.coupon.code == "BEMVINDO10"

    def test_below_minimum(self, service, bemvindo10):
        result = service.verify(
            VerifyCouponDTO(code="BEMVINDO10", cart_total=Decimal("15.00"))
        )
        assert not result.valid
        assert "R$ 20.00" in result.message

    def test_unknown_code(self, service):
        result = service.verify(VerifyCouponDTO(code="NOPE", cart_total=Decimal("30")))
        assert not result.valid
        assert result.message == MSG_NOT_FOUND

    def test_phone_that_already_redeemed(self, service, bemvindo10):
        redeem_for(bemvindo10, "11987654321")
        result = service.verify(
            VerifyCouponDTO(
                code="BEMVINDO10",
                cart_total=Decimal("30.00"),
                customer_phone="11 98765-4321",
            )
        )
        assert not result.valid
        assert result.message == MSG_ALREADY_USED

    def test_without_phone_redemption_is_not_checked(self, service, bemvindo10):
        redeem_for(bemvindo10, "11987654321")
        result = service.verify(
            VerifyCouponDTO(code="BEMVINDO10", cart_total=Decimal("30.00"))
        )
        assert result.valid

    def test_verify_never_changes_usage(self, service, bemvindo10):
        service.verify(VerifyCouponDTO(code="BEMVINDO10", cart_total=Decimal("30")))
        bemvindo10.refresh_from_db()
        assert bemvindo10.usage_count == 0
