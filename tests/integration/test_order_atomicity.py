"""Order creation is all-or-nothing.

The coupon is booked after stock has already been decremented, so a
redemption that loses a race must roll the stock decrement and the order
row back with it.  The lost race is reproduced with repository doubles.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.core.models import OutboxEvent
from modules.coupons.evaluator import MSG_ALREADY_USED, MSG_EXHAUSTED
from modules.coupons.exceptions import CouponAlreadyUsed, CouponExhausted
from modules.coupons.models import Coupon, CouponRedemption
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import CouponRejected
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.integration

PHONE = "11987654321"


class UsageCapTakenRepository(CouponDjangoRepository):
    """Another order consumed the last use between evaluation and booking."""

    def increment_usage(self, code: str) -> bool:
        return False


class RedemptionNotYetVisibleRepository(CouponDjangoRepository):
    """The phone's earlier redemption is invisible at evaluation time."""

    def redemption_exists(self, code: str, customer_phone: str) -> bool:
        return False


def build_service(coupon_repository):
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        coupon_repository=coupon_repository,
    )


def order_dto(*pairs, coupon_code="BEMVINDO10", phone=PHONE):
    return CreateOrderDTO(
        items=[CreateOrderItemDTO(product_id=p.id, quantity=q) for p, q in pairs],
        coupon_code=coupon_code,
        customer_phone=phone,
    )


def stock_of(product):
    return Product.objects.get(id=product.id).stock_quantity


class TestCouponBookingFailureRollsBack:
    def test_usage_cap_taken_leaves_stock_and_orders_untouched(
        self, brigadeiro, bolo, bemvindo10
    ):
        service = build_service(UsageCapTakenRepository())

        with pytest.raises(CouponExhausted) as exc_info:
            service.create_order(order_dto((brigadeiro, 2), (bolo, 1)))

        assert isinstance(exc_info.value, CouponRejected)
        assert str(exc_info.value) == MSG_EXHAUSTED
        assert stock_of(brigadeiro) == 5
        assert stock_of(bolo) == 10
        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0
        assert CouponRedemption.objects.count() == 0
        assert OutboxEvent.objects.count() == 0

    def test_duplicate_redemption_rolls_back_usage_and_stock(
        self, brigadeiro, bemvindo10
    ):
        build_service(CouponDjangoRepository()).create_order(
            order_dto((brigadeiro, 2))
        )
        assert stock_of(brigadeiro) == 3

        service = build_service(RedemptionNotYetVisibleRepository())
        with pytest.raises(CouponAlreadyUsed) as exc_info:
            service.create_order(order_dto((brigadeiro, 2)))

        assert str(exc_info.value) == MSG_ALREADY_USED
        assert stock_of(brigadeiro) == 3
        assert Order.objects.count() == 1
        assert CouponRedemption.objects.count() == 1
        assert Coupon.objects.get(code="BEMVINDO10").usage_count == 1

    def test_failed_order_does_not_block_a_later_one(self, brigadeiro, bemvindo10):
        with pytest.raises(CouponRejected):
            build_service(UsageCapTakenRepository()).create_order(
                order_dto((brigadeiro, 1))
            )

        order = build_service(CouponDjangoRepository()).create_order(
            order_dto((brigadeiro, 3))
        )

        assert order.discount_amount == Decimal("3.00")
        assert stock_of(brigadeiro) == 2
        assert Coupon.objects.get(code="BEMVINDO10").usage_count == 1
