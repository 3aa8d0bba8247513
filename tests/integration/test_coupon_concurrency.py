"""Concurrent checkouts competing for the same coupon.

Scenarios:
- Coupon with **3 uses left**, 8 different phones check out at once:
  exactly 3 orders succeed and ``usage_count`` ends at the limit.
- The same phone checks out 5 times at once: exactly one order gets the
  coupon.

Losers must leave no trace: stock only moves for the winning orders.

Uses ``TransactionTestCase`` so each thread commits on its own connection.
Row locks need a backend with ``SELECT ... FOR UPDATE``, so the cases are
skipped on SQLite.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

from django.db import connections
from django.test import TransactionTestCase, skipUnlessDBFeature

from modules.coupons.models import Coupon, CouponRedemption, DiscountType
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import CouponRejected
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product, ProductStatus
from modules.products.repositories.django_repository import ProductDjangoRepository

INITIAL_STOCK = 50
USAGE_LIMIT = 3
NUM_WORKERS = 8


@skipUnlessDBFeature("has_select_for_update")
class TestCouponConcurrency(TransactionTestCase):
    def setUp(self):
        self.product = Product.objects.create(
            sku="BRI-CONC",
            name="Caixa de Brigadeiros",
            price=Decimal("36.00"),
            stock_quantity=INITIAL_STOCK,
            status=ProductStatus.ACTIVE,
        )
        self.coupon = Coupon.objects.create(
            code="FESTA",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal("5.00"),
            usage_limit=USAGE_LIMIT,
        )

    def _checkout(self, phone: str) -> str:
        """Place one couponed order; returns ``"ok"`` or ``"rejected"``."""
        connections.close_all()
        try:
            service = OrderService(
                order_repository=OrderDjangoRepository(),
                customer_repository=CustomerDjangoRepository(),
                product_repository=ProductDjangoRepository(),
                coupon_repository=CouponDjangoRepository(),
            )
            try:
                service.create_order(
                    CreateOrderDTO(
                        items=[
                            CreateOrderItemDTO(product_id=self.product.id, quantity=1)
                        ],
                        coupon_code="festa",
                        customer_phone=phone,
                    )
                )
            except CouponRejected:
                return "rejected"
            return "ok"
        finally:
            connections.close_all()

    def _run(self, phones: list[str]) -> list[str]:
        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            futures = [pool.submit(self._checkout, phone) for phone in phones]
            return [future.result() for future in as_completed(futures)]

    def test_usage_limit_is_never_exceeded(self):
        phones = [f"1190000{i:04d}" for i in range(NUM_WORKERS)]

        results = self._run(phones)

        self.assertEqual(results.count("ok"), USAGE_LIMIT)
        self.assertEqual(results.count("rejected"), NUM_WORKERS - USAGE_LIMIT)
        self.coupon.refresh_from_db()
        self.assertEqual(self.coupon.usage_count, USAGE_LIMIT)
        self.assertEqual(CouponRedemption.objects.count(), USAGE_LIMIT)
        self.assertEqual(Order.objects.count(), USAGE_LIMIT)

        # initial = sold + remaining
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, INITIAL_STOCK - USAGE_LIMIT)

    def test_same_phone_redeems_once(self):
        self.coupon.usage_limit = 100
        self.coupon.save(update_fields=["usage_limit"])

        results = self._run(["11987654321"] * 5)

        self.assertEqual(results.count("ok"), 1)
        self.assertEqual(results.count("rejected"), 4)
        self.coupon.refresh_from_db()
        self.assertEqual(self.coupon.usage_count, 1)
        self.assertEqual(
            CouponRedemption.objects.filter(customer_phone="11987654321").count(), 1
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, INITIAL_STOCK - 1)
