"""Order service layer (Use Cases).

The order transaction coordinator.  Every write runs inside one
``transaction.atomic`` block, so an order and all of its side effects
commit together or not at all.

Creation:
- Resolve the optional customer (must exist and be active) and the
  products (must exist and be active); prices come from the catalogue.
- When a coupon is given: lock its row, re-evaluate it against the
  server-side subtotal (client discounts are never trusted), then consume
  one use and record the redemption for the customer's phone.
- Decrement stock for every line item.  There is no availability check:
  made-to-order products may go negative.

Status updates:
- The order row is locked and the prior status read before anything
  else, so concurrent updates serialise.
- Entering ``CANCELLED`` from another status returns the stock and
  releases the coupon, once per order (``stock_released_at``).
- Entering ``FINALIZED`` from another status adds the total to the
  customer's lifetime spending, once per order (``customer_accrued_at``).
- Other fields are merged after the side effects were decided from the
  pre-update snapshot.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction
from django.utils import timezone

from modules.coupons.evaluator import evaluate_coupon
from modules.coupons.redemptions import RedemptionTracker
from modules.customers.ledger import CustomerLedger
from modules.orders.constants import OrderStatus
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderFinalized,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    CouponRejected,
    CustomerNotFound,
    InactiveCustomer,
    InactiveProduct,
    MissingCustomerPhone,
    OrderNotFound,
    ProductNotFound,
)
from modules.products.ledger import DECREMENT, INCREMENT, InventoryLedger
from shared.domain.money import ZERO, to_currency

if TYPE_CHECKING:
    from modules.coupons.repositories.interfaces import ICouponRepository
    from modules.customers.models import Customer
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

MERGEABLE_FIELDS = ("notes", "delivery_address", "scheduled_for", "origin")


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection; stock, coupon and
    customer bookkeeping go through their ledgers.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
        coupon_repository: ICouponRepository,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._product_repo = product_repository
        self._coupon_repo = coupon_repository
        self._inventory = InventoryLedger(product_repository)
        self._redemptions = RedemptionTracker(coupon_repository)
        self._customer_ledger = CustomerLedger(customer_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create an order, decrement stock and redeem its coupon.

        Returns the existing order when ``idempotency_key`` was already
        used.

        Raises:
            CustomerNotFound: ``customer_id`` does not exist.
            InactiveCustomer: the customer is deactivated.
            ProductNotFound: a product does not exist.
            InactiveProduct: a product is inactive.
            MissingCustomerPhone: a coupon was given without a phone.
            CouponRejected: the coupon fails evaluation or loses a race.
        """
        log = logger.bind(
            customer_id=str(dto.customer_id) if dto.customer_id else None,
            coupon_code=dto.coupon_code or None,
        )
        log.info("order.creation_started", item_count=len(dto.items))

        if dto.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
            if existing:
                log.info("order.idempotency_hit", order_id=str(existing.id))
                return existing

        customer = self._resolve_customer(dto)
        lines = self._price_lines(dto)
        subtotal = to_currency(sum((line["subtotal"] for line in lines), ZERO))

        phone = dto.customer_phone or (customer.phone if customer else "")
        discount = ZERO
        if dto.coupon_code:
            if not phone:
                raise MissingCustomerPhone(
                    "customer_phone is required when a coupon is applied."
                )
            discount = self._evaluate_coupon(dto.coupon_code, subtotal, phone, log)

        total = to_currency(subtotal - discount + dto.shipping_fee)

        order = self._order_repo.create(
            {
                "customer_id": customer.id if customer else None,
                "customer_phone": phone,
                "coupon_code": dto.coupon_code,
                "origin": dto.origin,
                "subtotal": subtotal,
                "discount_amount": discount,
                "shipping_fee": to_currency(dto.shipping_fee),
                "total_amount": total,
                "notes": dto.notes,
                "delivery_address": dto.delivery_address,
                "scheduled_for": dto.scheduled_for,
                "idempotency_key": dto.idempotency_key,
                "items": lines,
            }
        )

        self._inventory.apply_delta(dto.items, DECREMENT)
        if dto.coupon_code:
            self._redemptions.redeem(dto.coupon_code, phone, order.id)

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                total_amount=str(total),
                coupon_code=dto.coupon_code,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=order.status,
            notes="Order created",
        )

        log.info(
            "order.created",
            order_id=str(order.id),
            subtotal=str(subtotal),
            discount=str(discount),
            total=str(total),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def update_order(self, order_id: str, dto: UpdateOrderDTO) -> Order:
        """Apply a status change and/or field updates to an order.

        Raises:
            OrderNotFound: the order does not exist.
        """
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        prior_status = order.status
        target = dto.status
        log = logger.bind(
            order_id=str(order.id), prior_status=prior_status, new_status=target
        )

        if target is not None and target != prior_status:
            now = timezone.now()
            if target == OrderStatus.CANCELLED:
                self._reverse_creation(order, now, log)
            elif target == OrderStatus.FINALIZED:
                self._accrue_customer(order, now, log)

            order.status = target
            order.add_domain_event(
                OrderStatusChanged(
                    aggregate_id=order.id,
                    old_status=prior_status,
                    new_status=target,
                )
            )
            self._order_repo.add_history(
                order_id=order.id,
                status=target,
                old_status=prior_status,
                notes=dto.notes or "",
                changed_by=dto.changed_by,
            )
        elif target is not None:
            log.info("order.status_unchanged")

        for field in MERGEABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(order, field, value)

        self._order_repo.save(order)
        log.info("order.updated")
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def delete_order(self, order_id: str) -> None:
        """Soft-delete an order.  Stock and coupon effects stay as they are."""
        if not self._order_repo.delete(order_id):
            raise OrderNotFound(f"Order {order_id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        return self._order_repo.list(filters)

    # ------------------------------------------------------------------
    # Creation helpers
    # ------------------------------------------------------------------

    def _resolve_customer(self, dto: CreateOrderDTO) -> Optional[Customer]:
        if dto.customer_id is None:
            return None
        customer = self._customer_repo.get_by_id(str(dto.customer_id))
        if not customer:
            raise CustomerNotFound(f"Customer {dto.customer_id} not found.")
        if not customer.is_active:
            raise InactiveCustomer(f"Customer {dto.customer_id} is inactive.")
        return customer

    def _price_lines(self, dto: CreateOrderDTO) -> List[Dict[str, Any]]:
        products = {
            p.id: p for p in self._product_repo.get_many(i.product_id for i in dto.items)
        }
        lines = []
        for item in dto.items:
            product = products.get(item.product_id)
            if product is None:
                raise ProductNotFound(f"Product {item.product_id} not found.")
            if not product.is_active:
                raise InactiveProduct(f"Product {product.sku} is inactive.")
            lines.append(
                {
                    "product_id": product.id,
                    "quantity": item.quantity,
                    "unit_price": product.price,
                    "subtotal": product.price * item.quantity,
                }
            )
        return lines

    def _evaluate_coupon(
        self, code: str, subtotal: Decimal, phone: str, log: Any
    ) -> Decimal:
        coupon = self._coupon_repo.get_for_update(code)
        already_redeemed = coupon is not None and self._redemptions.has_redeemed(
            code, phone
        )
        evaluation = evaluate_coupon(coupon, subtotal, already_redeemed)
        if not evaluation.valid:
            log.warning("order.coupon_rejected", reason=evaluation.message)
            raise CouponRejected(evaluation.message)
        return evaluation.discount

    # ------------------------------------------------------------------
    # Transition side effects
    # ------------------------------------------------------------------

    def _reverse_creation(self, order: Order, now, log: Any) -> None:
        if order.stock_released_at is not None:
            log.info("order.reversal_already_applied")
            return

        self._inventory.apply_delta(order.items.all(), INCREMENT)
        if order.coupon_code:
            self._redemptions.release(order.coupon_code, order.id)

        order.stock_released_at = now
        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                order_number=order.order_number,
                coupon_code=order.coupon_code,
            )
        )
        log.info("order.cancelled")

    def _accrue_customer(self, order: Order, now, log: Any) -> None:
        if order.customer_accrued_at is not None:
            log.info("order.accrual_already_applied")
            return
        if order.customer_id is None or order.total_amount <= ZERO:
            log.info("order.accrual_not_applicable")
            return

        self._customer_ledger.accrue(order.customer_id, order.total_amount, now)
        order.customer_accrued_at = now
        order.add_domain_event(
            OrderFinalized(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_id=str(order.customer_id),
                total_amount=str(order.total_amount),
            )
        )
        log.info("order.finalized")
