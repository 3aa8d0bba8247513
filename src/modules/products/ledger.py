"""Inventory Ledger: stock movements caused by orders.

``apply_delta`` is only ever called by the order service, inside the same
``transaction.atomic`` block that records the coupon bookkeeping, so stock
and coupon changes commit or roll back together.  Each movement is a
single ``UPDATE ... SET stock_quantity = stock_quantity + delta``; no
stock value is read into Python and written back.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Iterable, Literal, Protocol
from uuid import UUID

import structlog

from modules.products.exceptions import ProductNotFound
from modules.products.repositories.interfaces import IProductRepository
from shared.domain.transactions import require_atomic_block

logger = structlog.get_logger(__name__)

DECREMENT: Literal[-1] = -1
INCREMENT: Literal[1] = 1


class LineItem(Protocol):
    product_id: UUID
    quantity: int


class InventoryLedger:
    def __init__(self, product_repository: IProductRepository) -> None:
        self._product_repo = product_repository

    def apply_delta(self, line_items: Iterable[LineItem], sign: Literal[-1, 1]) -> None:
        """Move stock for every line item: ``-1`` on sale, ``+1`` on restock.

        Quantities for the same product are merged and products are
        updated in ID order, so concurrent orders lock rows in the same
        sequence.

        Raises:
            LedgerOutsideTransaction: no atomic block is open.
            ProductNotFound: a product to decrement no longer exists.
        """
        if sign not in (DECREMENT, INCREMENT):
            raise ValueError("sign must be -1 or +1")
        require_atomic_block("Stock movements")

        totals: "OrderedDict[UUID, int]" = OrderedDict()
        for item in sorted(line_items, key=lambda i: str(i.product_id)):
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity

        for product_id, quantity in totals.items():
            delta = sign * quantity
            if self._product_repo.adjust_stock(product_id, delta):
                logger.info(
                    "inventory.stock_moved",
                    product_id=str(product_id),
                    delta=delta,
                )
                continue
            if sign == DECREMENT:
                raise ProductNotFound(f"Product {product_id} not found.")
            logger.warning(
                "inventory.restock_skipped_missing_product",
                product_id=str(product_id),
                quantity=quantity,
            )
