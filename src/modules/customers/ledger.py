"""Customer Ledger: lifetime spending totals.

Only the order service calls ``accrue``, once per finalized order.  The
increment is a single ``UPDATE ... SET total_spent = total_spent + x`` so
concurrent finalizations for the same customer never lose an amount.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

import structlog

from modules.customers.repositories.interfaces import ICustomerRepository
from shared.domain.money import ZERO, to_currency
from shared.domain.transactions import require_atomic_block

logger = structlog.get_logger(__name__)


class CustomerLedger:
    def __init__(self, customer_repository: ICustomerRepository) -> None:
        self._customer_repo = customer_repository

    def accrue(self, customer_id: UUID, amount: Decimal, when: datetime) -> bool:
        """Add ``amount`` to the customer's total and stamp ``last_purchase_at``.

        Non-positive amounts are ignored.  Returns ``False`` when nothing was
        written, either for that reason or because the customer row is gone.
        """
        require_atomic_block("Customer accrual")
        amount = to_currency(amount)
        if amount <= ZERO:
            return False

        log = logger.bind(customer_id=str(customer_id), amount=str(amount))
        if not self._customer_repo.increment_total_spent(customer_id, amount, when):
            log.warning("customer.accrual_skipped_missing_customer")
            return False
        log.info("customer.accrued")
        return True
