"""Domain events for the Orders bounded context.

Events are collected on the ``Order`` aggregate and written to the outbox
by ``OrderDjangoRepository.save``.  Amounts travel as strings so the JSON
payload keeps exact decimals.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""

    order_number: str = ""
    total_amount: str = "0.00"
    coupon_code: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order enters ``CANCELLED`` and its stock is returned."""

    order_number: str = ""
    coupon_code: str = ""


@dataclass(frozen=True)
class OrderFinalized(DomainEvent):
    """Raised the first time an order enters ``FINALIZED``."""

    order_number: str = ""
    customer_id: str = ""
    total_amount: str = "0.00"


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every status change."""

    old_status: str = ""
    new_status: str = ""
