"""Customer repository interface.

Extends ``IRepository[Customer]`` with the look-ups used for uniqueness
checks and the row-level primitives used by ``CustomerLedger``.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Sequence
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for the Customer aggregate."""

    @abstractmethod
    def get_by_phone(self, phone: str) -> Optional[Customer]:
        """Retrieve a customer by digits-only phone."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Customer]:
        """Retrieve a customer by email address."""

    @abstractmethod
    def get_by_document(self, document: str) -> Optional[Customer]:
        """Retrieve a customer by CPF/CNPJ."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Customer]:
        """Retrieve a live customer and lock its row until commit."""

    @abstractmethod
    def save_fields(self, entity: Customer, fields: Sequence[str]) -> Customer:
        """Write only ``fields`` of an existing customer."""

    @abstractmethod
    def increment_total_spent(
        self, id: UUID, amount: Decimal, when: datetime
    ) -> bool:
        """Add ``amount`` to the lifetime total in a single UPDATE."""
