"""Customer service layer (Use Cases).

Business rules enforced here:
- Phone, email and document are unique across customers.
- ``addresses`` only grows; adding an address already on file is a no-op.
- Soft delete via repository.

``total_spent`` and ``last_purchase_at`` are not writable here: they
belong to ``CustomerLedger``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.customers.exceptions import CustomerAlreadyExists, CustomerNotFound
from modules.customers.models import Customer

if TYPE_CHECKING:
    from modules.customers.dtos import (
        AddAddressDTO,
        CreateCustomerDTO,
        UpdateCustomerDTO,
    )
    from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerService:
    """Application service for Customer use-cases."""

    def __init__(self, repository: ICustomerRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_customer(self, dto: CreateCustomerDTO) -> Customer:
        """Create a new customer after enforcing uniqueness rules.

        Raises:
            CustomerAlreadyExists: phone, email or document already taken.
        """
        log = logger.bind(phone_suffix=dto.phone[-4:])

        if self._repo.get_by_phone(dto.phone):
            log.warning("customer.duplicate_phone")
            raise CustomerAlreadyExists("Phone already registered.")

        if dto.email and self._repo.get_by_email(dto.email):
            log.warning("customer.duplicate_email")
            raise CustomerAlreadyExists("Email already registered.")

        if dto.document and self._repo.get_by_document(dto.document):
            log.warning("customer.duplicate_document")
            raise CustomerAlreadyExists(
                f"Document {dto.document_type} already registered."
            )

        customer = Customer(
            name=dto.name,
            phone=dto.phone,
            email=dto.email,
            document=dto.document,
            document_type=dto.document_type or "",
            addresses=[dto.address] if dto.address else [],
        )
        customer = self._repo.save(customer)
        log.info("customer.created", customer_id=str(customer.id))
        return customer

    @transaction.atomic
    def update_customer(self, id: str, dto: UpdateCustomerDTO) -> Customer:
        """Update an existing customer with the supplied fields.

        The row is locked and only the supplied columns are written, so
        ledger totals and addresses committed meanwhile are kept.

        Raises:
            CustomerNotFound: the customer does not exist.
            CustomerAlreadyExists: the new phone or email collides.
        """
        customer = self._repo.get_for_update(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")

        log = logger.bind(customer_id=str(id))

        if dto.phone is not None and dto.phone != customer.phone:
            if self._repo.get_by_phone(dto.phone):
                log.warning("customer.duplicate_phone")
                raise CustomerAlreadyExists("Phone already registered.")

        if dto.email is not None and dto.email != customer.email:
            if self._repo.get_by_email(dto.email):
                log.warning("customer.duplicate_email")
                raise CustomerAlreadyExists("Email already registered.")

        changed = []
        for field in ("name", "phone", "email", "is_active"):
            value = getattr(dto, field)
            if value is not None:
                setattr(customer, field, value)
                changed.append(field)

        if changed:
            customer = self._repo.save_fields(customer, changed)
        log.info("customer.updated", fields=changed)
        return customer

    @transaction.atomic
    def add_address(self, id: str, dto: AddAddressDTO) -> Customer:
        """Append a delivery address unless it is already on file.

        The customer row is locked so two concurrent appends cannot
        overwrite each other.

        Raises:
            CustomerNotFound: the customer does not exist.
        """
        customer = self._repo.get_for_update(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")

        if dto.address in customer.addresses:
            logger.info("customer.address_already_known", customer_id=str(id))
            return customer

        customer.addresses = [*customer.addresses, dto.address]
        customer.save(update_fields=["addresses"])
        logger.info(
            "customer.address_added",
            customer_id=str(id),
            address_count=len(customer.addresses),
        )
        return customer

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_customers(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> List[Customer]:
        return self._repo.list(filters)

    def get_customer(self, id: str) -> Customer:
        """Raises ``CustomerNotFound`` when the customer does not exist."""
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")
        return customer

    @transaction.atomic
    def delete_customer(self, id: str) -> None:
        if not self._repo.delete(id):
            raise CustomerNotFound(f"Customer {id} not found.")
