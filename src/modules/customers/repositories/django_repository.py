"""Django ORM implementation of the Customer repository.

Look-ups return ``None`` for missing or malformed IDs; the Service Layer
decides how a missing customer becomes an API response.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F

from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Customer]:
        try:
            return Customer.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Customer]:
        """List live customers with optional Django ORM look-ups.

        Examples of valid filters::

            {"is_active": True}
            {"name__icontains": "maria", "is_active": True}
        """
        queryset = Customer.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Customer) -> Customer:
        is_new = entity._state.adding
        entity.save()
        logger.info("customer.saved", customer_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        customer = self.get_by_id(id)
        if not customer:
            return False
        customer.delete()
        logger.info("customer.soft_deleted", customer_id=str(id))
        return True

    @transaction.atomic
    def save_fields(self, entity: Customer, fields: Sequence[str]) -> Customer:
        entity.save(update_fields=list(fields))
        logger.info(
            "customer.saved", customer_id=str(entity.id), fields=list(fields)
        )
        return entity

    def get_by_phone(self, phone: str) -> Optional[Customer]:
        return Customer.objects.filter(phone=phone).first()

    def get_by_email(self, email: str) -> Optional[Customer]:
        return Customer.objects.filter(email__iexact=email).first()

    def get_by_document(self, document: str) -> Optional[Customer]:
        return Customer.objects.filter(document=document).first()

    def get_for_update(self, id: str) -> Optional[Customer]:
        try:
            return Customer.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def increment_total_spent(
        self, id: UUID, amount: Decimal, when: datetime
    ) -> bool:
        updated = Customer.objects.filter(id=id).update(
            total_spent=F("total_spent") + amount,
            last_purchase_at=when,
            updated_at=when,
        )
        return updated == 1
