"""Customer model.

Business rules implemented:
- Phone is the customer's identity at the counter and is stored as digits
  only; it must be unique.
- Email and CPF/CNPJ document are optional; when present they are unique.
- ``addresses`` is an append-only set of delivery addresses.
- ``total_spent`` only grows, through ``CustomerLedger.accrue``.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
- The document is masked in ``__str__`` and logs.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.db import models
from validate_docbr import CNPJ, CPF

from modules.core.models import SoftDeleteModel
from shared.domain.normalizers import digits_only

logger = structlog.get_logger(__name__)


class DocumentType(models.TextChoices):
    CPF = "CPF", "CPF"
    CNPJ = "CNPJ", "CNPJ"


class Customer(SoftDeleteModel):
    """Customer aggregate root."""

    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, unique=True)
    email = models.EmailField(max_length=254, unique=True, null=True, blank=True)
    document = models.CharField(max_length=14, unique=True, null=True, blank=True)
    document_type = models.CharField(
        max_length=4, choices=DocumentType.choices, blank=True, default=""
    )
    addresses = models.JSONField(default=list, blank=True)
    total_spent = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    last_purchase_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
            models.Index(fields=["is_active"], name="customers_active_idx"),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        self.phone = digits_only(self.phone)
        if self.document:
            self.document = digits_only(self.document)
            self._validate_document()

    def _validate_document(self) -> None:
        """Validate CPF or CNPJ using *validate-docbr*."""
        if self.document_type == DocumentType.CPF:
            validator = CPF()
        elif self.document_type == DocumentType.CNPJ:
            validator = CNPJ()
        else:
            raise ValidationError({"document_type": "Invalid document type."})

        if not validator.validate(self.document):
            logger.warning(
                "customer.invalid_document",
                document_type=self.document_type,
                document_suffix=self.document[-4:],
            )
            raise ValidationError({"document": f"Invalid {self.document_type} number."})

    def save(self, *args, **kwargs) -> None:
        self.phone = digits_only(self.phone)
        if self.document:
            self.document = digits_only(self.document)
        else:
            self.document = None
        if not self.email:
            self.email = None
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        if not self.document:
            return self.name
        return f"{self.name} ({self.document_type}: ***{self.document[-4:]})"
