"""Customer DTOs for the Service Layer.

Pydantic v2 contracts between the API layer and ``CustomerService``.
DTOs are immutable (``frozen=True``).

- ``CreateCustomerDTO``: phone is canonicalised to digits; the document is
  optional but, when given, must be a valid CPF or CNPJ.
- ``UpdateCustomerDTO``: partial update.
- ``AddAddressDTO``: one delivery address to append.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator
from validate_docbr import CNPJ, CPF

from shared.domain.normalizers import digits_only


class DocumentTypeEnum(StrEnum):
    CPF = "CPF"
    CNPJ = "CNPJ"


def _canonical_phone(v: str) -> str:
    digits = digits_only(v)
    if len(digits) < 8:
        raise ValueError("Phone must have at least 8 digits.")
    return digits


class CreateCustomerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    phone: str
    email: EmailStr | None = None
    document: str | None = None
    document_type: DocumentTypeEnum | None = None
    address: str | None = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name must not be empty.")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def canonicalise_phone(cls, v: str) -> str:
        return _canonical_phone(v)

    @field_validator("document", mode="before")
    @classmethod
    def sanitize_document(cls, v: str | None) -> str | None:
        """Accept formatted or raw input; blank means no document."""
        if not isinstance(v, str):
            return v
        return digits_only(v) or None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_document(self) -> Self:
        """Check CPF/CNPJ with *validate-docbr* when a document is given."""
        if self.document is None:
            return self
        if self.document_type is None:
            raise ValueError("document_type is required when document is given.")

        validator = CPF() if self.document_type == DocumentTypeEnum.CPF else CNPJ()
        if not validator.validate(self.document):
            raise ValueError(f"Invalid {self.document_type} number.")
        return self


class UpdateCustomerDTO(BaseModel):
    """Partial update: only non-``None`` fields are applied."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    phone: str | None = None
    email: EmailStr | None = None
    is_active: bool | None = None

    @field_validator("phone")
    @classmethod
    def canonicalise_phone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _canonical_phone(v)


class AddAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str

    @field_validator("address")
    @classmethod
    def address_must_not_be_empty(cls, v: str) -> str:
        v = " ".join(v.split())
        if not v:
            raise ValueError("Address must not be empty.")
        return v
