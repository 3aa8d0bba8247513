"""Product domain exceptions.

Raised by the Service Layer; views translate them into HTTP responses.
"""

from __future__ import annotations


class ProductAlreadyExists(Exception):
    """A product with the same SKU already exists."""


class ProductNotFound(Exception):
    """The requested product does not exist or has been soft-deleted."""
