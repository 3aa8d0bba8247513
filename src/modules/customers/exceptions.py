"""Customer domain exceptions.

Raised by the Service Layer; views translate them into HTTP responses.
"""

from __future__ import annotations


class CustomerAlreadyExists(Exception):
    """Phone, email or document is already registered to another customer."""


class CustomerNotFound(Exception):
    """The requested customer does not exist or has been soft-deleted."""


class InactiveCustomer(Exception):
    """The customer is deactivated and cannot place orders."""
