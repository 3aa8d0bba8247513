"""Order domain exceptions.

Raised by the Service Layer when business rules are violated; views
translate them into HTTP responses.  Product, customer and coupon
failures reuse the exceptions of their own modules, re-exported here so
callers have a single import point.
"""

from __future__ import annotations

from modules.coupons.exceptions import CouponRejected
from modules.customers.exceptions import CustomerNotFound, InactiveCustomer
from modules.products.exceptions import ProductNotFound


class OrderNotFound(Exception):
    """The requested order does not exist or has been soft-deleted."""


class InactiveProduct(Exception):
    """A product referenced by an order item is inactive."""


class MissingCustomerPhone(Exception):
    """A coupon was applied but no phone identifies the customer."""


__all__ = [
    "CouponRejected",
    "CustomerNotFound",
    "InactiveCustomer",
    "InactiveProduct",
    "MissingCustomerPhone",
    "OrderNotFound",
    "ProductNotFound",
]
