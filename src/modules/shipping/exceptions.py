"""Shipping domain exceptions."""

from __future__ import annotations


class ShippingNotConfigured(Exception):
    """The maps API key or the store address is missing."""


class ShippingProviderError(Exception):
    """The distance provider could not be reached or answered with an error."""


class DestinationNotFound(Exception):
    """The provider found no route to the destination address."""
