"""Guard for writes that must share the caller's unit of work."""

from __future__ import annotations

from django.db import transaction


class LedgerOutsideTransaction(RuntimeError):
    """A ledger write was attempted without an open ``transaction.atomic``."""


def require_atomic_block(what: str) -> None:
    if not transaction.get_connection().in_atomic_block:
        raise LedgerOutsideTransaction(f"{what} must be part of an order transaction.")
