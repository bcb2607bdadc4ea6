"""Ledger package: the in-memory store and the figures derived from it."""

from wisevault.ledger import metrics
from wisevault.ledger.store import LedgerChange, LedgerStore, Listener

__all__ = ["LedgerChange", "LedgerStore", "Listener", "metrics"]
