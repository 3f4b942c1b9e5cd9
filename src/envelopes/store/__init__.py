"""Storage layer for envelopes application."""

from envelopes.store.base import StateStorage
from envelopes.store.factories import create_sqlite_storage, create_memory_storage
from envelopes.store.state import BudgetStore, STORAGE_KEY

__all__ = [
    "StateStorage",
    "create_sqlite_storage",
    "create_memory_storage",
    "BudgetStore",
    "STORAGE_KEY",
]
