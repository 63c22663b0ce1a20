"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The ledger is persisted as a single JSON blob; audit events go to a
separate append-only store.
"""

from finance_ledger.services.storage.interface import (
    AuditStorageInterface,
    StateStorageInterface,
    StorageError,
)
from finance_ledger.services.storage.json_file import JsonFileStateStorage
from finance_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryStateStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "StateStorageInterface",
    # Exceptions
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryStateStorage",
    "JsonFileStateStorage",
]
