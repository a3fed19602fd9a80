"""
Storage Services Package

Provides the ledger interface, the storage exceptions and the SQLite
implementations of both the local store scope and the ledger reader.
"""

from plansync.services.storage.interface import (
    LedgerError,
    LedgerQueryError,
    LedgerSource,
    LedgerUnavailableError,
    StorageError,
    StoreCorruptError,
)
from plansync.services.storage.sqlite_store import (
    LocalStore,
    SQLiteLedger,
    open_local_store,
)

__all__ = [
    # Interfaces
    "LedgerSource",
    # Exceptions
    "LedgerError",
    "LedgerQueryError",
    "LedgerUnavailableError",
    "StorageError",
    "StoreCorruptError",
    # SQLite implementation
    "LocalStore",
    "SQLiteLedger",
    "open_local_store",
]
