"""Services package."""

from plansync.services.storage import (
    LedgerError,
    LedgerQueryError,
    LedgerSource,
    LedgerUnavailableError,
    LocalStore,
    SQLiteLedger,
    StorageError,
    StoreCorruptError,
    open_local_store,
)

__all__ = [
    "LedgerError",
    "LedgerQueryError",
    "LedgerSource",
    "LedgerUnavailableError",
    "LocalStore",
    "SQLiteLedger",
    "StorageError",
    "StoreCorruptError",
    "open_local_store",
]
