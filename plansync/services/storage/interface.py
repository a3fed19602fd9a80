"""
Abstract Storage Interface

DESIGN DECISION: The external ledger is reached only through a small
read-only interface. This allows us to:
1. Keep the importer independent of how the ledger file is opened
2. Use in-memory ledgers for testing
3. Guarantee the ledger is never written: there is no write method

The local store, by contrast, is always a SQLite file loaded whole into
memory (see sqlite_store.py); it has no interface of its own.
"""

from abc import ABC, abstractmethod


class LedgerSource(ABC):
    """
    Read-only view of the desktop application's ledger.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location of the ledger, used in logs."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """
        Whether the ledger is present at all.

        An absent ledger is a normal condition (first launch before the
        desktop application has synced), not an error.
        """
        pass

    @abstractmethod
    async def fetch_project_labels(self) -> list[str]:
        """
        Distinct non-empty project labels attached to transaction splits.

        Labels are returned as stored; callers normalize them.

        Raises:
            LedgerUnavailableError: If the ledger is absent
            LedgerQueryError: If the expected table or column is missing
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StoreCorruptError(StorageError):
    """The local store file exists but cannot be read as a database."""
    pass


class LedgerError(StorageError):
    """Base exception for external ledger access."""
    pass


class LedgerUnavailableError(LedgerError):
    """The external ledger file does not exist."""
    pass


class LedgerQueryError(LedgerError):
    """The external ledger exists but does not answer the expected query."""
    pass
