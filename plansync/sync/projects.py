"""
Project Sync from the External Ledger

Projects in the planner start life as labels the user typed on transaction
splits in the desktop ledger. This module turns the distinct labels into
project rows in the local store.

GUARANTEES:
- The ledger is only read
- An existing project is never modified, only missing ones are added
- A missing or unreadable ledger means "nothing to import", not a failure
"""

from typing import Iterable, Optional

import structlog

from plansync.audit import AuditLogger
from plansync.config import Settings
from plansync.services.storage import (
    LedgerError,
    LedgerSource,
    LocalStore,
    SQLiteLedger,
    open_local_store,
)

logger = structlog.get_logger(__name__)

INSERT_PROJECT_IF_ABSENT = """
    INSERT INTO projects (name, startDate, endDate, plannedBudget, archived)
    SELECT ?, NULL, NULL, NULL, 0
    WHERE NOT EXISTS (SELECT 1 FROM projects WHERE name = ?)
"""


def normalize_project_labels(labels: Iterable[Optional[str]]) -> list[str]:
    """
    Trim labels and drop empty ones and duplicates.

    Comparison is exact after trimming, so "Trip" and " Trip " are one
    project while "Trip" and "trip" are two. First-seen order is kept.
    """
    seen: set[str] = set()
    result: list[str] = []
    for label in labels:
        if label is None:
            continue
        name = str(label).strip()
        if not name or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


class ProjectImporter:
    """
    Imports project labels from a ledger into an open store.
    """

    def __init__(
        self,
        ledger: LedgerSource,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger
        self._audit_logger = audit_logger

    async def import_projects(self, store: LocalStore) -> int:
        """
        Add every ledger project label missing from the store.

        The store is persisted by its scope when it closes, once for the
        whole import.

        Returns:
            Number of distinct labels processed (including ones that
            already existed); 0 when the ledger is absent or unreadable
        """
        if not self._ledger.exists():
            if self._audit_logger:
                await self._audit_logger.log_ledger_missing(self._ledger.location)
            return 0

        try:
            raw_labels = await self._ledger.fetch_project_labels()
        except LedgerError as e:
            if self._audit_logger:
                await self._audit_logger.log_ledger_query_failed(self._ledger.location, str(e))
            return 0

        labels = normalize_project_labels(raw_labels)
        inserted = 0
        for name in labels:
            inserted += await store.execute(INSERT_PROJECT_IF_ABSENT, (name, name))

        logger.debug("projects_inserted", processed=len(labels), inserted=inserted)
        if self._audit_logger:
            await self._audit_logger.log_projects_imported(len(labels), self._ledger.location)
        return len(labels)


def create_ledger(settings: Settings) -> SQLiteLedger:
    """Build the ledger reader described by the settings."""
    return SQLiteLedger(
        settings.store.ledger_path,
        attempts=settings.store.ledger_read_attempts,
        max_wait=settings.store.ledger_retry_max_wait,
    )


async def sync_projects_from_ledger(
    settings: Settings,
    audit_logger: Optional[AuditLogger] = None,
) -> int:
    """
    On-demand project sync against the configured files.

    Skipped (returns 0) when the local store does not exist yet; the
    bootstrapper is responsible for creating it.
    """
    store_path = settings.store.store_path
    if not store_path.exists():
        if audit_logger:
            await audit_logger.log_store_missing(str(store_path))
        return 0

    importer = ProjectImporter(create_ledger(settings), audit_logger)
    async with open_local_store(store_path) as store:
        count = await importer.import_projects(store)

    if store.persisted and audit_logger:
        await audit_logger.log_store_persisted(str(store_path))
    return count
