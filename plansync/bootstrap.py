"""
Store Bootstrapper

First-run handling for the local store:

    missing   -> create the file with the minimal schema, import projects
    empty     -> make sure the minimal schema is there, import projects
    populated -> nothing to do

The bootstrapper runs before the migration orchestrator on every launch,
because several migration steps reference the projects table it creates.
"""

from typing import Optional

from plansync.audit import AuditLogger
from plansync.config import Settings
from plansync.migrations.introspect import row_count, table_exists
from plansync.migrations.schema import PROJECTS_TABLE, SETTINGS_TABLE
from plansync.models.migration import StoreState
from plansync.services.storage import LocalStore, open_local_store
from plansync.sync.projects import ProjectImporter, create_ledger


MINIMAL_SCHEMA = (
    ("projects", PROJECTS_TABLE),
    ("settings", SETTINGS_TABLE),
)


async def ensure_minimal_schema(store: LocalStore) -> bool:
    """Create the projects and settings tables if absent."""
    changed = False
    for table, statements in MINIMAL_SCHEMA:
        if await table_exists(store, table):
            continue
        for statement in statements:
            await store.execute(statement)
        changed = True
    return changed


class StoreBootstrapper:
    """
    Creates or fills the local store on first run.
    """

    def __init__(
        self,
        settings: Settings,
        importer: Optional[ProjectImporter] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store_path = settings.store.store_path
        self._audit_logger = audit_logger
        self._importer = importer or ProjectImporter(create_ledger(settings), audit_logger)

    async def ensure_store(self) -> StoreState:
        """
        Bring the store out of the missing/empty state.

        Returns:
            The state the store was found in

        Raises:
            StoreCorruptError: If the store file exists but is unreadable
        """
        path = str(self._store_path)
        state = StoreState.EMPTY
        async with open_local_store(self._store_path, create=True) as store:
            if store.created:
                state = StoreState.MISSING
            elif await row_count(store, "projects") > 0:
                state = StoreState.POPULATED

            if state == StoreState.POPULATED:
                if self._audit_logger:
                    await self._audit_logger.log_store_already_populated(path)
                return state

            await ensure_minimal_schema(store)
            if state == StoreState.MISSING and self._audit_logger:
                await self._audit_logger.log_store_created(path)

            count = await self._importer.import_projects(store)
            if self._audit_logger:
                await self._audit_logger.log_store_populated(path, count)

        if store.persisted and self._audit_logger:
            await self._audit_logger.log_store_persisted(path)
        return state
