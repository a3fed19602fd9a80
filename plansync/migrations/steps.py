"""
Additive Migration Steps

DESIGN DECISION: A step never asks "has this migration run before?".
It looks at the store and asks "is the table / column there?". This means:
1. Running every step on every launch is safe
2. A store left half-migrated by an earlier failure resumes where it stopped
3. No version table has to be kept in sync with the real schema

Additive steps only create; they never drop or rename user data.
"""

import re
from abc import ABC, abstractmethod
from typing import Sequence

from plansync.migrations.introspect import (
    column_exists,
    table_exists,
    validate_table_name,
)
from plansync.services.storage import LocalStore

_COLUMN_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class StepPreconditionError(Exception):
    """A step was run before a table it depends on exists."""
    pass


class MigrationStep(ABC):
    """
    One named, idempotent schema increment.

    Attributes:
        name: Stable identifier used in logs and reports
        requires: Tables that must exist before the step runs
        creates: Tables the step introduces
    """

    def __init__(
        self,
        name: str,
        requires: Sequence[str] = (),
        creates: Sequence[str] = (),
    ):
        self.name = name
        self.requires = tuple(requires)
        self.creates = tuple(creates)

    @abstractmethod
    async def apply(self, store: LocalStore) -> bool:
        """
        Bring the store up to this step.

        Returns:
            True if the store was changed, False if nothing was left to do
        """
        pass

    async def check_requirements(self, store: LocalStore) -> None:
        for table in self.requires:
            if not await table_exists(store, table):
                raise StepPreconditionError(
                    f"Step {self.name} requires table {table}, which does not exist"
                )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CreateTableStep(MigrationStep):
    """Create one table, with its constraints and indexes, if it is absent."""

    def __init__(
        self,
        name: str,
        table: str,
        statements: Sequence[str],
        requires: Sequence[str] = (),
    ):
        super().__init__(name, requires=requires, creates=(validate_table_name(table),))
        self.table = table
        self.statements = list(statements)

    async def apply(self, store: LocalStore) -> bool:
        if await table_exists(store, self.table):
            return False
        await self.check_requirements(store)
        for statement in self.statements:
            await store.execute(statement)
        await self.after_create(store)
        return True

    async def after_create(self, store: LocalStore) -> None:
        """Hook for work that must happen only when the table is new."""
        return None


class AddColumnStep(MigrationStep):
    """Add one column with its default to an existing table."""

    def __init__(self, name: str, table: str, column: str, definition: str):
        if not _COLUMN_NAME.match(column):
            raise ValueError(f"Invalid column name: {column}")
        super().__init__(name, requires=(validate_table_name(table),))
        self.table = table
        self.column = column
        self.definition = definition

    async def apply(self, store: LocalStore) -> bool:
        await self.check_requirements(store)
        if await column_exists(store, self.table, self.column):
            return False
        await store.execute(
            f"ALTER TABLE {self.table} ADD COLUMN {self.column} {self.definition}"
        )
        return True
