"""
Tests for schema introspection.
"""

import pytest

from plansync.migrations.introspect import (
    column_exists,
    column_names,
    row_count,
    table_exists,
    validate_table_name,
)
from plansync.services.storage import open_local_store


@pytest.fixture
def legacy_store(store_path, sqlite_file):
    return sqlite_file(
        store_path,
        [
            "CREATE TABLE projects (id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "name TEXT NOT NULL UNIQUE, startDate TEXT, endDate TEXT, plannedBudget REAL)",
        ],
        [
            ("INSERT INTO projects (name) VALUES (?)", ("Trip",)),
            ("INSERT INTO projects (name) VALUES (?)", ("Car",)),
        ],
    )


class TestIntrospection:

    @pytest.mark.asyncio
    async def test_table_exists(self, legacy_store):
        async with open_local_store(legacy_store) as store:
            assert await table_exists(store, "projects")
            assert not await table_exists(store, "transactions")

    @pytest.mark.asyncio
    async def test_column_names(self, legacy_store):
        async with open_local_store(legacy_store) as store:
            columns = await column_names(store, "projects")
            assert columns == {"id", "name", "startDate", "endDate", "plannedBudget"}
            assert not await column_exists(store, "projects", "archived")

    @pytest.mark.asyncio
    async def test_missing_table_has_no_columns(self, legacy_store):
        async with open_local_store(legacy_store) as store:
            assert await column_names(store, "account_preferences") == set()

    @pytest.mark.asyncio
    async def test_row_count(self, legacy_store):
        async with open_local_store(legacy_store) as store:
            assert await row_count(store, "projects") == 2
            assert await row_count(store, "settings") == 0

    @pytest.mark.asyncio
    async def test_introspection_never_dirties_store(self, legacy_store):
        before = legacy_store.read_bytes()
        async with open_local_store(legacy_store) as store:
            await table_exists(store, "projects")
            await column_names(store, "projects")
            await row_count(store, "projects")
        assert not store.persisted
        assert legacy_store.read_bytes() == before

    def test_unknown_table_name_rejected(self):
        with pytest.raises(ValueError):
            validate_table_name("projects; DROP TABLE projects")

    @pytest.mark.asyncio
    async def test_row_count_rejects_unknown_table(self, legacy_store):
        async with open_local_store(legacy_store) as store:
            with pytest.raises(ValueError):
                await row_count(store, "sqlite_master")
