"""
Tests for first-run store handling.
"""

import pytest

from plansync.bootstrap import StoreBootstrapper
from plansync.migrations.schema import PROJECTS_TABLE
from plansync.models import MigrationEventType, StoreState


class TestStoreBootstrapper:

    @pytest.mark.asyncio
    async def test_missing_store_is_created_from_ledger(
        self, settings, store_path, make_ledger, query, audit_logger
    ):
        make_ledger(["Trip", " Car ", None])
        bootstrapper = StoreBootstrapper(settings, audit_logger=audit_logger)

        assert await bootstrapper.ensure_store() == StoreState.MISSING

        assert store_path.exists()
        assert sorted(n for (n,) in query(store_path, "SELECT name FROM projects")) == ["Car", "Trip"]
        assert query(store_path, "SELECT COUNT(*) FROM settings") == [(0,)]
        assert audit_logger.events_of_type(MigrationEventType.STORE_CREATED)
        assert audit_logger.events_of_type(MigrationEventType.STORE_PERSISTED)

    @pytest.mark.asyncio
    async def test_missing_store_without_ledger(self, settings, store_path, query, audit_logger):
        bootstrapper = StoreBootstrapper(settings, audit_logger=audit_logger)

        assert await bootstrapper.ensure_store() == StoreState.MISSING

        assert query(store_path, "SELECT COUNT(*) FROM projects") == [(0,)]
        assert audit_logger.events_of_type(MigrationEventType.LEDGER_MISSING)

    @pytest.mark.asyncio
    async def test_empty_store_gets_schema_and_projects(
        self, settings, store_path, sqlite_file, make_ledger, query
    ):
        sqlite_file(store_path, ["CREATE TABLE settings (key TEXT PRIMARY KEY, value TEXT)"])
        make_ledger(["Trip"])

        assert await StoreBootstrapper(settings).ensure_store() == StoreState.EMPTY
        assert query(store_path, "SELECT name FROM projects") == [("Trip",)]

    @pytest.mark.asyncio
    async def test_populated_store_is_left_alone(
        self, settings, store_path, sqlite_file, make_ledger, query
    ):
        sqlite_file(
            store_path,
            PROJECTS_TABLE,
            [("INSERT INTO projects (name) VALUES (?)", ("Existing",))],
        )
        make_ledger(["Trip", "Car"])
        before = store_path.read_bytes()

        assert await StoreBootstrapper(settings).ensure_store() == StoreState.POPULATED

        assert store_path.read_bytes() == before
        assert query(store_path, "SELECT name FROM projects") == [("Existing",)]
