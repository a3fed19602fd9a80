"""
Tests for the account preference flag migration.

Each test seeds account_preferences in one of its historical shapes and
checks that the step converges to the two-flag schema.
"""

import sqlite3

import pytest

from plansync.migrations.account_preferences import AccountPreferencesStep, detect_state
from plansync.models import PreferenceSchemaState
from plansync.services.storage import open_local_store

CLEAN_COLUMNS = ["accountId", "accountName", "includeChecking", "includeSavings"]

LEGACY_TABLE = (
    "CREATE TABLE account_preferences ("
    "accountId TEXT PRIMARY KEY, accountName TEXT, excluded INTEGER DEFAULT 0)"
)


@pytest.fixture
def legacy_store(store_path, sqlite_file):
    return sqlite_file(
        store_path,
        [LEGACY_TABLE],
        [
            ("INSERT INTO account_preferences VALUES (?, ?, ?)", ("acc-1", "Checking", 1)),
            ("INSERT INTO account_preferences VALUES (?, ?, ?)", ("acc-2", "Savings", 0)),
            ("INSERT INTO account_preferences VALUES (?, ?, ?)", ("acc-3", None, None)),
        ],
    )


def _rows(query, path):
    return query(
        path,
        "SELECT accountId, accountName, includeSavings, includeChecking "
        "FROM account_preferences ORDER BY accountId",
    )


class TestDetectState:

    @pytest.mark.asyncio
    async def test_absent(self, store_path):
        async with open_local_store(store_path, create=True) as store:
            assert await detect_state(store) == PreferenceSchemaState.ABSENT

    @pytest.mark.asyncio
    async def test_legacy_only(self, legacy_store):
        async with open_local_store(legacy_store) as store:
            assert await detect_state(store) == PreferenceSchemaState.LEGACY_ONLY

    @pytest.mark.asyncio
    async def test_partial(self, store_path, sqlite_file):
        sqlite_file(
            store_path,
            [
                "CREATE TABLE account_preferences (accountId TEXT PRIMARY KEY, "
                "accountName TEXT, excluded INTEGER, includeSavings INTEGER DEFAULT 1)"
            ],
        )
        async with open_local_store(store_path) as store:
            assert await detect_state(store) == PreferenceSchemaState.PARTIAL

    @pytest.mark.asyncio
    async def test_transitional(self, store_path, sqlite_file):
        sqlite_file(
            store_path,
            [
                "CREATE TABLE account_preferences (accountId TEXT PRIMARY KEY, "
                "accountName TEXT, excluded INTEGER, "
                "includeSavings INTEGER DEFAULT 1, includeChecking INTEGER DEFAULT 1)"
            ],
        )
        async with open_local_store(store_path) as store:
            assert await detect_state(store) == PreferenceSchemaState.TRANSITIONAL


class TestAccountPreferencesStep:

    @pytest.mark.asyncio
    async def test_creates_table_when_absent(self, store_path, schema_of):
        async with open_local_store(store_path, create=True) as store:
            assert await AccountPreferencesStep().apply(store) is True
        assert schema_of(store_path)["account_preferences"] == CLEAN_COLUMNS

    @pytest.mark.asyncio
    async def test_legacy_flag_is_split_and_removed(self, legacy_store, query, schema_of):
        async with open_local_store(legacy_store) as store:
            assert await AccountPreferencesStep().apply(store) is True
            assert await detect_state(store) == PreferenceSchemaState.CLEAN

        assert schema_of(legacy_store) == {"account_preferences": CLEAN_COLUMNS}
        assert _rows(query, legacy_store) == [
            ("acc-1", "Checking", 0, 0),
            ("acc-2", "Savings", 1, 1),
            ("acc-3", "", 1, 1),
        ]

    @pytest.mark.asyncio
    async def test_partial_keeps_existing_flag(self, store_path, sqlite_file, query, schema_of):
        sqlite_file(
            store_path,
            [
                "CREATE TABLE account_preferences (accountId TEXT PRIMARY KEY, "
                "accountName TEXT, excluded INTEGER, includeSavings INTEGER DEFAULT 1)"
            ],
            [
                (
                    "INSERT INTO account_preferences VALUES (?, ?, ?, ?)",
                    ("acc-1", "Checking", 0, 0),
                ),
            ],
        )
        async with open_local_store(store_path) as store:
            assert await AccountPreferencesStep().apply(store) is True

        assert schema_of(store_path)["account_preferences"] == CLEAN_COLUMNS
        assert _rows(query, store_path) == [("acc-1", "Checking", 0, 1)]

    @pytest.mark.asyncio
    async def test_clean_table_is_untouched(self, legacy_store):
        async with open_local_store(legacy_store) as store:
            await AccountPreferencesStep().apply(store)
        after_first = legacy_store.read_bytes()

        async with open_local_store(legacy_store) as store:
            assert await AccountPreferencesStep().apply(store) is False
        assert not store.persisted
        assert legacy_store.read_bytes() == after_first

    @pytest.mark.asyncio
    async def test_failed_copy_leaves_legacy_table(self, store_path, sqlite_file, query, schema_of):
        # Without a primary key the legacy table can hold duplicate ids,
        # which the rebuilt table refuses
        sqlite_file(
            store_path,
            ["CREATE TABLE account_preferences (accountId TEXT, accountName TEXT, excluded INTEGER)"],
            [
                ("INSERT INTO account_preferences VALUES (?, ?, ?)", ("acc-1", "A", 0)),
                ("INSERT INTO account_preferences VALUES (?, ?, ?)", ("acc-1", "B", 1)),
            ],
        )
        before = schema_of(store_path)

        async with open_local_store(store_path) as store:
            with pytest.raises(sqlite3.IntegrityError):
                async with store.savepoint("step_account_preferences"):
                    await AccountPreferencesStep().apply(store)
            assert await detect_state(store) == PreferenceSchemaState.LEGACY_ONLY

        assert not store.persisted
        assert schema_of(store_path) == before
