"""
Account Preferences: single "excluded" flag -> two inclusion flags

Older stores kept one `excluded` column per account, meaning "leave this
account out of every computation". Current stores keep two independent
flags, `includeSavings` and `includeChecking`.

The translation is deliberately simple: excluded=1 becomes both flags off,
excluded=0 becomes both flags on.

SQLite cannot drop a column in place on every version we meet, so the
legacy column is removed by building a shadow table, copying the rows,
dropping the old table and renaming the shadow. The whole step runs inside
one savepoint, so either all of that happens or none of it does.
"""

from plansync.migrations.introspect import column_names, table_exists
from plansync.migrations.schema import account_preferences_table
from plansync.migrations.steps import MigrationStep
from plansync.models.migration import PreferenceSchemaState
from plansync.services.storage import LocalStore

TABLE = "account_preferences"
SHADOW_TABLE = "account_preferences_new"

LEGACY_COLUMN = "excluded"
SAVINGS_COLUMN = "includeSavings"
CHECKING_COLUMN = "includeChecking"
FLAG_COLUMNS = (SAVINGS_COLUMN, CHECKING_COLUMN)

# Longest path: partial -> transitional -> clean
_MAX_TRANSITIONS = 4


async def detect_state(store: LocalStore) -> PreferenceSchemaState:
    """Classify the account_preferences table."""
    if not await table_exists(store, TABLE):
        return PreferenceSchemaState.ABSENT

    columns = await column_names(store, TABLE)
    has_legacy = LEGACY_COLUMN in columns
    present_flags = [c for c in FLAG_COLUMNS if c in columns]

    if len(present_flags) == len(FLAG_COLUMNS):
        return PreferenceSchemaState.TRANSITIONAL if has_legacy else PreferenceSchemaState.CLEAN
    if has_legacy and not present_flags:
        return PreferenceSchemaState.LEGACY_ONLY
    # Exactly one flag present, or no legacy column and a flag missing
    return PreferenceSchemaState.PARTIAL


class AccountPreferencesStep(MigrationStep):
    """
    Converge account_preferences to the two-flag schema.

    Each pass handles the current state and re-reads the schema, until the
    table is clean.
    """

    def __init__(self):
        super().__init__("account_preferences", creates=(TABLE,))

    async def apply(self, store: LocalStore) -> bool:
        changed = False
        for _ in range(_MAX_TRANSITIONS):
            state = await detect_state(store)
            if state == PreferenceSchemaState.CLEAN:
                return changed
            await self._advance(store, state)
            changed = True
        raise RuntimeError(f"{TABLE} did not converge to the two-flag schema")

    async def _advance(self, store: LocalStore, state: PreferenceSchemaState) -> None:
        if state == PreferenceSchemaState.ABSENT:
            for statement in account_preferences_table(TABLE):
                await store.execute(statement)
        elif state == PreferenceSchemaState.LEGACY_ONLY:
            await self._split_legacy_flag(store)
        elif state == PreferenceSchemaState.PARTIAL:
            await self._add_missing_flags(store)
        elif state == PreferenceSchemaState.TRANSITIONAL:
            await self._drop_legacy_column(store)

    async def _split_legacy_flag(self, store: LocalStore) -> None:
        for column in FLAG_COLUMNS:
            await store.execute(f"ALTER TABLE {TABLE} ADD COLUMN {column} INTEGER DEFAULT 1")
        await store.execute(
            f"UPDATE {TABLE} SET "
            f"{SAVINGS_COLUMN} = CASE WHEN {LEGACY_COLUMN} = 1 THEN 0 ELSE 1 END, "
            f"{CHECKING_COLUMN} = CASE WHEN {LEGACY_COLUMN} = 1 THEN 0 ELSE 1 END"
        )

    async def _add_missing_flags(self, store: LocalStore) -> None:
        columns = await column_names(store, TABLE)
        for column in FLAG_COLUMNS:
            if column not in columns:
                await store.execute(
                    f"ALTER TABLE {TABLE} ADD COLUMN {column} INTEGER DEFAULT 1"
                )

    async def _drop_legacy_column(self, store: LocalStore) -> None:
        # Stale shadow from a manual repair
        await store.execute(f"DROP TABLE IF EXISTS {SHADOW_TABLE}")
        for statement in account_preferences_table(SHADOW_TABLE):
            await store.execute(statement)
        await store.execute(
            f"INSERT INTO {SHADOW_TABLE} (accountId, accountName, {SAVINGS_COLUMN}, {CHECKING_COLUMN}) "
            f"SELECT accountId, COALESCE(accountName, ''), {SAVINGS_COLUMN}, {CHECKING_COLUMN} "
            f"FROM {TABLE}"
        )
        await store.execute(f"DROP TABLE {TABLE}")
        await store.execute(f"ALTER TABLE {SHADOW_TABLE} RENAME TO {TABLE}")
