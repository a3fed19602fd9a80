"""
Schema Introspection

Read-only questions about the local store's current structure. Every
migration step uses these to decide whether it still has work to do, so a
missing table is an answer (False / empty / 0), never an error.
"""

from plansync.services.storage import LocalStore


# Allowed table names for statements that need an identifier (security:
# prevents SQL injection via table names)
ALLOWED_TABLES = frozenset(
    {
        "projects",
        "settings",
        "savings_amounts",
        "monthly_manual_savings",
        "transactions",
        "project_allocations",
        "project_saving_goals",
        "account_preferences",
        "account_preferences_new",
    }
)


def validate_table_name(table: str) -> str:
    """Validate table name against allowlist to prevent SQL injection.

    Raises:
        ValueError: If table name is not in allowlist
    """
    if table not in ALLOWED_TABLES:
        raise ValueError(f"Invalid table name: {table}")
    return table


async def table_exists(store: LocalStore, table: str) -> bool:
    row = await store.fetchone(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    )
    return row is not None


async def column_names(store: LocalStore, table: str) -> set[str]:
    """Columns of a table; empty when the table does not exist."""
    rows = await store.fetchall("SELECT name FROM pragma_table_info(?)", (table,))
    return {row[0] for row in rows}


async def column_exists(store: LocalStore, table: str, column: str) -> bool:
    return column in await column_names(store, table)


async def row_count(store: LocalStore, table: str) -> int:
    """Number of rows in a table; 0 when the table does not exist."""
    validate_table_name(table)
    if not await table_exists(store, table):
        return 0
    row = await store.fetchone(f"SELECT COUNT(*) FROM {table}")
    return int(row[0]) if row else 0
