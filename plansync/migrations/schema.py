"""Table definitions for the local planning store.

Column names and types match the files already in use, so that stores
created by earlier releases migrate without renames. Each table is a list of
statements: the CREATE TABLE first, then its indexes.
"""

PROJECTS_TABLE = [
    """
    CREATE TABLE projects (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        startDate TEXT,
        endDate TEXT,
        plannedBudget REAL,
        archived INTEGER DEFAULT 0
    )
    """,
]

SETTINGS_TABLE = [
    """
    CREATE TABLE settings (
        key TEXT PRIMARY KEY,
        value TEXT
    )
    """,
]

SAVINGS_AMOUNTS_TABLE = [
    """
    CREATE TABLE savings_amounts (
        id TEXT PRIMARY KEY,
        projectId TEXT NOT NULL,
        month TEXT NOT NULL,
        amount REAL NOT NULL DEFAULT 0,
        createdAt DATETIME DEFAULT CURRENT_TIMESTAMP,
        updatedAt DATETIME DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(projectId, month),
        FOREIGN KEY(projectId) REFERENCES projects(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_savings_amounts_project_month ON savings_amounts(projectId, month)",
    "CREATE INDEX IF NOT EXISTS idx_savings_amounts_month ON savings_amounts(month)",
]

MONTHLY_MANUAL_SAVINGS_TABLE = [
    """
    CREATE TABLE monthly_manual_savings (
        id TEXT PRIMARY KEY,
        month TEXT NOT NULL UNIQUE,
        amount REAL NOT NULL DEFAULT 0,
        createdAt DATETIME DEFAULT CURRENT_TIMESTAMP,
        updatedAt DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_monthly_manual_savings_month ON monthly_manual_savings(month)",
]

TRANSACTIONS_TABLE = [
    """
    CREATE TABLE transactions (
        id TEXT PRIMARY KEY,
        projectId TEXT DEFAULT '',
        date TEXT NOT NULL,
        description TEXT NOT NULL,
        amount REAL NOT NULL,
        type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
        category TEXT NOT NULL,
        comment TEXT DEFAULT '',
        createdAt DATETIME DEFAULT CURRENT_TIMESTAMP,
        updatedAt DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_project ON transactions(projectId)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_type ON transactions(type)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_category ON transactions(category)",
]

PROJECT_ALLOCATIONS_TABLE = [
    """
    CREATE TABLE project_allocations (
        id TEXT PRIMARY KEY,
        month TEXT NOT NULL,
        projectId TEXT NOT NULL,
        allocatedAmount REAL NOT NULL DEFAULT 0,
        createdAt DATETIME DEFAULT CURRENT_TIMESTAMP,
        updatedAt DATETIME DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(month, projectId),
        FOREIGN KEY(projectId) REFERENCES projects(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_project_allocations_month ON project_allocations(month)",
    "CREATE INDEX IF NOT EXISTS idx_project_allocations_project ON project_allocations(projectId)",
    "CREATE INDEX IF NOT EXISTS idx_project_allocations_month_project ON project_allocations(month, projectId)",
]

PROJECT_SAVING_GOALS_TABLE = [
    """
    CREATE TABLE project_saving_goals (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        project_id INTEGER NOT NULL,
        amount REAL NOT NULL,
        start_date TEXT NOT NULL,
        end_date TEXT,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        reason TEXT,
        FOREIGN KEY(project_id) REFERENCES projects(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_project_saving_goals_project ON project_saving_goals(project_id)",
    "CREATE INDEX IF NOT EXISTS idx_project_saving_goals_period ON project_saving_goals(project_id, start_date, end_date)",
]

# account_preferences is rebuilt under a shadow name when the legacy
# column is removed, so its definition takes the table name.
ACCOUNT_PREFERENCES_COLUMNS = """(
        accountId TEXT PRIMARY KEY,
        accountName TEXT NOT NULL,
        includeSavings INTEGER DEFAULT 1,
        includeChecking INTEGER DEFAULT 1
    )"""


def account_preferences_table(table: str = "account_preferences") -> list[str]:
    return [f"CREATE TABLE {table} {ACCOUNT_PREFERENCES_COLUMNS}"]
