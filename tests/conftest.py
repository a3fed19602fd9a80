"""
Shared fixtures.

Every test works on real SQLite files under tmp_path; the files are built
with the standard sqlite3 module so that fixtures never go through the code
under test.
"""

import sqlite3
from pathlib import Path

import pytest

from plansync.audit import AuditLogger
from plansync.config import load_settings


def _run_statements(path: Path, statements, rows=()):
    connection = sqlite3.connect(path)
    try:
        for statement in statements:
            connection.execute(statement)
        for sql, params in rows:
            connection.execute(sql, params)
        connection.commit()
    finally:
        connection.close()


@pytest.fixture
def store_path(tmp_path) -> Path:
    return tmp_path / "iComptaBudgetData.sqlite"


@pytest.fixture
def ledger_path(tmp_path) -> Path:
    return tmp_path / "Comptes.cdb"


@pytest.fixture
def settings(tmp_path):
    return load_settings(data_dir=tmp_path)


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def sqlite_file():
    """Factory: sqlite_file(path, statements, rows=[(sql, params), ...])."""
    def build(path: Path, statements, rows=()):
        _run_statements(path, statements, rows)
        return path
    return build


@pytest.fixture
def query():
    """Factory: query(path, sql, params=()) -> list of tuples."""
    def run(path: Path, sql: str, params=()):
        connection = sqlite3.connect(path)
        try:
            return connection.execute(sql, params).fetchall()
        finally:
            connection.close()
    return run


@pytest.fixture
def schema_of(query):
    """Factory: schema_of(path) -> {table: sorted column names}."""
    def snapshot(path: Path):
        tables = query(
            path,
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%'",
        )
        return {
            name: sorted(row[1] for row in query(path, f'PRAGMA table_info("{name}")'))
            for (name,) in tables
        }
    return snapshot


@pytest.fixture
def make_ledger(ledger_path):
    """Factory: make_ledger(["Trip", "Car", None]) writes a desktop ledger file."""
    def build(labels):
        _run_statements(
            ledger_path,
            ["CREATE TABLE ICTransactionSplit (ID TEXT PRIMARY KEY, amount REAL, project TEXT)"],
            [
                (
                    "INSERT INTO ICTransactionSplit (ID, amount, project) VALUES (?, ?, ?)",
                    (f"split-{i}", 10.0 * i, label),
                )
                for i, label in enumerate(labels)
            ],
        )
        return ledger_path
    return build
