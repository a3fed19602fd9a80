"""
SQLite Storage Implementation

DESIGN DECISION: The local store is handled as a whole file:
1. The file is copied into an in-memory database when a scope opens
2. All reads and writes of the scope go to that copy
3. When the scope closes normally and something changed, the copy is written
   to a temporary file beside the target and renamed over it

A reader of the file therefore sees either the previous version or the new
one, never a half-written file. A scope that exits with an error writes
nothing.

TRADEOFFS:
- The whole store is held in memory (fine for a personal planning file)
- Only one process may write the file at a time; callers serialize runs
"""

import asyncio
import os
import re
import sqlite3
import stat
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional, Sequence, Union

import aiosqlite
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from plansync.services.storage.interface import (
    LedgerQueryError,
    LedgerSource,
    LedgerUnavailableError,
    StoreCorruptError,
)

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_DDL_PREFIXES = ("CREATE", "ALTER", "DROP")

# The only query ever issued against the ledger
LEDGER_PROJECT_LABELS_QUERY = (
    "SELECT DISTINCT project FROM ICTransactionSplit "
    "WHERE project IS NOT NULL AND project <> ''"
)


class LocalStore:
    """
    Handle on the in-memory copy of the local store.

    Values are always passed as bound parameters. Statement text only ever
    contains identifiers chosen by this package.
    """

    def __init__(self, connection: aiosqlite.Connection, path: Path, created: bool):
        self._connection = connection
        self._path = path
        self._created = created
        self._dirty = False
        self.persisted = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def created(self) -> bool:
        """True when the scope started without a file on disk."""
        return self._created

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """
        Run one statement and return the number of rows it changed.

        Schema statements always mark the store dirty; data statements only
        when they touched a row.
        """
        cursor = await self._connection.execute(sql, params)
        try:
            rowcount = cursor.rowcount
        finally:
            await cursor.close()
        if rowcount > 0 or sql.lstrip().upper().startswith(_DDL_PREFIXES):
            self._dirty = True
        return rowcount

    async def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[aiosqlite.Row]:
        async with self._connection.execute(sql, params) as cursor:
            return list(await cursor.fetchall())

    async def fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[aiosqlite.Row]:
        async with self._connection.execute(sql, params) as cursor:
            return await cursor.fetchone()

    @asynccontextmanager
    async def savepoint(self, name: str) -> AsyncIterator["LocalStore"]:
        """
        Run a block as one unit: everything it did is undone if it raises.
        """
        if not _IDENTIFIER.match(name):
            raise ValueError(f"Invalid savepoint name: {name}")
        was_dirty = self._dirty
        await self._connection.execute(f"SAVEPOINT {name}")
        try:
            yield self
        except BaseException:
            await self._connection.execute(f"ROLLBACK TO SAVEPOINT {name}")
            await self._connection.execute(f"RELEASE SAVEPOINT {name}")
            self._dirty = was_dirty
            raise
        else:
            await self._connection.execute(f"RELEASE SAVEPOINT {name}")


async def _load_file(path: Path, target: aiosqlite.Connection) -> None:
    source_uri = path.resolve().as_uri() + "?mode=ro"
    try:
        async with aiosqlite.connect(source_uri, uri=True) as source:
            await source.backup(target)
        async with target.execute("SELECT count(*) FROM sqlite_master") as cursor:
            await cursor.fetchone()
    except sqlite3.DatabaseError as e:
        raise StoreCorruptError(f"Local store {path} is unreadable: {e}") from e


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _commit_file(tmp_path: Path, path: Path) -> None:
    # mkstemp creates 0600; the store keeps its mode, or gets the usual default
    if path.exists():
        mode = stat.S_IMODE(path.stat().st_mode)
    else:
        mode = 0o666 & ~_current_umask()
    os.chmod(tmp_path, mode)
    with open(tmp_path, "rb+") as fh:
        os.fsync(fh.fileno())
    os.replace(tmp_path, path)


async def _export_file(source: aiosqlite.Connection, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        async with aiosqlite.connect(str(tmp_path)) as target:
            await source.backup(target)
        await asyncio.to_thread(_commit_file, tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


@asynccontextmanager
async def open_local_store(path: PathLike, create: bool = False) -> AsyncIterator[LocalStore]:
    """
    Open the local store for one phase of work.

    Args:
        path: Store file location
        create: Start from an empty database when the file is missing

    Raises:
        FileNotFoundError: If the file is missing and create is False
        StoreCorruptError: If the file exists but is not a readable database
    """
    path = Path(path)
    exists = path.exists()
    if not exists and not create:
        raise FileNotFoundError(f"Local store not found: {path}")

    connection = await aiosqlite.connect(":memory:", isolation_level=None)
    connection.row_factory = aiosqlite.Row
    try:
        if exists:
            await _load_file(path, connection)
        store = LocalStore(connection, path, created=not exists)

        yield store

        if store.is_dirty or store.created:
            await _export_file(connection, path)
            store.persisted = True
            logger.debug("local_store_written", path=str(path))
    finally:
        await connection.close()


def _is_lock_error(exc: BaseException) -> bool:
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    message = str(exc).lower()
    return "locked" in message or "busy" in message


class SQLiteLedger(LedgerSource):
    """
    The desktop application's SQLite ledger, opened read-only.
    """

    def __init__(
        self,
        path: PathLike,
        attempts: int = 3,
        max_wait: float = 2.0,
    ):
        self._path = Path(path)
        self._attempts = attempts
        self._max_wait = max_wait

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.is_file()

    async def _query_labels(self) -> list[str]:
        uri = self._path.resolve().as_uri() + "?mode=ro"
        async with aiosqlite.connect(uri, uri=True) as ledger:
            async with ledger.execute(LEDGER_PROJECT_LABELS_QUERY) as cursor:
                rows = await cursor.fetchall()
        return [str(row[0]) for row in rows if row[0] is not None]

    async def fetch_project_labels(self) -> list[str]:
        if not self.exists():
            raise LedgerUnavailableError(f"Ledger not found: {self._path}")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=0.1, max=self._max_wait),
            retry=retry_if_exception(_is_lock_error),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._query_labels()
        except sqlite3.DatabaseError as e:
            raise LedgerQueryError(f"Ledger query failed on {self._path}: {e}") from e
        return []
