"""
SQLite database holding the ledger's durable state.

One database file holds the ID counter and one table per entity kind. Each
table is an independent partition: it has its own rows and its own key
order, and nothing in one table refers to another at the SQL level.

Invariants:
    - A single connection is shared by the allocator and every store
    - Writes run inside explicit BEGIN IMMEDIATE ... COMMIT blocks
    - sqlite3 errors never leak; they surface as StorageError

How to change safely:
    - Schema changes must be additive (CREATE ... IF NOT EXISTS)
    - Bump SCHEMA_VERSION and add a migration for anything else
    - Test reopen on an existing file after every schema change

Table schema:
    <kind> (one per record kind):
        - id INTEGER PRIMARY KEY
        - record BLOB (bounded JSON)

    id_counter:
        - name TEXT PRIMARY KEY
        - value INTEGER (next id to hand out)
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from ..errors import StorageError

logger = logging.getLogger(__name__)


class Database:
    """Owner of the ledger's SQLite connection.

    Example:
        >>> db = Database("/var/lib/abattoir/ledger.db")
        >>> db.open()
        >>> db.create_tables(["animal", "meat_product"])
        >>> with db.transaction() as conn:
        ...     conn.execute("INSERT INTO ...")
        >>> db.close()
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        path: str | Path,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        cache_size_pages: int = -16000,
    ) -> None:
        """Initialize the database handle.

        Args:
            path: SQLite file path
            wal_mode: Enable SQLite WAL mode
            busy_timeout_ms: SQLite busy timeout
            cache_size_pages: SQLite cache size (negative = KB)
        """
        self.path = Path(path)
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        self.cache_size_pages = cache_size_pages
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self, read_only: bool = False) -> None:
        """Open the database file.

        Args:
            read_only: Open an existing file without creating or writing
                anything; a missing file raises StorageError
        """
        if self._conn is not None:
            return

        if read_only:
            if not self.path.is_file():
                raise StorageError(f"Ledger database not found: {self.path}")
            target, uri = f"{self.path.resolve().as_uri()}?mode=ro", True
        else:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            target, uri = str(self.path), False

        try:
            conn = sqlite3.connect(
                target,
                timeout=self.busy_timeout_ms / 1000.0,
                isolation_level=None,  # Autocommit by default, explicit transactions
                uri=uri,
            )
            conn.row_factory = sqlite3.Row
            conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")
            conn.execute(f"PRAGMA cache_size = {self.cache_size_pages}")
            if self.wal_mode and not read_only:
                conn.execute("PRAGMA journal_mode = WAL")
            if not read_only:
                conn.execute("PRAGMA synchronous = FULL")
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open ledger database {self.path}: {e}") from e

        self._conn = conn
        logger.info("Opened ledger database", extra={"path": str(self.path)})

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Closed ledger database", extra={"path": str(self.path)})

    def create_tables(self, kinds: Iterable[str]) -> None:
        """Create the counter table and one table per record kind."""
        statements = [
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at INTEGER NOT NULL
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS id_counter (
                name TEXT PRIMARY KEY,
                value INTEGER NOT NULL
            )
            """,
        ]
        for kind in kinds:
            statements.append(
                f"""
                CREATE TABLE IF NOT EXISTS {quote_identifier(kind)} (
                    id INTEGER PRIMARY KEY,
                    record BLOB NOT NULL
                )
                """
            )

        with self.transaction() as conn:
            for statement in statements:
                conn.execute(statement)
            conn.execute(
                """
                INSERT OR IGNORE INTO schema_version (version, applied_at)
                VALUES (?, strftime('%s', 'now') * 1000)
                """,
                (self.SCHEMA_VERSION,),
            )

    @contextmanager
    def connection(self, store: str | None = None) -> Iterator[sqlite3.Connection]:
        """Yield the open connection for a read.

        Raises:
            StorageError: If the database is closed or SQLite fails
        """
        if self._conn is None:
            raise StorageError(f"Ledger database is not open: {self.path}", store=store)
        try:
            yield self._conn
        except sqlite3.Error as e:
            raise StorageError(f"SQLite failure: {e}", store=store) from e

    @contextmanager
    def transaction(self, store: str | None = None) -> Iterator[sqlite3.Connection]:
        """Yield the connection inside an immediate write transaction.

        Commits on success, rolls back on any exception.
        """
        with self.connection(store) as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise


def quote_identifier(name: str) -> str:
    """Quote a table name for SQL; kinds are internal constants."""
    if not name or not all(c.isalnum() or c == "_" for c in name):
        raise ValueError(f"Invalid table name: {name!r}")
    return f'"{name}"'
