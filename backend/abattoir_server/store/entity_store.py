"""
Durable ID-keyed store for one record kind.

Each record kind owns one EntityStore backed by its own SQLite table. The
store offers exactly four operations: upsert, point lookup, existence check
and an ordered full scan. There is no delete, no partial update and no
secondary index; aggregation code filters during the scan.

Invariants:
    - insert replaces the whole row; there is no merge
    - scan yields rows in ascending id and can be restarted at will
    - Rows are validated against the codec bound before any SQL runs
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

from ..models.records import Record
from .codec import RecordCodec
from .database import Database, quote_identifier

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class EntityStore(Generic[R]):
    """Ordered mapping from integer ID to one record kind.

    Example:
        >>> animals = EntityStore(db, Animal)
        >>> await animals.insert(3, animal)
        >>> await animals.get(3)
        Animal(id=3, ...)
        >>> [i async for i, _ in animals.scan()]
        [3]
    """

    def __init__(
        self,
        db: Database,
        record_type: type[R],
        max_record_size: int = 512,
        scan_batch_size: int = 256,
    ) -> None:
        """Initialize the store.

        Args:
            db: Open ledger database
            record_type: Record dataclass stored here
            max_record_size: Byte bound for one encoded record
            scan_batch_size: Rows fetched per round trip while scanning
        """
        self._db = db
        self.codec: RecordCodec[R] = RecordCodec(record_type, max_size=max_record_size)
        self.scan_batch_size = scan_batch_size
        self._table = quote_identifier(record_type.KIND)

    @property
    def kind(self) -> str:
        return self.codec.kind

    async def insert(self, record_id: int, record: R) -> R | None:
        """Store a record under record_id, replacing any previous row.

        Args:
            record_id: Key to store under; must equal record.id
            record: Record to store

        Returns:
            The record previously stored under record_id, or None

        Raises:
            ValueError: If record_id and record.id disagree
            RecordTooLargeError: If the record exceeds the byte bound
        """
        if getattr(record, "id", None) != record_id:
            raise ValueError(
                f"{self.kind} id mismatch: key {record_id}, record {getattr(record, 'id', None)}"
            )
        data = self.codec.encode(record)

        with self._db.transaction(self.kind) as conn:
            cursor = conn.execute(
                f"SELECT record FROM {self._table} WHERE id = ?", (record_id,)
            )
            row = cursor.fetchone()
            conn.execute(
                f"INSERT OR REPLACE INTO {self._table} (id, record) VALUES (?, ?)",
                (record_id, data),
            )

        previous = self.codec.decode(row["record"]) if row else None

        logger.debug(
            "Stored record",
            extra={"kind": self.kind, "id": record_id, "replaced": previous is not None},
        )
        return previous

    async def get(self, record_id: int) -> R | None:
        """Get a record by ID, or None if absent."""
        with self._db.connection(self.kind) as conn:
            cursor = conn.execute(
                f"SELECT record FROM {self._table} WHERE id = ?", (record_id,)
            )
            row = cursor.fetchone()
        if not row:
            return None
        return self.codec.decode(row["record"])

    async def contains(self, record_id: int) -> bool:
        with self._db.connection(self.kind) as conn:
            cursor = conn.execute(
                f"SELECT 1 FROM {self._table} WHERE id = ?", (record_id,)
            )
            return cursor.fetchone() is not None

    async def count(self) -> int:
        with self._db.connection(self.kind) as conn:
            cursor = conn.execute(f"SELECT COUNT(*) FROM {self._table}")
            return cursor.fetchone()[0]

    async def scan(self) -> AsyncIterator[tuple[int, R]]:
        """Iterate over all rows in ascending ID order.

        Rows are fetched lazily in batches. Every call starts a fresh
        traversal; consume it fully before writing to the same store.

        Yields:
            (id, record) pairs
        """
        with self._db.connection(self.kind) as conn:
            cursor = conn.execute(f"SELECT id, record FROM {self._table} ORDER BY id")
            try:
                while True:
                    rows = cursor.fetchmany(self.scan_batch_size)
                    if not rows:
                        break
                    for row in rows:
                        yield row["id"], self.codec.decode(row["record"])
            finally:
                cursor.close()
