"""
Process-wide ID allocator.

A single durable counter hands out the IDs for every record kind. The first
ID is 0; each call to next() returns the current value and advances the
counter by one inside one SQLite transaction, so the counter survives a
restart together with the stores.

Invariants:
    - IDs are strictly increasing in call order, across all record kinds
    - IDs within one kind are unique but not contiguous
    - The only failure path is storage I/O (StorageError)
"""

from __future__ import annotations

import logging

from .database import Database

logger = logging.getLogger(__name__)


class IdAllocator:
    """Durable, monotonically increasing ID sequence.

    Example:
        >>> allocator = IdAllocator(db)
        >>> await allocator.next()
        0
        >>> await allocator.next()
        1
    """

    COUNTER_NAME = "global"

    def __init__(self, db: Database, initial_value: int = 0) -> None:
        """Initialize the allocator.

        Args:
            db: Open ledger database
            initial_value: Value handed out first on a fresh database
        """
        self._db = db
        self.initial_value = initial_value

    async def peek(self) -> int:
        """Return the ID the next call to next() will hand out."""
        with self._db.connection("id_counter") as conn:
            cursor = conn.execute(
                "SELECT value FROM id_counter WHERE name = ?", (self.COUNTER_NAME,)
            )
            row = cursor.fetchone()
            return row["value"] if row else self.initial_value

    async def next(self) -> int:
        """Hand out the current counter value and advance the counter."""
        with self._db.transaction("id_counter") as conn:
            cursor = conn.execute(
                "SELECT value FROM id_counter WHERE name = ?", (self.COUNTER_NAME,)
            )
            row = cursor.fetchone()
            current = row["value"] if row else self.initial_value
            conn.execute(
                """
                INSERT INTO id_counter (name, value) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET value = excluded.value
                """,
                (self.COUNTER_NAME, current + 1),
            )

        logger.debug("Allocated id", extra={"id": current})
        return current
