"""
Ledger context: the single owner of all durable state.

The Ledger owns the database, the ID allocator, one EntityStore per record
kind, the clock and the lock that makes each operation run to completion.
It is passed explicitly to every operation and analytics function; nothing
in the package reaches for module-level state.

Invariants:
    - Exactly one store per record kind, all on the same database
    - Operations that mint IDs hold ``lock`` for their whole duration
    - The clock returns Unix milliseconds

How to change safely:
    - Register new record kinds in RECORD_TYPES, not here
    - Swap the clock only in tests
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path

from .config import AnalyticsConfig, StorageConfig
from .models.records import (
    RECORD_TYPES,
    Animal,
    Employee,
    Expense,
    MaintenanceRecord,
    MeatProduct,
    QualityInspection,
    Record,
    Shipment,
    Slaughterhouse,
    Supplier,
    WasteRecord,
)
from .store import Database, EntityStore, IdAllocator

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class Ledger:
    """Explicit context holding the allocator and every entity store.

    Attributes:
        db: Shared SQLite database
        ids: Process-wide ID allocator
        lock: Serializes operations so their effects never interleave
        clock: Returns the current time in Unix ms
        analytics: Business rule constants
        read_only: Open an existing database without writing to it

    Example:
        >>> ledger = Ledger(StorageConfig(data_dir="/tmp/abattoir"))
        >>> await ledger.open()
        >>> house = await create_slaughterhouse(ledger, payload)
        >>> await ledger.close()
    """

    def __init__(
        self,
        storage: StorageConfig | None = None,
        analytics: AnalyticsConfig | None = None,
        clock: Callable[[], int] = now_ms,
        read_only: bool = False,
    ) -> None:
        self.storage = storage or StorageConfig()
        self.analytics = analytics or AnalyticsConfig()
        self.clock = clock
        self.read_only = read_only
        self.lock = asyncio.Lock()

        self.db = Database(
            Path(self.storage.data_dir) / self.storage.db_name,
            wal_mode=self.storage.wal_mode,
            busy_timeout_ms=self.storage.busy_timeout_ms,
            cache_size_pages=self.storage.cache_size_pages,
        )
        self.ids = IdAllocator(self.db)

        self.slaughterhouses: EntityStore[Slaughterhouse] = self._store(Slaughterhouse)
        self.animals: EntityStore[Animal] = self._store(Animal)
        self.meat_products: EntityStore[MeatProduct] = self._store(MeatProduct)
        self.expenses: EntityStore[Expense] = self._store(Expense)
        self.quality_inspections: EntityStore[QualityInspection] = self._store(
            QualityInspection
        )
        self.employees: EntityStore[Employee] = self._store(Employee)
        self.maintenance_records: EntityStore[MaintenanceRecord] = self._store(
            MaintenanceRecord
        )
        self.suppliers: EntityStore[Supplier] = self._store(Supplier)
        self.shipments: EntityStore[Shipment] = self._store(Shipment)
        self.waste_records: EntityStore[WasteRecord] = self._store(WasteRecord)

    def _store(self, record_type: type[Record]) -> EntityStore:
        return EntityStore(
            self.db,
            record_type,
            max_record_size=self.storage.max_record_size,
            scan_batch_size=self.storage.scan_batch_size,
        )

    @property
    def stores(self) -> dict[str, EntityStore]:
        """All entity stores keyed by record kind."""
        return {
            store.kind: store
            for store in (
                self.slaughterhouses,
                self.animals,
                self.meat_products,
                self.expenses,
                self.quality_inspections,
                self.employees,
                self.maintenance_records,
                self.suppliers,
                self.shipments,
                self.waste_records,
            )
        }

    async def open(self) -> None:
        """Open the database and create missing tables.

        A read-only ledger requires an existing database and creates nothing.
        """
        self.db.open(read_only=self.read_only)
        if not self.read_only:
            self.db.create_tables(t.KIND for t in RECORD_TYPES)
        logger.info(
            "Ledger opened",
            extra={"path": str(self.db.path), "next_id": await self.ids.peek()},
        )

    async def close(self) -> None:
        self.db.close()

    async def stats(self) -> dict[str, int]:
        """Row count per record kind plus the next ID to be handed out."""
        stats = {kind: await store.count() for kind, store in self.stores.items()}
        stats["next_id"] = await self.ids.peek()
        return stats

    async def __aenter__(self) -> Ledger:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
