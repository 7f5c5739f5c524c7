"""
Order Store

SQLite-backed append-only store for valid orders, invalid orders and the
processed-fingerprint ledger. The ledger carries a UNIQUE constraint so a
fingerprint can never be recorded twice, regardless of what callers check
beforehand.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Union

import aiosqlite

from ..models.order_models import InvalidOrder, ProcessedFingerprint, ValidOrder
from ..models.storage_models import DuplicateFingerprintError, StorageError, StoreCounts

logger = logging.getLogger(__name__)


class OrderStore:
    """
    Append-only order store on a single aiosqlite connection.

    One store instance is meant to have one writer. The pipeline worker
    owns it for the lifetime of the service.
    """

    def __init__(
        self,
        database_path: Union[str, Path] = "orders.db",
        enable_wal_mode: bool = True
    ):
        """
        Initialize the order store.

        Args:
            database_path: Path to the SQLite database file
            enable_wal_mode: Enable WAL journaling
        """
        self.database_path = Path(database_path).expanduser()
        self.enable_wal_mode = enable_wal_mode
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def initialize(self) -> None:
        """Open the connection and create the schema if needed."""
        if self._conn is not None:
            return

        try:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = await aiosqlite.connect(self.database_path)
            self._conn.row_factory = aiosqlite.Row

            if self.enable_wal_mode:
                await self._conn.execute("PRAGMA journal_mode=WAL")
            await self._conn.execute("PRAGMA synchronous=NORMAL")

            await self._init_schema()
            logger.info(f"Order store initialized at {self.database_path}")

        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to initialize order store: {e}")
            await self.close()
            raise StorageError(f"Order store initialization failed: {e}", e) from e

    async def close(self) -> None:
        """Close the underlying connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug("Order store closed")

    async def __aenter__(self) -> "OrderStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _init_schema(self) -> None:
        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS valid_orders (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                order_id TEXT NOT NULL,
                customer_name TEXT NOT NULL,
                order_date TEXT NOT NULL,
                total_amount TEXT NOT NULL,
                is_high_value INTEGER NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS invalid_orders (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                raw_json TEXT NOT NULL,
                reason TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS processed_fingerprints (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                hash TEXT NOT NULL UNIQUE,
                created_at TEXT NOT NULL
            )
        """)

        await self._conn.commit()

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageError("Order store is not initialized")
        return self._conn

    async def has_fingerprint(self, fingerprint: str) -> bool:
        """Return True if the fingerprint is already in the ledger."""
        conn = self._connection()
        try:
            async with conn.execute(
                "SELECT 1 FROM processed_fingerprints WHERE hash = ? LIMIT 1",
                (fingerprint,)
            ) as cursor:
                return await cursor.fetchone() is not None
        except sqlite3.Error as e:
            raise StorageError(f"Fingerprint lookup failed: {e}", e) from e

    async def save_valid_order(self, order: ValidOrder, fingerprint: str) -> ValidOrder:
        """
        Persist a valid order and its ledger entry in one transaction.

        Either both rows are committed or neither is.

        Raises:
            DuplicateFingerprintError: If the ledger already holds the fingerprint
            StorageError: On any other database failure
        """
        conn = self._connection()
        try:
            cursor = await conn.execute(
                """
                INSERT INTO valid_orders (
                    order_id, customer_name, order_date, total_amount,
                    is_high_value, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    order.order_id,
                    order.customer_name,
                    order.order_date.isoformat(),
                    str(order.total_amount),
                    int(order.is_high_value),
                    order.created_at.isoformat(),
                )
            )
            row_id = cursor.lastrowid
            await cursor.close()

            await conn.execute(
                "INSERT INTO processed_fingerprints (hash, created_at) VALUES (?, ?)",
                (fingerprint, order.created_at.isoformat())
            )
            await conn.commit()

        except sqlite3.IntegrityError as e:
            await conn.rollback()
            if "UNIQUE" in str(e).upper():
                raise DuplicateFingerprintError(fingerprint, e) from e
            raise StorageError(f"Failed to save valid order {order.order_id}: {e}", e) from e
        except sqlite3.Error as e:
            await conn.rollback()
            raise StorageError(f"Failed to save valid order {order.order_id}: {e}", e) from e

        return order.model_copy(update={"id": row_id})

    async def save_invalid_order(self, invalid: InvalidOrder) -> InvalidOrder:
        """Persist a rejected file. No ledger entry is written."""
        conn = self._connection()
        try:
            cursor = await conn.execute(
                "INSERT INTO invalid_orders (raw_json, reason, created_at) VALUES (?, ?, ?)",
                (invalid.raw_json, invalid.reason, invalid.created_at.isoformat())
            )
            row_id = cursor.lastrowid
            await cursor.close()
            await conn.commit()
        except sqlite3.Error as e:
            await conn.rollback()
            raise StorageError(f"Failed to save invalid order: {e}", e) from e

        return invalid.model_copy(update={"id": row_id})

    async def add_fingerprint(self, fingerprint: str) -> None:
        """Insert a ledger entry on its own."""
        conn = self._connection()
        try:
            await conn.execute(
                "INSERT INTO processed_fingerprints (hash, created_at) VALUES (?, ?)",
                (fingerprint, datetime.now(timezone.utc).isoformat())
            )
            await conn.commit()
        except sqlite3.IntegrityError as e:
            await conn.rollback()
            raise DuplicateFingerprintError(fingerprint, e) from e
        except sqlite3.Error as e:
            await conn.rollback()
            raise StorageError(f"Failed to record fingerprint: {e}", e) from e

    async def list_valid_orders(self) -> List[ValidOrder]:
        """Return all valid orders in insertion order."""
        rows = await self._fetch_all("SELECT * FROM valid_orders ORDER BY id")
        return [
            ValidOrder(
                id=row["id"],
                order_id=row["order_id"],
                customer_name=row["customer_name"],
                order_date=datetime.fromisoformat(row["order_date"]),
                total_amount=Decimal(row["total_amount"]),
                is_high_value=bool(row["is_high_value"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    async def list_invalid_orders(self) -> List[InvalidOrder]:
        """Return all invalid orders in insertion order."""
        rows = await self._fetch_all("SELECT * FROM invalid_orders ORDER BY id")
        return [
            InvalidOrder(
                id=row["id"],
                raw_json=row["raw_json"],
                reason=row["reason"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    async def list_fingerprints(self) -> List[ProcessedFingerprint]:
        """Return the ledger in insertion order."""
        rows = await self._fetch_all("SELECT * FROM processed_fingerprints ORDER BY id")
        return [
            ProcessedFingerprint(
                id=row["id"],
                hash=row["hash"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    async def count_fingerprints(self) -> int:
        rows = await self._fetch_all("SELECT COUNT(*) FROM processed_fingerprints")
        return rows[0][0]

    async def get_counts(self) -> StoreCounts:
        """Row counts for every collection."""
        rows = await self._fetch_all("""
            SELECT
                (SELECT COUNT(*) FROM valid_orders),
                (SELECT COUNT(*) FROM invalid_orders),
                (SELECT COUNT(*) FROM processed_fingerprints)
        """)
        valid, invalid, fingerprints = rows[0]
        return StoreCounts(
            valid_orders=valid,
            invalid_orders=invalid,
            processed_fingerprints=fingerprints,
        )

    async def _fetch_all(self, query: str) -> list:
        conn = self._connection()
        try:
            async with conn.execute(query) as cursor:
                return list(await cursor.fetchall())
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}", e) from e
