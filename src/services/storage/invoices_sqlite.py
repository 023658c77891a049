"""
SQLite-based invoice storage.

Provides persistent storage of processed invoices. Each record is kept as
a JSON document alongside indexed id and created_at columns.
"""

import sqlite3
import uuid
from datetime import datetime, UTC
from typing import Optional

from loguru import logger

from ...core.exceptions import StorageError
from ...models.invoice import InvoiceData, InvoiceRecord
from .invoice_store_base import InvoiceStoreBase


class SQLiteInvoiceStore(InvoiceStoreBase):
    """
    SQLite-backed invoice store with persistent storage.

    Features:
    - Persistent storage across application restarts
    - Newest-first listing with offset pagination
    - Thread-safe operations (one connection per call, SQLite locking)
    """

    def __init__(self, db_path: str = "invoices.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: invoices.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create invoices table if it doesn't exist"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS invoices (
                id TEXT PRIMARY KEY,
                invoice_data TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_invoices_created_at
            ON invoices(created_at)
        """)

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> InvoiceRecord:
        data = InvoiceData.model_validate_json(row["invoice_data"])
        return InvoiceRecord(
            **data.model_dump(),
            id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def create(self, invoice: InvoiceData) -> InvoiceRecord:
        """
        Persist a processed invoice.

        Args:
            invoice: Extracted fields and file reference

        Returns:
            The created record (UUID id, UTC created_at)
        """
        invoice_id = str(uuid.uuid4())
        created_at = datetime.now(UTC)

        try:
            conn = self._get_connection()
            try:
                conn.execute("""
                    INSERT INTO invoices (id, invoice_data, created_at)
                    VALUES (?, ?, ?)
                """, (invoice_id, invoice.model_dump_json(), created_at.isoformat()))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to persist invoice: {str(e)}")
            raise StorageError("Failed to save invoice", details=str(e))

        return InvoiceRecord(**invoice.model_dump(), id=invoice_id, created_at=created_at)

    def get(self, invoice_id: str) -> Optional[InvoiceRecord]:
        """
        Get invoice by ID.

        Returns:
            Invoice record or None if not found
        """
        conn = self._get_connection()
        try:
            row = conn.execute("""
                SELECT id, invoice_data, created_at
                FROM invoices
                WHERE id = ?
            """, (invoice_id,)).fetchone()
        finally:
            conn.close()

        if row is None:
            return None

        return self._row_to_record(row)

    def list_all(self, skip: int = 0, limit: int = 20) -> list[InvoiceRecord]:
        """
        List invoices ordered by creation time, newest first.

        Rows inserted within the same timestamp fall back to insertion order.
        """
        conn = self._get_connection()
        try:
            rows = conn.execute("""
                SELECT id, invoice_data, created_at
                FROM invoices
                ORDER BY created_at DESC, rowid DESC
                LIMIT ? OFFSET ?
            """, (limit, skip)).fetchall()
        finally:
            conn.close()

        return [self._row_to_record(row) for row in rows]

    def count(self) -> int:
        conn = self._get_connection()
        try:
            (total,) = conn.execute("SELECT COUNT(*) FROM invoices").fetchone()
        finally:
            conn.close()
        return total
