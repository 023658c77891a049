"""
In-memory invoice storage (for tests and demos).
"""
from datetime import datetime, UTC
from typing import Dict, Optional
import threading
import uuid

from ...models.invoice import InvoiceData, InvoiceRecord
from .invoice_store_base import InvoiceStoreBase


class InMemoryInvoiceStore(InvoiceStoreBase):
    def __init__(self):
        self._invoices: Dict[str, InvoiceRecord] = {}
        # Uploads are processed in the threadpool while list requests read
        self._lock = threading.Lock()

    def create(self, invoice: InvoiceData) -> InvoiceRecord:
        """Store a new invoice and return the created record"""
        record = InvoiceRecord(
            **invoice.model_dump(),
            id=str(uuid.uuid4()),
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._invoices[record.id] = record
        return record

    def get(self, invoice_id: str) -> Optional[InvoiceRecord]:
        return self._invoices.get(invoice_id)

    def list_all(self, skip: int = 0, limit: int = 20) -> list[InvoiceRecord]:
        """Newest first; insertion order breaks created_at ties"""
        with self._lock:
            records = list(self._invoices.values())
        ordered = [
            record for _, record in sorted(
                enumerate(records),
                key=lambda pair: (pair[1].created_at, pair[0]),
                reverse=True,
            )
        ]
        return ordered[skip:skip + limit]

    def count(self) -> int:
        return len(self._invoices)
