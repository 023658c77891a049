"""
Abstract base class for invoice storage implementations.

Defines the interface that all invoice stores must implement, so the
HTTP handlers receive a store through dependency injection and backends
can be swapped without touching them.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ...models.invoice import InvoiceData, InvoiceRecord


class InvoiceStoreBase(ABC):
    """
    Abstract base class for invoice persistence.

    Implementations can use:
    - In-memory storage (for testing/demo)
    - SQLite (for single-instance deployments)

    Records are append-only: there is no update or delete operation.
    """

    @abstractmethod
    def create(self, invoice: InvoiceData) -> InvoiceRecord:
        """
        Persist a processed invoice.

        Args:
            invoice: Extracted fields and file reference

        Returns:
            The stored record with its assigned id and created_at
        """
        pass

    @abstractmethod
    def get(self, invoice_id: str) -> Optional[InvoiceRecord]:
        """
        Get an invoice by ID.

        Returns:
            The record, or None if not found.
        """
        pass

    @abstractmethod
    def list_all(self, skip: int = 0, limit: int = 20) -> list[InvoiceRecord]:
        """
        List invoices, newest first.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Total number of stored invoices."""
        pass
