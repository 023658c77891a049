from functools import lru_cache

from loguru import logger

from ...core.config import settings
from .invoice_store_base import InvoiceStoreBase
from .invoices import InMemoryInvoiceStore
from .invoices_sqlite import SQLiteInvoiceStore


@lru_cache(maxsize=1)
def get_invoice_store() -> InvoiceStoreBase:
    """Process-wide invoice store selected by STORAGE_BACKEND."""
    if settings.storage_backend == "memory":
        logger.info("Using in-memory invoice store")
        return InMemoryInvoiceStore()
    logger.info("Using SQLite invoice store", db_path=settings.database_path)
    return SQLiteInvoiceStore(settings.database_path)


__all__ = [
    "InvoiceStoreBase",
    "InMemoryInvoiceStore",
    "SQLiteInvoiceStore",
    "get_invoice_store",
]
