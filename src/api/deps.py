from functools import lru_cache
from typing import Any

from pydantic import BaseModel

from ..core.config import settings
from ..models.invoice import InvoiceRecord
from ..services.extraction import InvoiceExtractor, create_extractor
from ..services.storage import get_invoice_store

__all__ = [
    "ErrorResponse",
    "InvoiceListResponse",
    "InvoiceResponse",
    "UploadResponse",
    "get_extractor",
    "get_invoice_store",
    "get_upload_dir",
]


class UploadResponse(BaseModel):
    success: bool = True
    invoice: InvoiceRecord
    warning: str | None = None  # Set when the model output could not be parsed


class InvoiceResponse(BaseModel):
    success: bool = True
    invoice: InvoiceRecord


class InvoiceListResponse(BaseModel):
    success: bool = True
    invoices: list[InvoiceRecord]
    total: int
    page: int
    pages: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Any = None


@lru_cache(maxsize=1)
def get_extractor() -> InvoiceExtractor:
    """Process-wide extraction strategy chosen by EXTRACTION_STRATEGY; reuses one model client."""
    return create_extractor(settings)


def get_upload_dir() -> str:
    return settings.upload_dir
