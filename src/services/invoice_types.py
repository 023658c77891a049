from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel

from ..models.invoice import InvoiceRecord


class ExtractionOutput(BaseModel):
    raw_response: str = ""
    raw_text: str | None = None  # Full OCR text, set by the OCR pipeline only


@dataclass(frozen=True)
class StoredUpload:
    path: Path
    original_name: str
    mime_type: str
    size: int


@dataclass(frozen=True)
class ProcessedInvoice:
    record: InvoiceRecord
    warning: str | None = None
