from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Confidence = str | int | float


class LineItem(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    description: str = Field(default="")
    quantity: str = Field(default="")
    unit_price: str = Field(default="")
    confidence: Confidence | None = Field(default=None)


class InvoiceData(BaseModel):
    """Extracted fields plus the audit trail of one processed upload."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    invoice_number: str = Field(default="")
    date_issued: str = Field(default="")
    vendor_name: str = Field(default="")
    total_amount: str = Field(default="")
    tax: str = Field(default="")
    line_items: list[LineItem] = Field(default_factory=list)
    confidences: dict[str, Any] = Field(default_factory=dict)
    raw_text: str | None = Field(default=None)  # OCR pipeline only
    raw_response: str = Field(default="")
    file_path: str
    original_file_name: str


class InvoiceRecord(InvoiceData):
    """A persisted invoice. Records are created once and never modified."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime
