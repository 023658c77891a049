"""
Exceptions raised by the invoice extraction service.

Every error that should reach the client as a JSON envelope derives from
InvoiceAPIError, which carries the HTTP status code and optional details:

    InvoiceAPIError (500)
    ├── UploadRejectedError (400)
    ├── InvoiceNotFoundError (404)
    ├── ExtractionError (500)
    │   └── NoTextExtractedError (500)
    └── StorageError (500)
"""

from typing import Any


class InvoiceAPIError(Exception):
    """Base error rendered as {"success": false, "error": ..., "details": ...}."""

    status_code: int = 500

    def __init__(self, message: str, details: Any = None, status_code: int | None = None):
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class UploadRejectedError(InvoiceAPIError):
    """Client input error: missing file, disallowed extension or oversized file."""

    status_code = 400


class InvoiceNotFoundError(InvoiceAPIError):
    """Missing invoice record or missing backing file."""

    status_code = 404


class ExtractionError(InvoiceAPIError):
    """The OCR engine or the language model call failed."""


class NoTextExtractedError(ExtractionError):
    def __init__(self, message: str = "No text extracted from document", details: Any = None):
        super().__init__(message, details=details)


class StorageError(InvoiceAPIError):
    """Persisting or reading an invoice record failed."""
