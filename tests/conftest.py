"""
Pytest configuration and shared fixtures.

Registers the integration marker, points uploads and the database at a
temporary directory before the app is imported, and provides a TestClient
wired to an in-memory store and a scriptable extractor.
"""

import os
import tempfile
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="invoice-api-tests-"))
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["DATABASE_PATH"] = str(_TEST_ROOT / "invoices.db")
os.environ["STORAGE_BACKEND"] = "memory"

import pytest
from fastapi.testclient import TestClient

from src.api.deps import get_extractor, get_upload_dir
from src.api.main import app
from src.core.config import settings
from src.services.extraction import InvoiceExtractor
from src.services.invoice_types import ExtractionOutput
from src.services.storage import InMemoryInvoiceStore, get_invoice_store

VALID_COMPLETION = """```json
{
  "Invoice Number": { "value": "INV-001", "confidence": "96" },
  "Date Issued": { "value": "2025-10-01", "confidence": "90" },
  "Vendor Name": { "value": "ACME Corp", "confidence": "98" },
  "Total Amount": { "value": "450.00", "confidence": "93" },
  "Tax": { "value": "40.91", "confidence": "85" },
  "Line Items": [
    { "description": "Widgets", "quantity": "3", "unitPrice": "136.36", "confidence": "80" }
  ]
}
```"""


class FakeExtractor(InvoiceExtractor):
    """Returns a fixed answer (or raises) and remembers what it was asked."""

    name = "fake"

    def __init__(self, raw_response: str = VALID_COMPLETION, raw_text: str | None = None, error: Exception | None = None):
        self.raw_response = raw_response
        self.raw_text = raw_text
        self.error = error
        self.calls = []

    def extract(self, file_path, mime_type):
        self.calls.append((Path(file_path), mime_type))
        if self.error is not None:
            raise self.error
        return ExtractionOutput(raw_response=self.raw_response, raw_text=self.raw_text)


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against real OCR / LLM services"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring real OCR / LLM services"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def mock_providers(request, monkeypatch):
    """Unit tests never reach real providers; integration tests keep .env settings"""
    if "integration" in request.keywords:
        return
    for name in ("llm_api_key", "llm_deployment", "llm_base_url", "az_di_endpoint", "az_di_api_key"):
        monkeypatch.setattr(settings, name, None)


@pytest.fixture
def store():
    return InMemoryInvoiceStore()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def client(store, upload_dir, extractor):
    app.dependency_overrides[get_invoice_store] = lambda: store
    app.dependency_overrides[get_upload_dir] = lambda: str(upload_dir)
    app.dependency_overrides[get_extractor] = lambda: extractor
    # Tests that drop the override pick the strategy from their own settings
    get_extractor.cache_clear()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        get_extractor.cache_clear()
