import math
from pathlib import Path

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import FileResponse
from loguru import logger

from ..deps import ErrorResponse, InvoiceListResponse, InvoiceResponse, get_invoice_store
from ...core.config import settings
from ...core.exceptions import InvoiceNotFoundError, StorageError
from ...models.invoice import InvoiceRecord
from ...services.storage import InvoiceStoreBase

router = APIRouter(prefix="/api/invoices", tags=["invoices"])

NOT_FOUND = {404: {"model": ErrorResponse}}


def _get_or_404(store: InvoiceStoreBase, invoice_id: str) -> InvoiceRecord:
    try:
        invoice = store.get(invoice_id)
    except Exception as e:
        logger.error(f"Failed to load invoice {invoice_id}: {str(e)}")
        raise StorageError("Server error", details=str(e))
    if invoice is None:
        raise InvoiceNotFoundError("Not found")
    return invoice


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    limit: int | None = Query(None),
    page: int | None = Query(None),
    store: InvoiceStoreBase = Depends(get_invoice_store),
):
    """List invoices, newest first. Missing or non-positive limit/page fall back to defaults."""
    limit = limit if limit and limit > 0 else settings.page_size_default
    page = page if page and page > 0 else 1
    skip = (page - 1) * limit

    try:
        total = store.count()
        invoices = store.list_all(skip=skip, limit=limit)
    except Exception as e:
        logger.error(f"Failed to fetch invoices: {str(e)}")
        raise StorageError("Failed to fetch invoices", details=str(e))

    return InvoiceListResponse(
        invoices=invoices,
        total=total,
        page=page,
        pages=page_count(total, limit),
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse, responses=NOT_FOUND)
async def get_invoice(invoice_id: str, store: InvoiceStoreBase = Depends(get_invoice_store)):
    return InvoiceResponse(invoice=_get_or_404(store, invoice_id))


@router.get("/{invoice_id}/download-json", responses=NOT_FOUND)
async def download_invoice_json(invoice_id: str, store: InvoiceStoreBase = Depends(get_invoice_store)):
    """Download the full invoice record as a JSON attachment."""
    invoice = _get_or_404(store, invoice_id)
    return Response(
        content=invoice.model_dump_json(indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="invoice-{invoice.id}.json"'},
    )


@router.get("/{invoice_id}/download-image", responses=NOT_FOUND)
async def download_invoice_file(invoice_id: str, store: InvoiceStoreBase = Depends(get_invoice_store)):
    """Download the originally uploaded file."""
    invoice = _get_or_404(store, invoice_id)
    file_path = Path(invoice.file_path).resolve()
    if not file_path.is_file():
        logger.warning("Backing file missing", invoice_id=invoice.id, path=str(file_path))
        raise InvoiceNotFoundError("File missing")

    return FileResponse(file_path, filename=invoice.original_file_name or file_path.name)
