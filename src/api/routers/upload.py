from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from loguru import logger

from ..deps import ErrorResponse, UploadResponse, get_extractor, get_invoice_store, get_upload_dir
from ...core.config import settings
from ...core.exceptions import InvoiceAPIError
from ...services.extraction import InvoiceExtractor
from ...services.invoice_processor import process_invoice
from ...services.storage import InvoiceStoreBase
from ...services.uploads import save_upload

router = APIRouter(prefix="/api", tags=["upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_invoice(
    file: UploadFile | None = File(None),
    extractor: InvoiceExtractor = Depends(get_extractor),
    store: InvoiceStoreBase = Depends(get_invoice_store),
    upload_dir: str = Depends(get_upload_dir),
):
    """
    Upload an invoice image or PDF and extract its fields.

    The file (multipart field "file") is validated and written to the upload
    directory before extraction starts. The file stays on disk even when
    extraction fails. If the model answer cannot be parsed, the invoice is
    still saved with its raw response and the reply carries a "warning".

    Example response:
    {
        "success": true,
        "invoice": {"id": "...", "invoice_number": "INV-10023", ...},
        "warning": null
    }
    """
    stored = await save_upload(
        file,
        upload_dir,
        allowed_extensions=settings.allowed_extensions,
        max_bytes=settings.upload_max_bytes,
    )

    try:
        # OCR and model calls block; keep them off the event loop
        result = await run_in_threadpool(process_invoice, stored, extractor, store)
    except InvoiceAPIError:
        raise
    except Exception as e:
        logger.exception(f"Invoice processing failed: {str(e)}")
        raise InvoiceAPIError("Processing failed", details=str(e))

    return UploadResponse(invoice=result.record, warning=result.warning)
