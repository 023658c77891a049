from loguru import logger

from ..models.invoice import InvoiceData
from .extraction import InvoiceExtractor
from .invoice_types import ProcessedInvoice, StoredUpload
from .json_extractor import extract_json
from .normalize import normalize_invoice_fields
from .storage import InvoiceStoreBase

UNPARSED_WARNING = "Model output could not be parsed as JSON; raw response saved for manual review"


def process_invoice(
    upload: StoredUpload,
    extractor: InvoiceExtractor,
    store: InvoiceStoreBase,
) -> ProcessedInvoice:
    """
    Run one stored upload through extraction and persist the result.

    The raw model answer is always saved. When it cannot be parsed the
    record keeps empty fields and the result carries a warning instead of
    failing the request.
    """
    output = extractor.extract(upload.path, upload.mime_type)

    parsed = extract_json(output.raw_response)
    warning = None
    if not isinstance(parsed, dict):
        logger.warning(
            "Unparseable model output",
            file=upload.original_name,
            response_preview=output.raw_response[:200],
        )
        warning = UNPARSED_WARNING

    invoice = InvoiceData(
        **normalize_invoice_fields(parsed),
        raw_text=output.raw_text,
        raw_response=output.raw_response,
        file_path=str(upload.path),
        original_file_name=upload.original_name,
    )
    record = store.create(invoice)

    logger.info(
        "Invoice processed",
        invoice_id=record.id,
        vendor=record.vendor_name,
        invoice_number=record.invoice_number,
        parsed=warning is None,
    )
    return ProcessedInvoice(record=record, warning=warning)
