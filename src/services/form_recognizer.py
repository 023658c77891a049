from loguru import logger
from azure.ai.documentintelligence import DocumentIntelligenceClient
from azure.core.credentials import AzureKeyCredential
from ..core.config import Settings, settings as default_settings
from ..core.exceptions import ExtractionError

MOCK_OCR_TEXT = (
    "INVOICE\nContoso Pty Ltd\nInvoice #: INV-10023\nDate: 2025-09-30\n"
    "Consulting services  2 x 175.00\nTax: 35.00\nTotal: AUD 385.00"
)


def read_document_text(file_bytes: bytes, settings: Settings = default_settings) -> str:
    """Run OCR over an image or PDF and return the recognised text ("" if none)."""
    # Check if Azure Document Intelligence is configured
    if settings.az_di_endpoint and settings.az_di_api_key:
        logger.info(
            "Using Azure Document Intelligence for OCR",
            endpoint=settings.az_di_endpoint[:50] + "..." if len(settings.az_di_endpoint) > 50 else settings.az_di_endpoint
        )

        try:
            client = DocumentIntelligenceClient(
                endpoint=settings.az_di_endpoint,
                credential=AzureKeyCredential(settings.az_di_api_key)
            )

            logger.info(f"Reading document of size {len(file_bytes)} bytes")

            poller = client.begin_analyze_document(
                "prebuilt-read",
                body=file_bytes,
                content_type="application/octet-stream"
            )
            result = poller.result()
        except Exception as e:
            logger.error(f"Azure DI OCR failed: {str(e)}")
            raise ExtractionError("OCR failed", details=str(e))

        text = getattr(result, "content", None) or ""
        logger.info("OCR finished", characters=len(text))
        return text

    logger.warning(
        "Azure Document Intelligence not configured - using MOCK OCR text. "
        "Set AZ_DI_ENDPOINT and AZ_DI_API_KEY to use real OCR."
    )
    return MOCK_OCR_TEXT if file_bytes else ""
