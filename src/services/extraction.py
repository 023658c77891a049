"""
Extraction strategies: turn a stored upload into raw model output.

Two interchangeable pipelines exist and one is selected per process with
EXTRACTION_STRATEGY:

- "direct": the file is sent inline (base64) to a multimodal model.
- "ocr":    the file is OCR'd first and only the text is sent to the model.

Both return an ExtractionOutput; parsing and persistence happen elsewhere.
"""

from abc import ABC, abstractmethod
from functools import partial
from pathlib import Path
from typing import Callable

from loguru import logger

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import NoTextExtractedError
from .form_recognizer import read_document_text
from .invoice_types import ExtractionOutput
from .llm_client import LLMClient, document_part

FIELDS_SCHEMA = """{
  "Invoice Number": { "value": "...", "confidence": "0-100" },
  "Date Issued": { "value": "...", "confidence": "0-100" },
  "Vendor Name": { "value": "...", "confidence": "0-100" },
  "Total Amount": { "value": "...", "confidence": "0-100" },
  "Tax": { "value": "...", "confidence": "0-100" },
  "Line Items": [
    { "description": "...", "quantity": "...", "unitPrice": "...", "confidence": "0-100" }
  ]
}"""

IMAGE_PROMPT = f"""You are an assistant that extracts invoice fields. Given the attached document, return JSON only with the following fields:
{FIELDS_SCHEMA}
Return only JSON. If a field is missing, set its value to empty string and confidence to 0.
"""

TEXT_PROMPT_TEMPLATE = """You are an assistant that extracts invoice fields from OCR text. Return JSON only with the following fields:
{schema}
Return only JSON. If a field is missing, set its value to empty string and confidence to 0.

OCR text:
---
{text}
---
"""


class InvoiceExtractor(ABC):
    """Produces the raw model answer for one stored file."""

    name: str = "base"

    @abstractmethod
    def extract(self, file_path: Path, mime_type: str) -> ExtractionOutput:
        pass


class DirectImageExtractor(InvoiceExtractor):
    name = "direct"

    def __init__(self, llm: LLMClient):
        self.llm = llm

    def extract(self, file_path: Path, mime_type: str) -> ExtractionOutput:
        file_bytes = Path(file_path).read_bytes()
        logger.info(
            "Sending document to model",
            strategy=self.name,
            file=Path(file_path).name,
            size=len(file_bytes),
            mime_type=mime_type,
        )
        content = [
            {"type": "text", "text": IMAGE_PROMPT},
            document_part(file_bytes, mime_type, Path(file_path).name),
        ]
        return ExtractionOutput(raw_response=self.llm.complete(content))


class OcrTextExtractor(InvoiceExtractor):
    name = "ocr"

    def __init__(self, llm: LLMClient, read_text: Callable[[bytes], str] = read_document_text):
        self.llm = llm
        self.read_text = read_text

    def extract(self, file_path: Path, mime_type: str) -> ExtractionOutput:
        file_bytes = Path(file_path).read_bytes()
        raw_text = self.read_text(file_bytes)
        if not raw_text or not raw_text.strip():
            logger.warning("OCR returned no text", file=Path(file_path).name)
            raise NoTextExtractedError()

        logger.info("Sending OCR text to model", strategy=self.name, characters=len(raw_text))
        prompt = TEXT_PROMPT_TEMPLATE.format(schema=FIELDS_SCHEMA, text=raw_text)
        return ExtractionOutput(raw_response=self.llm.complete(prompt), raw_text=raw_text)


def create_extractor(settings: Settings = default_settings) -> InvoiceExtractor:
    llm = LLMClient(settings)
    if settings.extraction_strategy == "ocr":
        return OcrTextExtractor(llm, read_text=partial(read_document_text, settings=settings))
    return DirectImageExtractor(llm)
