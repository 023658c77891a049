import base64
from typing import Any

from loguru import logger
from openai import OpenAI

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import ExtractionError

MOCK_COMPLETION = """```json
{
  "Invoice Number": { "value": "INV-10023", "confidence": "95" },
  "Date Issued": { "value": "2025-09-30", "confidence": "92" },
  "Vendor Name": { "value": "Contoso Pty Ltd", "confidence": "97" },
  "Total Amount": { "value": "385.00", "confidence": "94" },
  "Tax": { "value": "35.00", "confidence": "88" },
  "Line Items": [
    { "description": "Consulting services", "quantity": "2", "unitPrice": "175.00", "confidence": "90" }
  ]
}
```"""


def to_data_uri(file_bytes: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(file_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def document_part(file_bytes: bytes, mime_type: str, file_name: str = "invoice") -> dict:
    """Chat message content part carrying a file inline."""
    data_uri = to_data_uri(file_bytes, mime_type)
    if mime_type == "application/pdf":
        return {"type": "file", "file": {"filename": file_name, "file_data": data_uri}}
    return {"type": "image_url", "image_url": {"url": data_uri}}


class LLMClient:
    """
    Thin wrapper around an OpenAI-compatible chat completion endpoint.

    Calls are made once with a fixed timeout; failures are not retried.
    Without LLM_API_KEY and LLM_DEPLOYMENT the client returns a canned
    completion so the service can run locally without credentials.
    """

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings
        self._client: OpenAI | None = None

    @property
    def configured(self) -> bool:
        return self.settings.llm_configured

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.settings.llm_api_key,
                base_url=self.settings.llm_base_url,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=0,
            )
        return self._client

    def complete(self, content: str | list[dict[str, Any]]) -> str:
        """
        Send a single user message and return the completion text.

        Args:
            content: Prompt text, or a list of content parts (text + file)

        Returns:
            Completion text ("" when the model returned no content)
        """
        if not self.configured:
            logger.warning(
                "LLM not configured - returning MOCK completion. "
                "Set LLM_API_KEY and LLM_DEPLOYMENT to call a real model."
            )
            return MOCK_COMPLETION

        logger.info("Requesting completion", model=self.settings.llm_deployment)
        try:
            response = self.client.chat.completions.create(
                model=self.settings.llm_deployment,
                messages=[{"role": "user", "content": content}],
                temperature=0,
            )
        except Exception as e:
            logger.error(f"LLM request failed: {str(e)}")
            raise ExtractionError("Model request failed", details=str(e))

        if not response.choices:
            return ""
        text = response.choices[0].message.content or ""
        logger.info("Completion received", characters=len(text))
        return text
