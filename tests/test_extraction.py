"""
Tests for the extraction strategies and the LLM client.

The OpenAI-compatible endpoint is mocked with respx; OCR is injected.
"""

import base64
import json

import httpx
import pytest
import respx

from src.api.deps import get_extractor
from src.core.config import Settings, settings
from src.core.exceptions import ExtractionError, NoTextExtractedError
from src.services.extraction import (
    DirectImageExtractor,
    OcrTextExtractor,
    create_extractor,
)
from src.services.llm_client import MOCK_COMPLETION, LLMClient, document_part

LLM_URL = "https://llm.example.com/v1/chat/completions"


def llm_settings(**overrides) -> Settings:
    values = {
        "LLM_BASE_URL": "https://llm.example.com/v1",
        "LLM_API_KEY": "test-key",
        "LLM_DEPLOYMENT": "test-model",
        "LLM_TIMEOUT_SECONDS": 5,
    }
    values.update(overrides)
    return Settings(**values)


def completion(content: str | None) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "1700000000000-invoice.png"
    path.write_bytes(b"\x89PNG fake")
    return path


@respx.mock
def test_direct_extractor_sends_inline_image(image_file):
    route = respx.post(LLM_URL).mock(return_value=httpx.Response(200, json=completion('{"Tax": {"value": "1"}}')))

    output = DirectImageExtractor(LLMClient(llm_settings())).extract(image_file, "image/png")

    assert output.raw_response == '{"Tax": {"value": "1"}}'
    assert output.raw_text is None

    request = json.loads(route.calls.last.request.content)
    assert request["model"] == "test-model"
    assert request["temperature"] == 0
    parts = request["messages"][0]["content"]
    assert parts[0]["type"] == "text"
    assert "Invoice Number" in parts[0]["text"]
    expected_uri = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()
    assert parts[1] == {"type": "image_url", "image_url": {"url": expected_uri}}


def test_document_part_for_pdf_uses_file_content():
    part = document_part(b"%PDF-1.4", "application/pdf", "scan.pdf")
    assert part["type"] == "file"
    assert part["file"]["filename"] == "scan.pdf"
    assert part["file"]["file_data"].startswith("data:application/pdf;base64,")


@respx.mock
def test_ocr_extractor_sends_text_prompt(image_file):
    route = respx.post(LLM_URL).mock(return_value=httpx.Response(200, json=completion("not json")))
    seen = []

    def fake_ocr(file_bytes):
        seen.append(file_bytes)
        return "INVOICE\nGlobex\nTotal 12.00"

    extractor = OcrTextExtractor(LLMClient(llm_settings()), read_text=fake_ocr)
    output = extractor.extract(image_file, "image/png")

    assert seen == [b"\x89PNG fake"]
    assert output.raw_text == "INVOICE\nGlobex\nTotal 12.00"
    assert output.raw_response == "not json"
    prompt = json.loads(route.calls.last.request.content)["messages"][0]["content"]
    assert isinstance(prompt, str)
    assert "INVOICE\nGlobex\nTotal 12.00" in prompt


@pytest.mark.parametrize("ocr_text", ["", "   \n  "])
@respx.mock
def test_ocr_extractor_empty_text_raises_before_model_call(image_file, ocr_text):
    route = respx.post(LLM_URL).mock(return_value=httpx.Response(200, json=completion("{}")))
    extractor = OcrTextExtractor(LLMClient(llm_settings()), read_text=lambda _: ocr_text)

    with pytest.raises(NoTextExtractedError):
        extractor.extract(image_file, "image/png")

    assert not route.called


@respx.mock
def test_llm_http_error_is_wrapped_and_not_retried():
    route = respx.post(LLM_URL).mock(return_value=httpx.Response(503, json={"error": {"message": "overloaded"}}))

    with pytest.raises(ExtractionError) as exc_info:
        LLMClient(llm_settings()).complete("hello")

    assert exc_info.value.message == "Model request failed"
    assert exc_info.value.status_code == 500
    assert route.call_count == 1


@respx.mock
def test_llm_network_error_is_wrapped():
    respx.post(LLM_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(ExtractionError):
        LLMClient(llm_settings()).complete("hello")


@respx.mock
def test_llm_empty_content_returns_empty_string():
    respx.post(LLM_URL).mock(return_value=httpx.Response(200, json=completion(None)))
    assert LLMClient(llm_settings()).complete("hello") == ""


def test_llm_not_configured_returns_mock_completion():
    client = LLMClient(Settings(LLM_API_KEY="", LLM_DEPLOYMENT=""))
    assert client.configured is False
    assert client.complete("hello") == MOCK_COMPLETION


def test_create_extractor_follows_strategy_setting():
    assert isinstance(create_extractor(llm_settings(EXTRACTION_STRATEGY="direct")), DirectImageExtractor)
    assert isinstance(create_extractor(llm_settings(EXTRACTION_STRATEGY="ocr")), OcrTextExtractor)


def test_unknown_strategy_rejected():
    with pytest.raises(ValueError):
        Settings(EXTRACTION_STRATEGY="telepathy")


def test_extractor_dependency_reuses_model_client(monkeypatch):
    monkeypatch.setattr(settings, "llm_api_key", "test-key")
    monkeypatch.setattr(settings, "llm_deployment", "test-model")
    get_extractor.cache_clear()
    try:
        first = get_extractor()
        second = get_extractor()

        assert first is second
        assert first.llm.client is second.llm.client
    finally:
        get_extractor.cache_clear()
