"""
Best-effort JSON recovery from language model output.

Model completions are not guaranteed to be well-formed: the JSON may be
wrapped in markdown code fences, surrounded by prose, or missing entirely.
extract_json never raises; when nothing parses it returns None and the
caller keeps the raw completion for manual review.
"""

import json
import re
from typing import Any

CODE_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
FIRST_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

_decoder = json.JSONDecoder()


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_RE.sub("", text).strip()


def extract_json(text: str | None) -> Any | None:
    """
    Parse the JSON carried by a model completion.

    Steps:
        1. Remove ``` / ```json fence markers and trim.
        2. Parse the whole remaining text.
        3. Parse the span from the first "{" to the last "}".
        4. Decode the brace-balanced object opening at the first "{".

    Args:
        text: Raw completion text (may be None or empty)

    Returns:
        The parsed structure, or None when no JSON could be recovered.
    """
    if not text:
        return None

    cleaned = strip_code_fences(text)
    if not cleaned:
        return None

    try:
        return json.loads(cleaned)
    except (ValueError, RecursionError):
        pass

    match = FIRST_OBJECT_RE.search(cleaned)
    if match is None:
        return None

    try:
        return json.loads(match.group(0))
    except (ValueError, RecursionError):
        pass

    # Prose containing stray braces after the object defeats the greedy span.
    # Only an object opening at the first "{" counts; inner fragments of a
    # truncated answer must not be mistaken for the whole invoice.
    try:
        parsed, _ = _decoder.raw_decode(cleaned, match.start())
        return parsed
    except (ValueError, RecursionError):
        return None
