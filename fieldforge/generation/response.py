"""Strict post-processing of raw generation responses.

The response text is reduced to the outermost ``{ ... }`` span and parsed
as JSON. There is no lenient repair: a response that does not parse is an
error the caller reports.
"""

from __future__ import annotations

import json
import re
from typing import Any

from ..core.exceptions import InvalidJson, InvalidStructure, MalformedResponse
from ..text.normalizer import normalize

_FENCE = re.compile(r"```(?:json)?\n?")


def parse_generation_response(raw: str) -> dict[str, Any]:
    """Parse a generation response into a ``{"fields": [...]}`` payload.

    Raises:
        MalformedResponse: No ``{`` ... ``}`` span in the text.
        InvalidJson: The span is not valid JSON.
        InvalidStructure: The JSON is not an object with a ``fields`` list.
    """
    text = strip_code_fences(raw or "")

    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last == -1 or last < first:
        raise MalformedResponse(
            "Generation response did not contain a JSON object", stage="parsing"
        )

    candidate = normalize(text[first:last + 1])
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise InvalidJson(
            f"Generation response is not valid JSON: {exc.msg} "
            f"(line {exc.lineno}, column {exc.colno})",
            stage="parsing",
        ) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("fields"), list):
        raise InvalidStructure(
            'Invalid JSON structure: missing or invalid "fields" array',
            stage="parsing",
        )
    return payload


def strip_code_fences(text: str) -> str:
    """Remove every ```` ```json ```` and ```` ``` ```` marker and trim."""
    return _FENCE.sub("", text).strip()
