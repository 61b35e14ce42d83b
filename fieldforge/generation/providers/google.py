"""Google Gemini provider adapter — optional extra: pip install fieldforge[google]."""

from __future__ import annotations

import os
from typing import Any

from ...schemas.base import UsageInfo
from ...utils.logger import get_logger
from .base import LLMAPIError, LLMResponse, split_system

logger = get_logger(__name__)

# Gemini names the assistant role "model"
_ROLES = {"user": "user", "assistant": "model"}


class GoogleClient:
    """Adapter for Gemini models through the google-genai SDK.

    A ``json_object`` response format becomes
    ``response_mime_type="application/json"``.
    """

    def __init__(self, api_key: str | None = None):
        self._api_key = api_key
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from google import genai
            except ImportError:
                raise ImportError(
                    "google-genai package required: pip install fieldforge[google]"
                )
            self._client = genai.Client(
                api_key=self._api_key or os.environ.get("GOOGLE_API_KEY")
            )
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        from google.genai import types

        client = self._get_client()
        system, turns = split_system(messages)
        contents = [
            {"role": _ROLES[turn["role"]], "parts": [{"text": turn["content"]}]}
            for turn in turns
            if turn["role"] in _ROLES
        ]

        options: dict[str, Any] = {"temperature": temperature, "max_output_tokens": max_tokens}
        if system:
            options["system_instruction"] = system
        if response_format and response_format.get("type") == "json_object":
            options["response_mime_type"] = "application/json"

        try:
            response = await client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(**options),
            )
        except Exception as exc:
            raise _translate_error(exc, model) from exc

        if _finish_reason(response) == "MAX_TOKENS":
            logger.warning("Gemini stopped at max_output_tokens=%d; output is likely cut short", max_tokens)

        return LLMResponse(content=response.text or "", usage=_usage(response, model))


def _finish_reason(response: Any) -> str | None:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    return getattr(reason, "name", reason)


def _usage(response: Any, model: str) -> UsageInfo | None:
    metadata = response.usage_metadata
    if not metadata:
        return None
    tokens_in = metadata.prompt_token_count or 0
    tokens_out = metadata.candidates_token_count or 0
    return UsageInfo(
        prompt_tokens=tokens_in,
        completion_tokens=tokens_out,
        total_tokens=tokens_in + tokens_out,
        model=model,
    )


def _translate_error(exc: Exception, model: str) -> LLMAPIError:
    """Map any SDK failure to LLMAPIError.

    ``google.genai.errors.APIError`` carries the HTTP code; transport
    errors only have a message to go on.
    """
    from google.genai import errors

    code = exc.code if isinstance(exc, errors.APIError) else None
    text = str(exc)
    lowered = text.lower()
    if code == 429 or "429" in lowered or "resource_exhausted" in lowered:
        return LLMAPIError(f"Gemini rate limit for model '{model}': {text}", status_code=429, is_rate_limit=True)
    if code is None and "timeout" in lowered:
        return LLMAPIError(f"Gemini timeout for model '{model}': {text}", status_code=408)
    return LLMAPIError(f"Gemini API error for model '{model}': {text}", status_code=code)
