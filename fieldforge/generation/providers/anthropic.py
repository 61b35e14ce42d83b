"""Anthropic provider adapter — optional extra: pip install fieldforge[anthropic]."""

from __future__ import annotations

import os
from typing import Any

from ...schemas.base import UsageInfo
from ...utils.logger import get_logger
from .base import LLMAPIError, LLMResponse, split_system

logger = get_logger(__name__)


class AnthropicClient:
    """Adapter for Claude models through the Messages API.

    There is no JSON-object response mode, so ``response_format`` is
    accepted and ignored; the prompt asks for bare JSON and the response
    parser strips any code fences.
    """

    def __init__(self, api_key: str | None = None):
        self._api_key = api_key
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic
            except ImportError:
                raise ImportError(
                    "anthropic package required: pip install fieldforge[anthropic]"
                )
            self._client = AsyncAnthropic(
                api_key=self._api_key or os.environ.get("ANTHROPIC_API_KEY")
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
        client = self._get_client()
        import anthropic

        system, turns = split_system(messages)

        request: dict[str, Any] = {
            "model": model,
            "messages": turns,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if system:
            request["system"] = system

        try:
            response = await client.messages.create(**request)
        except anthropic.APIError as exc:
            raise _translate_error(exc, model) from exc

        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning("Claude stopped at max_tokens=%d; output is likely cut short", max_tokens)

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )
        return LLMResponse(content=text, usage=_usage(response, model))


def _usage(response: Any, model: str) -> UsageInfo | None:
    if not response.usage:
        return None
    tokens_in = response.usage.input_tokens
    tokens_out = response.usage.output_tokens
    return UsageInfo(
        prompt_tokens=tokens_in,
        completion_tokens=tokens_out,
        total_tokens=tokens_in + tokens_out,
        model=model,
    )


def _translate_error(exc: Any, model: str) -> LLMAPIError:
    import anthropic

    if isinstance(exc, anthropic.RateLimitError):
        return LLMAPIError(f"Anthropic rate limit for model '{model}': {exc}", status_code=429, is_rate_limit=True)
    if isinstance(exc, anthropic.APITimeoutError):
        return LLMAPIError(f"Anthropic timeout for model '{model}': {exc}", status_code=408)
    return LLMAPIError(
        f"Anthropic API error for model '{model}': {exc}",
        status_code=getattr(exc, "status_code", None),
    )
