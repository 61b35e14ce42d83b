"""OpenAI provider adapter — default, covers all OpenAI-compatible APIs.

Uses the Responses API (``client.responses.create``). OpenAI-compatible
third-party providers that only expose Chat Completions (Ollama, Groq,
vLLM, ...) are served through ``client.chat.completions.create`` whenever a
``base_url`` is configured.
"""

from __future__ import annotations

import os
from typing import Any

from ...schemas.base import UsageInfo
from .base import LLMAPIError, LLMResponse, split_system


class OpenAIClient:
    """Adapter for OpenAI and OpenAI-compatible providers."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            from openai import AsyncOpenAI

            key = self._api_key or os.environ.get("OPENAI_API_KEY")
            kwargs: dict[str, Any] = {"api_key": key}
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        if self._base_url:
            return await self._complete_chat(
                messages, model, temperature, max_tokens, response_format,
            )
        return await self._complete_responses(
            messages, model, temperature, max_tokens, response_format,
        )

    # -- Responses API (native OpenAI) ------------------------------------

    async def _complete_responses(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        client = self._get_client()

        instructions, input_items = split_system(messages)

        kwargs: dict[str, Any] = dict(
            model=model,
            input=input_items,
            temperature=temperature,
            max_output_tokens=max_tokens,
        )
        if instructions:
            kwargs["instructions"] = instructions
        if response_format and response_format.get("type") == "json_object":
            kwargs["text"] = {"format": {"type": "json_object"}}

        response = await _call(client.responses.create, model, **kwargs)

        usage = None
        if response.usage:
            usage = UsageInfo(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.total_tokens,
                model=model,
            )
        return LLMResponse(content=response.output_text or "", usage=usage)

    # -- Chat Completions API (base_url providers) ------------------------

    async def _complete_chat(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        client = self._get_client()
        kwargs: dict[str, Any] = dict(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if response_format:
            kwargs["response_format"] = response_format

        response = await _call(client.chat.completions.create, model, **kwargs)

        content = response.choices[0].message.content or ""
        usage = None
        if response.usage:
            usage = UsageInfo(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
                model=model,
            )
        return LLMResponse(content=content, usage=usage)


async def _call(create: Any, model: str, **kwargs: Any) -> Any:
    """Invoke an SDK ``create`` coroutine, mapping SDK errors to LLMAPIError."""
    from openai import APIError, APITimeoutError, RateLimitError

    try:
        return await create(**kwargs)
    except RateLimitError as exc:
        retry_after = None
        if getattr(exc, "response", None) is not None:
            header = exc.response.headers.get("retry-after")
            if header:
                try:
                    retry_after = float(header)
                except (ValueError, TypeError):
                    retry_after = None
        raise LLMAPIError(
            f"OpenAI rate limit for model '{model}': {exc}",
            status_code=429,
            retry_after=retry_after,
            is_rate_limit=True,
        ) from exc
    except APITimeoutError as exc:
        raise LLMAPIError(
            f"OpenAI timeout for model '{model}': {exc}",
            status_code=408,
        ) from exc
    except APIError as exc:
        raise LLMAPIError(
            f"OpenAI API error for model '{model}': {exc}",
            status_code=getattr(exc, "status_code", None),
        ) from exc
