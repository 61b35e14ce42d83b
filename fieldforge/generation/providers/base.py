"""LLMClient protocol and LLMResponse — provider-agnostic generation interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from ...schemas.base import UsageInfo


@dataclass
class LLMResponse:
    """Response from an LLM provider.

    Attributes:
        content: The text content of the response.
        usage: Token usage information.
    """

    content: str
    usage: Optional[UsageInfo] = None


class LLMAPIError(Exception):
    """Provider-agnostic API error.

    Wraps provider-specific errors (openai.RateLimitError,
    anthropic.APIStatusError, etc.) so the generator can report a service
    failure without knowing about specific SDKs.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: float | None = None,
        is_rate_limit: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after
        self.is_rate_limit = is_rate_limit


@runtime_checkable
class LLMClient(Protocol):
    """Protocol all LLM provider adapters must satisfy."""

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse: ...


def split_system(messages: list[dict[str, Any]]) -> tuple[str | None, list[dict[str, Any]]]:
    """Separate the system message from the conversation turns.

    Every SDK except Chat Completions takes the system prompt as its own
    argument. The last system message wins.
    """
    system: str | None = None
    turns: list[dict[str, Any]] = []
    for message in messages:
        if message["role"] == "system":
            system = message["content"]
        else:
            turns.append({"role": message["role"], "content": message["content"]})
    return system, turns
