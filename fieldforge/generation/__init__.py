"""Field generation: prompt, provider call and strict response parsing."""

from .generator import (
    FieldGenerator,
    GenerationResult,
    GenerationStage,
    GenerationWarning,
)
from .prompt_builder import build_prompt
from .providers import LLMAPIError, LLMClient, LLMResponse, create_client
from .response import parse_generation_response

__all__ = [
    "FieldGenerator",
    "GenerationResult",
    "GenerationStage",
    "GenerationWarning",
    "LLMAPIError",
    "LLMClient",
    "LLMResponse",
    "build_prompt",
    "create_client",
    "parse_generation_response",
]
