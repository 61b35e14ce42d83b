"""FieldGenerator — one document in, one list of FieldSpec out.

Runs the reduction pipeline, sends a single prompt to the configured
provider and parses the reply. Every invocation walks the stage machine

    idle -> normalizing -> extracting -> awaiting_response -> parsing -> done
                                                                       \\-> failed

and ends in a :class:`GenerationResult`. Failures are reported on the
result rather than raised, and nothing is retried: the caller decides
whether to run again.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from ..core.config import ForgeConfig
from ..core.exceptions import (
    ExtractionFailure,
    FieldForgeError,
    InvalidStructure,
    ServiceFailure,
)
from ..core.hooks import (
    GenerationCompleteEvent,
    GenerationHooks,
    StageChangeEvent,
    _fire_hook,
)
from ..schemas.base import UsageInfo
from ..schemas.field_spec import FieldSpec
from ..schemas.payload import FieldImport
from ..text import count_field_headers, cutoff, extract, normalize
from ..utils.logger import get_logger
from .prompt_builder import build_prompt
from .providers import LLMAPIError, LLMClient, create_client
from .response import parse_generation_response

logger = get_logger(__name__)


class GenerationStage(str, Enum):
    IDLE = "idle"
    NORMALIZING = "normalizing"
    EXTRACTING = "extracting"
    AWAITING_RESPONSE = "awaiting_response"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class GenerationWarning:
    """Advisory finding about a successful generation.

    ``possible_truncation`` means the reduced document had more numbered
    field headings (``expected``) than the service returned fields
    (``actual``).
    """

    kind: str
    message: str
    expected: Optional[int] = None
    actual: Optional[int] = None


@dataclass
class GenerationResult:
    """Result of one ``FieldGenerator.run()`` / ``run_async()`` call.

    Attributes:
        stage: ``DONE`` on success, ``FAILED`` otherwise.
        payload: Parsed JSON object returned by the service.
        fields: Validated fields from ``payload``.
        object_name: Object the fields belong to (payload or config default).
        reduced_text: Text that was embedded in the prompt.
        error: The failure, when ``stage`` is ``FAILED``.
        warnings: Advisory findings; never set on failure.
        usage: Token usage reported by the provider.
    """

    stage: GenerationStage = GenerationStage.IDLE
    payload: Optional[dict[str, Any]] = None
    fields: list[FieldSpec] = field(default_factory=list)
    object_name: Optional[str] = None
    reduced_text: str = ""
    error: Optional[FieldForgeError] = None
    warnings: list[GenerationWarning] = field(default_factory=list)
    usage: Optional[UsageInfo] = None

    @property
    def ok(self) -> bool:
        return self.stage is GenerationStage.DONE

    @property
    def error_kind(self) -> Optional[str]:
        """Class name of the failure (``"InvalidJson"``, ...) or None."""
        return type(self.error).__name__ if self.error is not None else None


class FieldGenerator:
    """Turns free-form specification text into FieldSpec records.

    Args:
        client: Provider adapter. Built from ``config.provider`` when omitted.
        config: Generation and reduction options.
        hooks: Optional stage and completion callbacks.
    """

    def __init__(
        self,
        client: LLMClient | None = None,
        config: ForgeConfig | None = None,
        hooks: GenerationHooks | None = None,
    ):
        self.config = config or ForgeConfig()
        self.client = client if client is not None else create_client(self.config)
        self.hooks = hooks or GenerationHooks()

    def run(self, text: str) -> GenerationResult:
        """Synchronous entry point.

        Raises ``RuntimeError`` if called from inside a running event loop
        (use ``await generator.run_async(text)`` in that case).
        """
        try:
            asyncio.get_running_loop()
            raise RuntimeError(
                "FieldGenerator.run() cannot be called from inside an async context. "
                "Use 'await generator.run_async(...)' instead."
            )
        except RuntimeError as exc:
            if "run_async" in str(exc):
                raise
        return asyncio.run(self.run_async(text))

    async def run_async(self, text: str) -> GenerationResult:
        """Async entry point — ``await generator.run_async(text)``."""
        result = GenerationResult()
        started = time.perf_counter()

        async def advance(stage: GenerationStage) -> None:
            previous = result.stage
            result.stage = stage
            logger.debug("Generation stage %s -> %s", previous.value, stage.value)
            await _fire_hook(
                self.hooks.on_stage_change,
                StageChangeEvent(
                    previous=previous.value,
                    stage=stage.value,
                    elapsed_seconds=time.perf_counter() - started,
                ),
            )

        try:
            await self._generate(text, result, advance)
        except FieldForgeError as exc:
            result.error = exc
            result.warnings = []
            logger.error("Generation failed while %s: %s", result.stage.value, exc)
            await advance(GenerationStage.FAILED)
        else:
            await advance(GenerationStage.DONE)

        await _fire_hook(
            self.hooks.on_complete,
            GenerationCompleteEvent(
                result=result,
                elapsed_seconds=time.perf_counter() - started,
            ),
        )
        return result

    # -- stages -----------------------------------------------------------

    async def _generate(self, text: str, result: GenerationResult, advance) -> None:
        cfg = self.config

        await advance(GenerationStage.NORMALIZING)
        if not text or not text.strip():
            raise ExtractionFailure(
                "Please provide field specification text",
                stage=GenerationStage.NORMALIZING.value,
            )
        normalized = normalize(text)

        await advance(GenerationStage.EXTRACTING)
        reduced = extract(
            cutoff(normalized, cfg.cutoff_grace_lines),
            cfg.extraction_threshold,
            cfg.min_extraction_length,
        )
        result.reduced_text = reduced
        logger.info(
            "Reduced document from %d to %d characters", len(text), len(reduced)
        )
        if not reduced.strip():
            raise ExtractionFailure(
                "No field specifications left after removing non-field sections",
                stage=GenerationStage.EXTRACTING.value,
            )

        await advance(GenerationStage.AWAITING_RESPONSE)
        prompt = build_prompt(reduced, cfg.default_object_name)
        response_format = {"type": "json_object"} if cfg.json_mode else None
        try:
            response = await self.client.complete(
                messages=[{"role": "user", "content": prompt}],
                model=cfg.model,
                temperature=cfg.temperature,
                max_tokens=cfg.max_tokens,
                response_format=response_format,
            )
        except LLMAPIError as exc:
            raise ServiceFailure(
                str(exc) or "Could not connect to the generation service",
                status_code=exc.status_code,
                stage=GenerationStage.AWAITING_RESPONSE.value,
            ) from exc
        result.usage = response.usage

        await advance(GenerationStage.PARSING)
        payload = parse_generation_response(response.content)
        try:
            document = FieldImport.model_validate(payload)
        except ValidationError as exc:
            raise InvalidStructure(
                f"Generated fields failed validation: {exc.error_count()} error(s)",
                stage=GenerationStage.PARSING.value,
            ) from exc

        result.payload = payload
        result.fields = list(document.fields)
        result.object_name = document.object_name or cfg.default_object_name
        result.warnings = self._check_field_count(reduced, len(result.fields))

    def _check_field_count(self, reduced: str, actual: int) -> list[GenerationWarning]:
        expected = count_field_headers(reduced)
        if expected <= actual:
            return []
        message = (
            f"Document lists {expected} numbered field headings but only "
            f"{actual} fields were generated; the response may be truncated"
        )
        logger.warning(message)
        return [
            GenerationWarning(
                kind="possible_truncation",
                message=message,
                expected=expected,
                actual=actual,
            )
        ]
