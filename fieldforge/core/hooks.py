"""Lifecycle hooks for generation observability.

Typed event dataclasses + ``GenerationHooks`` container.  Hook callables
are optional; ``_fire_hook`` catches and logs their errors so an observer
can never fail a generation.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..generation.generator import GenerationResult

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Event dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StageChangeEvent:
    """Fired on every generation stage transition."""

    previous: str
    stage: str
    elapsed_seconds: float


@dataclass(frozen=True)
class GenerationCompleteEvent:
    """Fired once when a generation ends, successfully or not."""

    result: GenerationResult
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# GenerationHooks container
# ---------------------------------------------------------------------------


@dataclass
class GenerationHooks:
    """User-facing hook container, passed to ``FieldGenerator``.

    All fields are optional callables. Sync and async callables both work.
    """

    on_stage_change: Optional[Callable[[StageChangeEvent], Any]] = None
    on_complete: Optional[Callable[[GenerationCompleteEvent], Any]] = None


# ---------------------------------------------------------------------------
# Fire helper
# ---------------------------------------------------------------------------


async def _fire_hook(hook: Optional[Callable], event: Any) -> None:
    """Call *hook* with *event*, awaiting if async.  Errors are logged."""
    if hook is None:
        return
    try:
        result = hook(event)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.warning("Hook %s raised an exception", hook, exc_info=True)
