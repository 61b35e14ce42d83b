"""Field-specification extractor — keeps the field-dense parts of a document.

Large requirement documents spend most of their length on context the
generation call does not need. The extractor splits the text into sections
at heading lines, scores each section by how much it reads like a field
definition, and keeps only the sections that score high enough.

The scan is a fold: :func:`scan_line` maps ``(SectionScan, line)`` to the
next ``SectionScan``, so each step can be exercised in isolation.

Safety valve: if the kept text is implausibly short, the input is returned
unchanged instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from functools import reduce

from ..utils.logger import get_logger

logger = get_logger(__name__)

EXTRACTION_THRESHOLD = 3000
MIN_EXTRACTION_LENGTH = 100
MIN_SECTION_SCORE = 2

HEADING_BONUS = 3
HIGH_VALUE_SCORE = 3
MEDIUM_VALUE_SCORE = 2

SECTION_MARKERS = ("##", "###", "####", "**")

HEADING_KEYWORDS = (
    "field", "specification", "requirement", "data model", "schema",
    "relationship", "lookup", "formula", "picklist", "__c",
)

HIGH_VALUE_KEYWORDS = (
    "field label", "field type", "field name", "api name", "apiname",
    "lookup", "formula", "picklist", "master-detail", "master detail",
    "help text", "description", "relationship", "precision", "scale",
    "referenceto", "reference to",
)

MEDIUM_VALUE_KEYWORDS = (
    "field", "type:", "label:", "required:", "help:", "values:",
    "formula:", "relationship:", "length:", "default:", "__c",
    "external id", "unique",
)

_BULLET_WITH_COLON = re.compile(r"^\s*[-*]\s+.*:")
_DEFAULT_ANNOTATION = re.compile(r"^[-*]\s+(.*)\s*\(default\)", re.IGNORECASE)
_TABLE_ROW = re.compile(r"\|\s*\w+\s*\|")
_CODE_FENCE = re.compile(r"^\s*```")


@dataclass(frozen=True)
class SectionScan:
    """Fold state for the section scan.

    Attributes:
        sections: Sections already accepted, in document order.
        current: Lines of the section being accumulated.
        score: Running score of the current section.
        in_high_value: True once the current section looks field-related.
    """

    sections: tuple[str, ...] = ()
    current: tuple[str, ...] = ()
    score: int = 0
    in_high_value: bool = False

    def flushed(self, min_score: int = MIN_SECTION_SCORE) -> tuple[str, ...]:
        """Accepted sections including the current one if it qualifies."""
        if self.score >= min_score and self.current:
            return self.sections + ("\n".join(self.current),)
        return self.sections


def extract(
    text: str,
    threshold: int = EXTRACTION_THRESHOLD,
    min_length: int = MIN_EXTRACTION_LENGTH,
) -> str:
    """Reduce *text* to the sections most likely to define fields.

    Args:
        text: Normalized (and usually cut-off) document text.
        threshold: Inputs shorter than this are returned unchanged.
        min_length: Extractions shorter than this are discarded and the
            input is returned unchanged.

    Returns:
        The kept sections joined by a blank line, or *text* itself.
    """
    if not text or not text.strip() or len(text) < threshold:
        return text

    logger.info("Large document detected (%d chars), extracting field specifications", len(text))

    final = reduce(scan_line, text.split("\n"), SectionScan())
    extracted = "\n\n".join(final.flushed()).strip()

    if len(extracted) < min_length:
        logger.warning(
            "Extraction too aggressive (%d chars), using the full text", len(extracted)
        )
        return text

    reduction = (1 - len(extracted) / len(text)) * 100
    logger.info(
        "Extracted %d chars from %d chars (%.1f%% reduction)",
        len(extracted), len(text), reduction,
    )
    return extracted


def scan_line(state: SectionScan, line: str) -> SectionScan:
    """Advance the section scan by one line."""
    if is_section_start(line):
        score, high_value = score_heading(line)
        return SectionScan(
            sections=state.flushed(),
            current=(line,),
            score=score,
            in_high_value=high_value,
        )

    line_score, high_value = score_line(line)
    state = replace(
        state,
        current=state.current + (line,),
        score=state.score + line_score,
        in_high_value=state.in_high_value or high_value,
    )

    # A blank line closing a run of filler restarts the accumulation.
    if (
        not line.strip()
        and not state.in_high_value
        and state.score < 1
        and len(state.current) > 3
    ):
        return replace(state, current=(), score=0)
    return state


def is_section_start(line: str) -> bool:
    stripped = line.strip()
    return any(stripped.startswith(marker) for marker in SECTION_MARKERS)


def score_heading(line: str) -> tuple[int, bool]:
    """Score a heading line; returns ``(score, marks_high_value)``."""
    lower = line.strip().lower()
    if any(keyword in lower for keyword in HEADING_KEYWORDS):
        return HEADING_BONUS, True
    return 0, False


def score_line(line: str) -> tuple[int, bool]:
    """Score a body line; returns ``(score, marks_high_value)``."""
    lower = line.strip().lower()
    score = 0
    high_value = False

    if any(keyword in lower for keyword in HIGH_VALUE_KEYWORDS):
        score += HIGH_VALUE_SCORE
        high_value = True
    if any(keyword in lower for keyword in MEDIUM_VALUE_KEYWORDS):
        score += MEDIUM_VALUE_SCORE
    if _BULLET_WITH_COLON.match(line):
        score += 2
    if "__c" in line:
        score += 2
    if _DEFAULT_ANNOTATION.match(line):
        score += 2
    if _TABLE_ROW.search(line):
        score += 1
    if _CODE_FENCE.match(line):
        score += 1

    return score, high_value
