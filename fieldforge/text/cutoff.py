"""Section cutoff — drops the trailing non-field part of a specification.

Requirement documents usually describe the fields first and then move on to
validation rules, layouts, automation, reports, training and so on. Those
trailing sections are noise for field generation (and often mention
``__c`` names that would be mistaken for new fields), so the document is cut
at the first such heading that appears safely after the last field
definition.

The cut is always a prefix of the input: nothing is appended or reordered.
"""

from __future__ import annotations

import re

from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_GRACE_LINES = 15

_HEADING = re.compile(r"^\s*(#{1,6}|\*\*)")

# "### 3. Patient_Name__c", "**Field 12: Status__c**", "## #4 - Amount__c"
FIELD_HEADER = re.compile(
    r"^\s*(?:#{2,6}|\*\*)\s*(?:field\s*)?#?\d+\s*[.):\-]?\s*.*?\b\w+__c\b",
    re.IGNORECASE,
)

# Headings that open a part of the document where numbered ``__c`` headers
# name rules, layouts or automation rather than fields.
NON_FIELD_CONTEXT = re.compile(
    r"validation|workflow|dashboard|layout|report|\bflows?\b|process\s+builder"
    r"|trigger|apex|permission|sharing|security|record\s+types?",
    re.IGNORECASE,
)

_LOOSE_FIELD_INDICATORS = (
    re.compile(r"^\s*(?:[-*]\s*)?(?:\*\*)?\s*api\s*name\s*(?:\*\*)?\s*:.*__c\W*$", re.IGNORECASE),
    re.compile(r"^\s*(?:[-*]\s*)?(?:\*\*)?\s*field\s*label\s*(?:\*\*)?\s*:", re.IGNORECASE),
    re.compile(r"^\s*(?:[-*]\s*)?(?:\*\*)?\s*data\s*type\s*(?:\*\*)?\s*:", re.IGNORECASE),
)

_SECTION_PREFIX = r"^\s*(?:#{1,6}\s*|\*\*\s*)(?:\d+(?:\.\d+)*[.)]?\s*)?"

_SECTION_TITLES = (
    r"validation\s+rules?",
    r"page\s+layouts?",
    r"record\s+types?",
    r"workflows?",
    r"process\s+builders?",
    r"flows?",
    r"apex",
    r"lightning\s+(?:web\s+)?components?",
    r"reports?",
    r"dashboards?",
    r"integrations?",
    r"security",
    r"sharing",
    r"permissions?",
    r"best\s+practices",
    r"success\s+metrics",
    r"training",
    r"maintenance",
    r"support",
    r"summary",
    r"related\s+lists?",
    r"mobile\s+layouts?",
    r"deployment",
    r"testing",
)

SECTION_PATTERNS = tuple(
    re.compile(_SECTION_PREFIX + title + r"\b", re.IGNORECASE) for title in _SECTION_TITLES
)


def cutoff(text: str, grace_lines: int = DEFAULT_GRACE_LINES) -> str:
    """Truncate *text* at the first non-field section after the last field.

    Args:
        text: Normalized document text (LF line endings).
        grace_lines: Lines after the last field header that are never cut,
            so a field's trailing prose is not mistaken for a boundary.

    Returns:
        A prefix of *text*; the input itself when no boundary is found.
    """
    if not text:
        return text

    lines = text.split("\n")
    last_field = find_last_field_line(lines)
    start = last_field + grace_lines if last_field >= 0 else 0

    for index in range(start, len(lines)):
        if is_section_boundary(lines[index]):
            logger.info(
                "Cutting %d trailing lines at non-field section %r",
                len(lines) - index, lines[index].strip(),
            )
            return "\n".join(lines[:index])

    return text


def find_last_field_line(lines: list[str]) -> int:
    """Index of the last line that looks like a field definition, or ``-1``.

    Numbered field headers win; loose indicators (``API Name:``,
    ``Field Label:``, ``Data Type:``) are only consulted when there are none.
    """
    headers = field_header_lines(lines)
    if headers:
        return headers[-1]

    for index in range(len(lines) - 1, -1, -1):
        if any(pattern.match(lines[index]) for pattern in _LOOSE_FIELD_INDICATORS):
            return index
    return -1


def field_header_lines(lines: list[str]) -> list[int]:
    """Indices of numbered field headers outside non-field heading contexts.

    A heading matching ``NON_FIELD_CONTEXT`` opens a context at its level;
    the next heading of the same or a shallower level closes it. Bold
    headings count as the deepest level.
    """
    indices: list[int] = []
    context_level: int | None = None

    for index, line in enumerate(lines):
        level = _heading_level(line)
        if level is None:
            continue

        closes_context = context_level is not None and level <= context_level

        if FIELD_HEADER.match(line):
            if closes_context:
                context_level = None
            if context_level is None:
                indices.append(index)
            continue

        if NON_FIELD_CONTEXT.search(line):
            if context_level is None or closes_context:
                context_level = level
        elif closes_context:
            context_level = None

    return indices


def count_field_headers(text: str) -> int:
    """Number of numbered field headers in *text*."""
    return len(field_header_lines(text.split("\n"))) if text else 0


def is_section_boundary(line: str) -> bool:
    return any(pattern.match(line) for pattern in SECTION_PATTERNS)


def _heading_level(line: str) -> int | None:
    match = _HEADING.match(line)
    if match is None:
        return None
    marker = match.group(1)
    return 7 if marker == "**" else len(marker)
