"""Character normalizer — folds Unicode punctuation noise to ASCII.

Word processors and chat tools paste curly quotes, en dashes, non-breaking
spaces and zero-width joiners into specification documents. Those
characters confuse both the section heuristics and the JSON the model
echoes back, so every piece of text is folded to plain ASCII punctuation
first. Every replacement is ASCII, which makes the mapping idempotent.
"""

from __future__ import annotations

import re

# Code points grouped by their ASCII replacement.
DOUBLE_QUOTES = (
    0x201C, 0x201D, 0x201E, 0x201F,  # curly and low double quotes
    0x2033, 0x2036,                  # double primes
    0x301D, 0x301E, 0x301F,          # CJK double quotes
    0xFF02,                          # full-width quotation mark
)
ANGLE_QUOTES = (0x00AB, 0x00BB, 0x2039, 0x203A)
SINGLE_QUOTES = (
    0x2018, 0x2019, 0x201A, 0x201B,  # curly and low single quotes
    0x2032, 0x2035,                  # primes
    0x02BC, 0xFF07,                  # modifier letter apostrophe, full-width
)
DASHES = (
    0x2010, 0x2011,                  # hyphen, non-breaking hyphen
    0x2012, 0x2013, 0x2014, 0x2015,  # figure, en, em dash, horizontal bar
    0x2212,                          # minus sign
    0xFE58, 0xFE63, 0xFF0D,          # small and full-width dashes
)
SPACES = (
    0x00A0, 0x1680,
    *range(0x2000, 0x200B),          # en quad .. hair space
    0x202F, 0x205F, 0x3000,
)
BULLETS = (0x2022, 0x2023, 0x2043, 0x2219, 0x25AA, 0x25AB, 0x25B8, 0x25BA, 0x25CF, 0x25E6)
ZERO_WIDTH = (0x200B, 0x200C, 0x200D, 0x2060, 0xFEFF)
LINE_SEPARATORS = (0x2028, 0x2029, 0x0085)
ELLIPSIS = 0x2026

_TRANSLATION: dict[int, str | None] = {}
for _points, _target in (
    (DOUBLE_QUOTES, '"'),
    (ANGLE_QUOTES, '"'),
    (SINGLE_QUOTES, "'"),
    (DASHES, "-"),
    (SPACES, " "),
    (BULLETS, "-"),
    (LINE_SEPARATORS, "\n"),
):
    for _point in _points:
        _TRANSLATION[_point] = _target
for _point in ZERO_WIDTH:
    _TRANSLATION[_point] = None
_TRANSLATION[ELLIPSIS] = "..."

_LINE_BREAK = re.compile(r"\r\n?")


def normalize(text: str) -> str:
    """Fold Unicode quote, dash, space, bullet and line-break variants to ASCII.

    Zero-width characters and the BOM are dropped. ``CRLF`` and lone ``CR``
    become ``LF``. The function is total and idempotent.
    """
    if not text:
        return text
    return _LINE_BREAK.sub("\n", text.translate(_TRANSLATION))
