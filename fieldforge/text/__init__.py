"""Document-reduction pipeline: normalize, cut off, extract."""

from .cutoff import DEFAULT_GRACE_LINES, count_field_headers, cutoff
from .extractor import EXTRACTION_THRESHOLD, MIN_EXTRACTION_LENGTH, extract
from .normalizer import normalize


def reduce_document(
    text: str,
    grace_lines: int = DEFAULT_GRACE_LINES,
    threshold: int = EXTRACTION_THRESHOLD,
    min_length: int = MIN_EXTRACTION_LENGTH,
) -> str:
    """Run the full reduction: ``extract(cutoff(normalize(text)))``."""
    return extract(cutoff(normalize(text), grace_lines), threshold, min_length)


__all__ = [
    "count_field_headers",
    "cutoff",
    "extract",
    "normalize",
    "reduce_document",
]
