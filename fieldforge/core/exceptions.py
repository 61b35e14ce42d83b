"""
Custom exceptions for the FieldForge toolkit.

Provides specific exception types for each failure mode of the
document-reduction, generation, import and compilation paths, with
helpful error messages and context.
"""

from typing import Optional


class FieldForgeError(Exception):
    """Base exception for all FieldForge errors."""

    def __init__(self, message: str, field: Optional[str] = None, stage: Optional[str] = None):
        self.message = message
        self.field = field
        self.stage = stage

        # Build descriptive error message
        error_parts = [message]
        if stage is not None:
            error_parts.append(f"Stage: {stage}")
        if field is not None:
            error_parts.append(f"Field: {field}")

        super().__init__(" | ".join(error_parts))


class UnsupportedInput(FieldForgeError):
    """Raised when a document type or size is outside the accepted bounds."""
    pass


class ExtractionFailure(FieldForgeError):
    """Raised when a supported document yields no text."""
    pass


class ServiceFailure(FieldForgeError):
    """Raised when the generation service call does not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        self.status_code = status_code
        super().__init__(message, **kwargs)


class ResponseError(FieldForgeError):
    """Base for failures while post-processing a generation response."""
    pass


class MalformedResponse(ResponseError):
    """The response contains no ``{ ... }`` span to parse."""
    pass


class InvalidJson(ResponseError):
    """The sliced response is not valid JSON."""
    pass


class InvalidStructure(ResponseError):
    """The parsed response has no ``fields`` list."""
    pass


class ImportValidationError(FieldForgeError):
    """Raised when an imported payload is rejected as a whole."""
    pass


class FieldValidationError(FieldForgeError):
    """Raised when a field is missing or carries attributes its type forbids."""
    pass


class ConfigurationError(FieldForgeError):
    """Raised when configuration is invalid."""
    pass
