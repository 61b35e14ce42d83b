"""
Core configuration, errors and hooks for the FieldForge toolkit.
"""

from .config import ForgeConfig
from .exceptions import (
    ConfigurationError,
    ExtractionFailure,
    FieldForgeError,
    FieldValidationError,
    ImportValidationError,
    InvalidJson,
    InvalidStructure,
    MalformedResponse,
    ResponseError,
    ServiceFailure,
    UnsupportedInput,
)
from .hooks import GenerationCompleteEvent, GenerationHooks, StageChangeEvent

__all__ = [
    'ForgeConfig',
    'FieldForgeError',
    'UnsupportedInput',
    'ExtractionFailure',
    'ServiceFailure',
    'ResponseError',
    'MalformedResponse',
    'InvalidJson',
    'InvalidStructure',
    'ImportValidationError',
    'FieldValidationError',
    'ConfigurationError',
    'GenerationHooks',
    'StageChangeEvent',
    'GenerationCompleteEvent',
]
