"""
FieldForge - Salesforce Field Metadata Toolkit

Turns field specifications, written by hand or generated from free-form
requirement documents, into deploy-ready CustomField XML metadata.
"""

from .core import ForgeConfig, FieldForgeError, FieldValidationError, GenerationHooks
from .data import FieldManager, load_document
from .generation import FieldGenerator, GenerationResult
from .metadata import compile_field
from .schemas import FieldImport, FieldSpec
from .text import reduce_document

__version__ = "0.1.0"

__all__ = [
    'FieldManager',
    'FieldGenerator',
    'GenerationResult',
    'GenerationHooks',
    'FieldSpec',
    'FieldImport',
    'ForgeConfig',
    'FieldForgeError',
    'FieldValidationError',
    'compile_field',
    'load_document',
    'reduce_document',
]
