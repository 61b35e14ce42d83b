"""
Field list management and document input.
"""

from .documents import load_document, read_document
from .fields import FieldManager, validate_field

__all__ = ['FieldManager', 'load_document', 'read_document', 'validate_field']
