"""Salesforce metadata output."""

from .compiler import compile_field, compile_fields, field_filename, write_fields

__all__ = ["compile_field", "compile_fields", "field_filename", "write_fields"]
