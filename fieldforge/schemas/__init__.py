"""Pydantic schemas for field metadata.

This package provides the models every other module exchanges:

- FieldSpec: one custom field, tagged by type
- PicklistValue: one entry of a picklist value set
- FieldImport: ``{objectName?, fields: [...]}`` import/generation payload
- UsageInfo: token usage reported by a generation provider

Example:
    from fieldforge.schemas import FieldSpec

    field = FieldSpec.model_validate({
        "apiName": "Patient_Name__c",
        "label": "Patient Name",
        "type": "Text",
        "length": 255,
    })
    field.variant()   # only the attributes a Text field uses
"""

from .base import CamelModel, UsageInfo
from .field_spec import ALL_FIELD_TYPES, TYPE_ATTRIBUTES, FieldSpec, PicklistValue
from .payload import FieldImport

__all__ = [
    "ALL_FIELD_TYPES",
    "TYPE_ATTRIBUTES",
    "CamelModel",
    "FieldImport",
    "FieldSpec",
    "PicklistValue",
    "UsageInfo",
]
