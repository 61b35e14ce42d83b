"""FieldManager — the editable, ordered list of fields for one object.

Holds the editing rules that sit in front of the compiler:

- Lookup fields never stay both required and ``SetNull`` (the flag that was
  just changed wins, the other side is adjusted).
- Renaming a label also renames the API name while the API name is still
  the one derived from the old label.
- Imports replace the whole list or nothing.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from ..core.config import ForgeConfig
from ..core.exceptions import FieldValidationError, ImportValidationError
from ..metadata.compiler import compile_fields, write_fields
from ..schemas.field_spec import (
    LONG_TEXT_TYPES,
    MAX_LONG_TEXT_LENGTH,
    MAX_PRECISION,
    MAX_SCALE,
    MAX_TEXT_LENGTH,
    NUMERIC_TYPES,
    RELATIONSHIP_TYPES,
    TEXT_TYPES,
    FieldSpec,
)
from ..schemas.payload import FieldImport
from ..utils.logger import get_logger

logger = get_logger(__name__)

CATEGORIES = ("general", "lookup", "formula")

NEW_FIELD_NAME = "New_Field"

_NON_WORD = re.compile(r"[^a-zA-Z0-9]")
_WHITESPACE = re.compile(r"\s+")

# Flags an import may omit or null out; they are stored as False.
_IMPORT_FLAGS = (
    ("required", "required"),
    ("trackHistory", "track_history"),
    ("externalId", "external_id"),
    ("unique", "unique"),
)


def api_name_from_label(label: str) -> str:
    """``"Account Owner"`` -> ``"Account_Owner__c"``."""
    return _NON_WORD.sub("_", label) + "__c"


def field_category(field: FieldSpec) -> str:
    """``lookup`` for relationships, ``formula`` for formulas, else ``general``."""
    if field.type in RELATIONSHIP_TYPES:
        return "lookup"
    if field.type == "Formula":
        return "formula"
    return "general"


def validate_field(field: FieldSpec) -> list[str]:
    """Editor validation messages for *field*; empty when it is complete."""
    errors: list[str] = []
    if not field.api_name:
        errors.append("API Name is required")
    if not field.label:
        errors.append("Label is required")

    if field.type in TEXT_TYPES and not _in_range(field.length, 1, MAX_TEXT_LENGTH):
        errors.append(f"{field.type} length must be between 1 and {MAX_TEXT_LENGTH}")
    if field.type in LONG_TEXT_TYPES and not _in_range(field.length, 1, MAX_LONG_TEXT_LENGTH):
        errors.append(f"{field.type} length must be between 1 and {MAX_LONG_TEXT_LENGTH}")

    if field.type in NUMERIC_TYPES or field.is_numeric_formula:
        if field.precision is not None and not _in_range(field.precision, 1, MAX_PRECISION):
            errors.append(f"Precision must be between 1 and {MAX_PRECISION}")
        if field.scale is not None and not _in_range(field.scale, 0, MAX_SCALE):
            errors.append(f"Scale must be between 0 and {MAX_SCALE}")

    if field.type in RELATIONSHIP_TYPES and not field.reference_to:
        errors.append("Reference To object is required for Lookup/MasterDetail fields")
    if field.type == "Formula" and not field.formula:
        errors.append("Formula expression is required")
    return errors


def _in_range(value: Optional[int], low: int, high: int) -> bool:
    return value is not None and low <= value <= high


class FieldManager:
    """In-memory field list for one object.

    Fields are addressed by API name. All mutations replace the stored
    ``FieldSpec`` with a validated copy, so a failed update leaves the list
    untouched.

    Args:
        fields: Initial fields, in display order.
        object_name: Owning object; defaults to ``config.default_object_name``.
        config: Used for the default object name and export progress bar.
    """

    def __init__(
        self,
        fields: Optional[list[FieldSpec]] = None,
        object_name: Optional[str] = None,
        config: Optional[ForgeConfig] = None,
    ):
        self.config = config or ForgeConfig()
        self.object_name = object_name or self.config.default_object_name
        self._fields: list[FieldSpec] = list(fields or [])

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)

    @property
    def fields(self) -> list[FieldSpec]:
        return list(self._fields)

    # -- list editing -----------------------------------------------------

    def add_field(self, field: Optional[FieldSpec] = None) -> FieldSpec:
        """Append *field*, or a blank ``New_Field__c`` Text(255) field.

        A blank field gets a numbered API name (``New_Field_2__c``, ...)
        when ``New_Field__c`` is taken.
        """
        if field is None:
            field = FieldSpec(
                api_name=self._unused_api_name(NEW_FIELD_NAME),
                label="New Field",
                type="Text",
                length=MAX_TEXT_LENGTH,
            )
        elif field.api_name and self._index(field.api_name) is not None:
            raise FieldValidationError("A field with this API name already exists", field=field.api_name)

        self._fields.append(field)
        logger.debug("Added field %s (%s)", field.api_name, field.type)
        return field

    def get_field(self, api_name: str) -> FieldSpec:
        index = self._index(api_name)
        if index is None:
            raise FieldValidationError("No such field", field=api_name)
        return self._fields[index]

    def update_field(self, api_name: str, **changes: Any) -> FieldSpec:
        """Apply editor changes (Python attribute names) to one field.

        Lookup coercion applies to fields that are already Lookups; a change
        that turns a field into a Lookup is stored as given.

        Raises:
            FieldValidationError: Unknown field, unknown attribute, a value
                of the wrong type, or a rename onto an existing API name.
        """
        index = self._index(api_name)
        if index is None:
            raise FieldValidationError("No such field", field=api_name)
        current = self._fields[index]

        unknown = set(changes) - set(FieldSpec.model_fields)
        if unknown:
            raise FieldValidationError(
                f"Unknown field attributes: {', '.join(sorted(unknown))}", field=api_name
            )

        data = current.model_dump()
        data.update(changes)

        if "label" in changes and "api_name" not in changes:
            derived_from_old = _WHITESPACE.sub("_", current.label) + "__c"
            if not current.api_name or current.api_name == derived_from_old:
                data["api_name"] = api_name_from_label(changes["label"] or "")

        if current.type == "Lookup":
            if changes.get("required") is True and data.get("delete_constraint") == "SetNull":
                data["delete_constraint"] = "Restrict"
            elif changes.get("delete_constraint") == "SetNull" and data.get("required") is True:
                data["required"] = False

        try:
            updated = FieldSpec.model_validate(data)
        except ValidationError as exc:
            raise FieldValidationError(f"Invalid field update: {exc}", field=api_name) from exc

        if updated.api_name != current.api_name:
            clash = self._index(updated.api_name)
            if updated.api_name and clash is not None and clash != index:
                raise FieldValidationError("A field with this API name already exists", field=updated.api_name)

        self._fields[index] = updated
        return updated

    def delete_field(self, api_name: str) -> FieldSpec:
        index = self._index(api_name)
        if index is None:
            raise FieldValidationError("No such field", field=api_name)
        return self._fields.pop(index)

    # -- import -----------------------------------------------------------

    def import_json(self, payload: str | dict[str, Any], strict: bool = False) -> list[FieldSpec]:
        """Replace every field with those of an ``{objectName?, fields}`` document.

        Flags the document omits (or sets to null) are stored as ``False``.
        Nothing changes unless the whole document is valid. With *strict*,
        a field carrying attributes its type does not use is invalid too.

        Raises:
            ImportValidationError: Unparseable JSON, a missing or non-list
                ``fields`` entry, or any invalid field.
        """
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise ImportValidationError(f"Error parsing JSON: {exc.msg}") from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("fields"), list):
            raise ImportValidationError('Invalid JSON format. Expected { "fields": [...] }')

        raw_fields = []
        for position, raw in enumerate(payload["fields"]):
            if not isinstance(raw, dict):
                raise ImportValidationError(f"Field {position + 1} is not a JSON object")
            raw = dict(raw)
            for alias, name in _IMPORT_FLAGS:
                raw[alias] = raw.get(alias, raw.pop(name, None)) or False
            raw_fields.append(raw)
            if strict:
                _check_strict(raw, position)

        try:
            document = FieldImport.model_validate({**payload, "fields": raw_fields})
        except ValidationError as exc:
            raise ImportValidationError(f"Invalid field in import: {exc}") from exc

        self._fields = list(document.fields)
        if document.object_name:
            self.object_name = document.object_name
        logger.info("Imported %d fields for %s", len(self._fields), self.object_name)
        return self.fields

    def to_import(self, prune: bool = False) -> FieldImport:
        """The current list as an importable document.

        *prune* drops attributes left over from a previous type.
        """
        fields = [f.pruned() for f in self._fields] if prune else self.fields
        return FieldImport(object_name=self.object_name, fields=fields)

    # -- categories and export -------------------------------------------

    def get_category_fields(self, category: str) -> list[FieldSpec]:
        if category not in CATEGORIES:
            raise ValueError(f"category must be one of {', '.join(CATEGORIES)}, got {category!r}")
        return [f for f in self._fields if field_category(f) == category]

    def compile_all(self, category: Optional[str] = None) -> dict[str, str]:
        """``{filename: xml}`` for every field, or for one category."""
        fields = self.fields if category is None else self.get_category_fields(category)
        return compile_fields(fields)

    def export(
        self,
        directory: str | os.PathLike[str],
        category: Optional[str] = None,
    ) -> list[Path]:
        """Write ``.field-meta.xml`` files for every field, or one category.

        Raises:
            FieldValidationError: There is nothing to export.
        """
        fields = self.fields if category is None else self.get_category_fields(category)
        if not fields:
            scope = f"{category} fields" if category else "fields"
            raise FieldValidationError(f"No {scope} to export")
        return write_fields(fields, directory, show_progress=self.config.enable_progress_bar)

    def validate_field(self, field: FieldSpec | str) -> list[str]:
        """Validation messages for a field or the field with this API name."""
        if isinstance(field, str):
            field = self.get_field(field)
        return validate_field(field)

    # -- helpers ----------------------------------------------------------

    def _index(self, api_name: str) -> Optional[int]:
        for index, field in enumerate(self._fields):
            if field.api_name == api_name:
                return index
        return None

    def _unused_api_name(self, stem: str) -> str:
        candidate = f"{stem}__c"
        counter = 2
        while self._index(candidate) is not None:
            candidate = f"{stem}_{counter}__c"
            counter += 1
        return candidate


def _check_strict(raw: dict[str, Any], position: int) -> None:
    try:
        FieldSpec.strict(raw)
    except (ValidationError, FieldValidationError) as exc:
        raise ImportValidationError(f"Field {position + 1} is invalid: {exc}") from exc
