"""CustomField XML compiler.

Serializes a :class:`~fieldforge.schemas.field_spec.FieldSpec` into the
``*.field-meta.xml`` document the Salesforce Metadata API deploys.

Element order follows the metadata schema (alphabetical, with ``fullName``
first and the picklist ``valueSet`` block before the trailing MultiselectPicklist
``visibleLines`` and ``writeRequiresMasterRead``). The compiler reads the
field through :meth:`FieldSpec.variant`, so attributes left over from a
previous type never reach the output.

The compiler does not re-validate its input: a Lookup that is both
``required`` and ``SetNull`` is emitted as given. The Field Manager is
responsible for keeping that combination out of the field list.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Iterable, Optional
from xml.sax.saxutils import escape

from tqdm.auto import tqdm

from ..core.exceptions import FieldValidationError
from ..schemas.field_spec import (
    LONG_TEXT_TYPES,
    PICKLIST_TYPES,
    RELATIONSHIP_TYPES,
    TEXT_AREA_TYPES,
    TEXT_TYPES,
    FieldSpec,
    PicklistValue,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
XML_NAMESPACE = "http://soap.sforce.com/2006/04/metadata"
INDENT = "    "
FILE_SUFFIX = ".field-meta.xml"

DEFAULT_PRECISION = 18
DEFAULT_SCALE = 2
DEFAULT_RELATIONSHIP_ORDER = 0
DEFAULT_TREAT_BLANKS_AS = "BlankAsZero"
DEFAULT_FORMULA_RETURN_TYPE = "Text"

_ESCAPES = {'"': "&quot;", "'": "&apos;"}

# Export file names are API names: ASCII letters, digits and underscores only
_API_NAME = re.compile(r"\w+", re.ASCII)


def compile_field(field: FieldSpec) -> str:
    """Compile *field* to its CustomField XML document.

    Deterministic: the same field always yields byte-identical output.
    Lines are joined with ``\\n`` and there is no trailing newline.
    """
    attrs = field.variant()
    field_type = field.type
    is_master_detail = field_type == "MasterDetail"

    lines: list[Optional[str]] = [
        XML_HEADER,
        f'<CustomField xmlns="{XML_NAMESPACE}">',
        _element("fullName", attrs["api_name"]),
    ]

    if field_type == "Checkbox":
        lines.append(_element("defaultValue", _flag(attrs["default_value"])))

    if field_type == "Lookup":
        lines.append(_element("deleteConstraint", attrs["delete_constraint"]))

    if attrs["external_id"] is not None:
        lines.append(_element("externalId", _flag(attrs["external_id"])))

    if field_type == "Formula":
        lines.append(_element("formula", attrs["formula"]))
        lines.append(
            _element("formulaTreatBlanksAs", attrs["treat_blanks_as"] or DEFAULT_TREAT_BLANKS_AS)
        )

    lines.append(_element("inlineHelpText", attrs["help_text"]))
    lines.append(_element("label", attrs["label"]))

    if field_type in TEXT_TYPES or field_type in LONG_TEXT_TYPES:
        lines.append(_element("length", attrs["length"] or None))

    if field_type in TEXT_AREA_TYPES:
        lines.append(_element("visibleLines", attrs["visible_lines"] or None))

    numeric = "precision" in attrs
    if numeric:
        lines.append(_element("precision", attrs["precision"] or DEFAULT_PRECISION))

    if field_type in RELATIONSHIP_TYPES:
        lines.append(_element("referenceTo", attrs["reference_to"]))
        lines.append(_element("relationshipLabel", attrs["relationship_label"]))
        lines.append(_element("relationshipName", attrs["relationship_name"]))

    if is_master_detail:
        order = attrs["relationship_order"]
        lines.append(
            _element("relationshipOrder", DEFAULT_RELATIONSHIP_ORDER if order is None else order)
        )
        lines.append(_element("reparentableMasterDetail", _flag(attrs["reparentable_master_detail"])))
    else:
        lines.append(_element("required", _flag(attrs["required"])))

    if numeric:
        scale = attrs["scale"]
        lines.append(_element("scale", DEFAULT_SCALE if scale is None else scale))

    lines.append(_element("trackHistory", _flag(attrs["track_history"])))

    if field_type == "Formula":
        lines.append(_element("type", attrs["return_type"] or DEFAULT_FORMULA_RETURN_TYPE))
    else:
        lines.append(_element("type", field_type))

    if attrs["unique"] is not None:
        lines.append(_element("unique", _flag(attrs["unique"])))

    if field_type in PICKLIST_TYPES:
        lines.extend(_value_set(attrs["restricted"], attrs["picklist_values"]))

    if field_type == "MultiselectPicklist":
        lines.append(_element("visibleLines", attrs["visible_lines"] or None))

    if is_master_detail:
        lines.append(_element("writeRequiresMasterRead", _flag(attrs["write_requires_master_read"])))

    lines.append("</CustomField>")
    return "\n".join(line for line in lines if line is not None)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def field_filename(field: FieldSpec) -> str:
    """Export filename for *field*: ``{apiName}.field-meta.xml``."""
    if not field.api_name:
        raise FieldValidationError("Cannot export a field without an API name", field=field.label or None)
    if not _API_NAME.fullmatch(field.api_name):
        raise FieldValidationError("API name is not a valid file name", field=field.api_name)
    return f"{field.api_name}{FILE_SUFFIX}"


def compile_fields(fields: Iterable[FieldSpec]) -> dict[str, str]:
    """Compile many fields, keyed by export filename in input order.

    A later field with the same API name replaces an earlier one.
    """
    documents: dict[str, str] = {}
    for field in fields:
        name = field_filename(field)
        if name in documents:
            logger.warning("Duplicate API name %s; the later field wins", field.api_name)
        documents[name] = compile_field(field)
    return documents


def write_fields(
    fields: Iterable[FieldSpec],
    directory: str | os.PathLike[str],
    show_progress: bool = False,
) -> list[Path]:
    """Write one ``.field-meta.xml`` file per field into *directory*.

    File content is exactly :func:`compile_field` output (LF line endings,
    no trailing newline).

    Returns:
        Paths written, in input order.
    """
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    fields = list(fields)
    documents = compile_fields(fields)

    written: list[Path] = []
    for filename, xml in tqdm(
        documents.items(),
        total=len(documents),
        desc="Exporting fields",
        disable=not show_progress,
    ):
        path = out_dir / filename
        with open(path, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(xml)
        written.append(path)

    logger.info("Wrote %d field documents to %s", len(written), out_dir)
    return written


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _value_set(restricted: Optional[bool], values: Optional[list[PicklistValue]]) -> list[Optional[str]]:
    lines: list[Optional[str]] = [
        f"{INDENT}<valueSet>",
        _element("restricted", _flag(restricted is not False), depth=2),
        f"{INDENT * 2}<valueSetDefinition>",
        f"{INDENT * 3}<sorted>false</sorted>",
    ]
    for value in values or []:
        lines.append(f"{INDENT * 3}<value>")
        lines.append(_element("fullName", value.full_name, depth=4))
        lines.append(_element("default", _flag(value.default), depth=4))
        lines.append(_element("label", value.label or value.full_name, depth=4))
        lines.append(f"{INDENT * 3}</value>")
    lines.append(f"{INDENT * 2}</valueSetDefinition>")
    lines.append(f"{INDENT}</valueSet>")
    return lines


def _element(name: str, value: Any, depth: int = 1) -> Optional[str]:
    """One ``<name>value</name>`` line, or ``None`` when *value* is empty."""
    if value is None or value == "":
        return None
    return f"{INDENT * depth}<{name}>{escape(str(value), _ESCAPES)}</{name}>"


def _flag(value: Optional[bool]) -> str:
    return "true" if value is True else "false"
