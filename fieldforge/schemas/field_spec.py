"""FieldSpec — Pydantic model for one Salesforce custom field.

A field is a record tagged by ``type``. The tag decides which of the
type-conditional attributes are meaningful (``TYPE_ATTRIBUTES``). The
record itself is flat so that values survive a type switch in the editor
(switching Text → Picklist → Text keeps the length), but everything that
reads a field for output goes through :meth:`FieldSpec.variant`, which only
exposes the attributes of the active type.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union, get_args

from pydantic import ValidationInfo, field_validator

from ..core.exceptions import FieldValidationError
from .base import CamelModel

FIELD_TYPES = Literal[
    "Text",
    "TextArea",
    "LongTextArea",
    "RichTextArea",
    "Number",
    "Currency",
    "Percent",
    "Checkbox",
    "Date",
    "DateTime",
    "Email",
    "Phone",
    "Url",
    "Picklist",
    "MultiselectPicklist",
    "Lookup",
    "MasterDetail",
    "Formula",
]
DELETE_CONSTRAINTS = Literal["SetNull", "Restrict", "Cascade"]
TREAT_BLANKS_AS = Literal["BlankAsZero", "BlankAsBlank"]
FORMULA_RETURN_TYPES = Literal[
    "Text", "Number", "Currency", "Percent", "Checkbox", "Date", "DateTime"
]

ALL_FIELD_TYPES: tuple[str, ...] = get_args(FIELD_TYPES)

TEXT_TYPES = ("Text", "Email", "Phone", "Url", "TextArea")
LONG_TEXT_TYPES = ("LongTextArea", "RichTextArea")
TEXT_AREA_TYPES = ("TextArea", "LongTextArea", "RichTextArea")
NUMERIC_TYPES = ("Number", "Currency", "Percent")
RELATIONSHIP_TYPES = ("Lookup", "MasterDetail")
PICKLIST_TYPES = ("Picklist", "MultiselectPicklist")

MAX_TEXT_LENGTH = 255
MAX_LONG_TEXT_LENGTH = 131072
MAX_PRECISION = 18
MAX_SCALE = 17

UNIVERSAL_ATTRIBUTES = frozenset({
    "api_name",
    "label",
    "type",
    "required",
    "track_history",
    "external_id",
    "unique",
    "help_text",
    "description",
})

_RELATIONSHIP = ("reference_to", "relationship_name", "relationship_label")

TYPE_ATTRIBUTES: dict[str, frozenset[str]] = {
    "Text": frozenset({"length"}),
    "Email": frozenset({"length"}),
    "Phone": frozenset({"length"}),
    "Url": frozenset({"length"}),
    "TextArea": frozenset({"length", "visible_lines"}),
    "LongTextArea": frozenset({"length", "visible_lines"}),
    "RichTextArea": frozenset({"length", "visible_lines"}),
    "Number": frozenset({"precision", "scale"}),
    "Currency": frozenset({"precision", "scale"}),
    "Percent": frozenset({"precision", "scale"}),
    "Checkbox": frozenset({"default_value"}),
    "Date": frozenset(),
    "DateTime": frozenset(),
    "Picklist": frozenset({"picklist_values", "restricted"}),
    "MultiselectPicklist": frozenset({"picklist_values", "restricted", "visible_lines"}),
    "Lookup": frozenset({*_RELATIONSHIP, "delete_constraint"}),
    "MasterDetail": frozenset({
        *_RELATIONSHIP,
        "relationship_order",
        "reparentable_master_detail",
        "write_requires_master_read",
    }),
    # precision/scale only count when the formula returns a number
    "Formula": frozenset({"formula", "return_type", "treat_blanks_as", "precision", "scale"}),
}

CONDITIONAL_ATTRIBUTES = frozenset().union(*TYPE_ATTRIBUTES.values())


class PicklistValue(CamelModel):
    """One entry of a picklist value set."""

    full_name: str
    label: Optional[str] = None
    default: bool = False


class FieldSpec(CamelModel):
    """Canonical in-memory description of one custom field.

    Universal flags ``required`` and ``track_history`` are always defined.
    ``external_id`` and ``unique`` default to ``False`` but may be set to
    ``None`` to mean "not defined", which removes their tags from the
    compiled XML.

    Construct from JSON with ``FieldSpec.model_validate(data)`` (camelCase
    or snake_case keys). Use :meth:`strict` to reject attributes the type
    does not allow.
    """

    api_name: str = ""
    label: str = ""
    type: FIELD_TYPES = "Text"

    required: bool = False
    track_history: bool = False
    external_id: Optional[bool] = False
    unique: Optional[bool] = False

    help_text: Optional[str] = None
    description: Optional[str] = None

    # Text family
    length: Optional[int] = None
    visible_lines: Optional[int] = None

    # Numeric family and numeric formulas
    precision: Optional[int] = None
    scale: Optional[int] = None

    # Checkbox flag; other types may carry a formula or literal default that
    # is held but never compiled
    default_value: Optional[Union[bool, int, float, str]] = None

    # Lookup / MasterDetail
    reference_to: Optional[str] = None
    relationship_name: Optional[str] = None
    relationship_label: Optional[str] = None
    delete_constraint: Optional[DELETE_CONSTRAINTS] = None
    relationship_order: Optional[int] = None
    reparentable_master_detail: Optional[bool] = None
    write_requires_master_read: Optional[bool] = None

    # Formula
    formula: Optional[str] = None
    return_type: Optional[FORMULA_RETURN_TYPES] = None
    treat_blanks_as: Optional[TREAT_BLANKS_AS] = None

    # Picklist / MultiselectPicklist
    picklist_values: Optional[list[PicklistValue]] = None
    restricted: Optional[bool] = None

    @field_validator("required", "track_history", mode="before")
    @classmethod
    def _null_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("default_value", mode="before")
    @classmethod
    def _checkbox_default_is_flag(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or info.data.get("type") != "Checkbox":
            return value
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    @field_validator("delete_constraint", "return_type", "treat_blanks_as", mode="before")
    @classmethod
    def _blank_choice_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    # -- variant view ----------------------------------------------------

    def applicable_attributes(self) -> frozenset[str]:
        """Type-conditional attributes that are meaningful for ``self.type``."""
        allowed = TYPE_ATTRIBUTES[self.type]
        if self.type == "Formula" and self.return_type not in NUMERIC_TYPES:
            allowed = allowed - {"precision", "scale"}
        return allowed

    def stale_attributes(self) -> frozenset[str]:
        """Type-conditional attributes that are set but not meaningful."""
        return frozenset(
            name
            for name in CONDITIONAL_ATTRIBUTES - self.applicable_attributes()
            if getattr(self, name) is not None
        )

    def variant(self) -> dict[str, Any]:
        """Universal attributes plus those of the active type, by Python name."""
        names = UNIVERSAL_ATTRIBUTES | self.applicable_attributes()
        return {name: getattr(self, name) for name in names}

    def pruned(self) -> FieldSpec:
        """Copy of this field with stale attributes cleared."""
        stale = self.stale_attributes()
        if not stale:
            return self
        return self.model_copy(update={name: None for name in stale})

    @property
    def is_numeric_formula(self) -> bool:
        return self.type == "Formula" and self.return_type in NUMERIC_TYPES

    # -- construction / export -------------------------------------------

    @classmethod
    def strict(cls, data: dict[str, Any]) -> FieldSpec:
        """Validate *data* and reject attributes the declared type forbids.

        Raises:
            FieldValidationError: If any type-conditional attribute is set
                that ``type`` does not govern.
        """
        spec = cls.model_validate(data)
        stale = spec.stale_attributes()
        if stale:
            names = ", ".join(sorted(stale))
            raise FieldValidationError(
                f"Attributes not valid for type {spec.type}: {names}",
                field=spec.api_name or None,
            )
        return spec

    def to_dict(self) -> dict[str, Any]:
        """camelCase JSON-ready dict without unset optional attributes."""
        return self.model_dump(by_alias=True, exclude_none=True)
