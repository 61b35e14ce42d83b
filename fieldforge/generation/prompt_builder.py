"""Prompt builder for field generation.

Layout:
  - Markdown headers (``#``) for instruction sections
  - XML tags for the data boundary (``<field_specifications>``)
  - Static instructions at top, the reduced document at the bottom
  - Sandwich pattern: the output contract is repeated after the document

The builder is pure: the same text and object name always produce the same
prompt.
"""

from __future__ import annotations

from ..schemas.field_spec import MAX_LONG_TEXT_LENGTH, MAX_TEXT_LENGTH

DEFAULT_OBJECT_NAME = "Custom_Object__c"


def build_prompt(
    field_spec_text: str,
    default_object_name: str = DEFAULT_OBJECT_NAME,
) -> str:
    """Build the full generation prompt for a reduced document.

    Args:
        field_spec_text: Reduced document text; embedded verbatim.
        default_object_name: Object name the model should use when the
            document does not name one.

    Returns:
        Complete prompt string.
    """
    parts = [
        _build_critical_instructions(),
        _build_role(),
        _build_structure(default_object_name),
        _build_type_reference(),
        _build_conversion_rules(default_object_name),
        _build_data_section(field_spec_text),
        _build_reminder(),
    ]
    return "\n\n".join(parts)


# ---------------------------------------------------------------------------
# Instruction portion (static)
# ---------------------------------------------------------------------------

def _build_critical_instructions() -> str:
    return (
        "# Critical Instructions\n"
        "1. Your response MUST start with { and end with }\n"
        "2. Return ONLY valid JSON - no text before or after\n"
        "3. Do NOT use markdown code blocks or backticks"
    )


def _build_role() -> str:
    return (
        "# Role\n"
        "You are converting Salesforce field specifications to JSON format. "
        "The specifications below were extracted from a longer design "
        "document and may mix prose, bullet lists and tables."
    )


def _build_structure(default_object_name: str) -> str:
    return (
        "# Required JSON Structure\n"
        "{\n"
        f'  "objectName": "{default_object_name}",\n'
        '  "fields": [\n'
        "    {\n"
        '      "apiName": "Field_Name__c",\n'
        '      "label": "Field Label",\n'
        '      "type": "Text",\n'
        f'      "length": {MAX_TEXT_LENGTH},\n'
        '      "required": false,\n'
        '      "trackHistory": false,\n'
        '      "externalId": false,\n'
        '      "unique": false,\n'
        '      "helpText": "Shown to users next to the field",\n'
        '      "description": "Administrator-facing notes"\n'
        "    }\n"
        "  ]\n"
        "}"
    )


def _build_type_reference() -> str:
    lines = ["# Field Type Reference"]
    lines.append(
        '- Text/Email/Phone/Url: type="Text"/"Email"/"Phone"/"Url", '
        f'include "length" (max {MAX_TEXT_LENGTH})'
    )
    lines.append(
        f'- TextArea: type="TextArea", "length" (max {MAX_TEXT_LENGTH}), "visibleLines"'
    )
    lines.append(
        f'- LongTextArea: type="LongTextArea", "length" (max {MAX_LONG_TEXT_LENGTH}), '
        '"visibleLines"'
    )
    lines.append(
        f'- RichTextArea: type="RichTextArea", "length" (max {MAX_LONG_TEXT_LENGTH}), '
        '"visibleLines"'
    )
    lines.append(
        '- Number/Currency/Percent: type="Number"/"Currency"/"Percent", '
        '"precision", "scale"'
    )
    lines.append('- Checkbox: type="Checkbox", "defaultValue" (true/false)')
    lines.append('- Date: type="Date"')
    lines.append('- DateTime: type="DateTime"')
    lines.append(
        '- Picklist: type="Picklist", "picklistValues": '
        '[{"fullName":"Value1", "label":"Value 1", "default":false}], '
        '"restricted":true'
    )
    lines.append(
        '- MultiselectPicklist: type="MultiselectPicklist", same as Picklist '
        '+ "visibleLines"'
    )
    lines.append(
        '- Lookup: type="Lookup", "referenceTo", "relationshipName", '
        '"relationshipLabel", "deleteConstraint" (SetNull/Restrict/Cascade)'
    )
    lines.append(
        '- MasterDetail: type="MasterDetail", same as Lookup + '
        '"relationshipOrder", "reparentableMasterDetail", "writeRequiresMasterRead"'
    )
    lines.append(
        '- Formula: type="Formula", "formula", "returnType", "treatBlanksAs", '
        'and if numeric: "precision", "scale"'
    )
    return "\n".join(lines)


def _build_conversion_rules(default_object_name: str) -> str:
    lines = ["# Conversion Rules"]
    lines.append(
        "1. Extract ALL fields from the specification. Do not stop early and "
        "do not summarize; every numbered field heading must become one entry "
        'in "fields".'
    )
    lines.append("2. Use boolean values without quotes: true or false")
    lines.append("3. Use sensible defaults for missing information")
    lines.append('4. Infer field types from context (e.g., "email" -> type:"Email")')
    lines.append(
        "5. For Lookup fields, if deleteConstraint is SetNull and required is "
        "true, use Restrict instead"
    )
    lines.append(f'6. If objectName not specified, use "{default_object_name}"')
    lines.append(
        '7. "helpText" is the end-user hint and "description" is the '
        "administrator note. Fill them from the document separately and "
        "omit either when the document gives nothing for it."
    )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Data section (variable)
# ---------------------------------------------------------------------------

def _build_data_section(field_spec_text: str) -> str:
    return f"<field_specifications>\n{field_spec_text}\n</field_specifications>"


# ---------------------------------------------------------------------------
# Reminder (sandwich pattern)
# ---------------------------------------------------------------------------

def _build_reminder() -> str:
    return (
        "# Reminder\n"
        "Return ONLY the JSON object, starting with { and ending with }. "
        "No additional text."
    )
