"""FieldImport — the ``{objectName?, fields: [...]}`` exchange document."""

from __future__ import annotations

from typing import Any, Optional

from .base import CamelModel
from .field_spec import FieldSpec


class FieldImport(CamelModel):
    """A list of fields with an optional owning object.

    This is both the JSON import format and the shape the generation
    service is asked to return.
    """

    object_name: Optional[str] = None
    fields: list[FieldSpec]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.object_name is not None:
            data["objectName"] = self.object_name
        data["fields"] = [f.to_dict() for f in self.fields]
        return data
