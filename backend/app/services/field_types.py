"""Closed set of field types and what each one can do.

Every consumer looks capabilities up in ``FIELD_TYPE_SPECS`` instead of
branching on type strings, so a new type is one enum member plus one spec.
"""

from dataclasses import dataclass
from enum import Enum


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    MCQ = "MCQ"
    CHECKBOX = "checkbox"
    FILE = "file"


@dataclass(frozen=True)
class FieldTypeSpec:
    label: str
    has_options: bool = False


FIELD_TYPE_SPECS: dict[FieldType, FieldTypeSpec] = {
    FieldType.TEXT: FieldTypeSpec("Short text"),
    FieldType.TEXTAREA: FieldTypeSpec("Paragraph"),
    FieldType.SELECT: FieldTypeSpec("Dropdown", has_options=True),
    FieldType.NUMBER: FieldTypeSpec("Number"),
    FieldType.DATE: FieldTypeSpec("Date"),
    FieldType.TIME: FieldTypeSpec("Time"),
    FieldType.MCQ: FieldTypeSpec("Multiple choice", has_options=True),
    FieldType.CHECKBOX: FieldTypeSpec("Checkboxes", has_options=True),
    FieldType.FILE: FieldTypeSpec("File upload"),
}

_missing = set(FieldType) - set(FIELD_TYPE_SPECS)
if _missing:
    raise RuntimeError(f"No FieldTypeSpec for: {', '.join(sorted(t.value for t in _missing))}")


def spec_for(field_type: FieldType | str) -> FieldTypeSpec:
    return FIELD_TYPE_SPECS[FieldType(field_type)]


def ordered_options(field_type: FieldType | str, select_options: list[dict] | None) -> list[dict] | None:
    """Return select options sorted by their ``order`` for choice types.

    Non-choice types hand back whatever was stored, untouched.
    """
    if not select_options or not spec_for(field_type).has_options:
        return select_options
    return sorted(select_options, key=lambda opt: opt.get("order", 0))


def render_response(value: str | list[str] | None) -> str:
    """Flatten a stored answer into display text (CSV cells, search)."""
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)
