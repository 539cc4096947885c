import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.field_types import FieldType, ordered_options


class SelectOption(BaseModel):
    name: str = Field(..., min_length=1)
    order: float


class FormFieldCreate(BaseModel):
    form_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=255)
    type: FieldType
    order: float
    required: bool | None = Field(
        None,
        description="Falls back to the form's default_required when omitted",
    )
    select_options: list[SelectOption] | None = None
    default: Any = None


class FormFieldUpdate(BaseModel):
    form_id: uuid.UUID
    name: str | None = Field(None, min_length=1, max_length=255)
    type: FieldType | None = None
    order: float | None = None
    required: bool | None = None
    select_options: list[SelectOption] | None = None


class FormFieldResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    form_id: uuid.UUID
    name: str
    type: FieldType
    order: float
    required: bool | None
    default: Any = None
    select_options: list[SelectOption] | None = None

    @field_validator("select_options", mode="before")
    @classmethod
    def _sort_options(cls, value, info):
        field_type = info.data.get("type")
        if field_type is None:
            return value
        return ordered_options(field_type, value)


class FieldTypeInfo(BaseModel):
    type: FieldType
    label: str
    has_options: bool
