import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.form_fields import FormFieldResponse

DateFilter = Literal["all", "today", "week", "month"]


# ---------------------------------------------------------------------------
# Form schemas
# ---------------------------------------------------------------------------


class FormUpdate(BaseModel):
    """Partial update. Keys left out of the body are never written; an explicit null clears the value."""

    name: str | None = Field(None, max_length=255)
    description: str | None = None
    auth_required: bool | None = None
    one_time: bool | None = None
    default_required: bool | None = None


class FormOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_by: str
    name: str | None
    description: str | None
    auth_required: bool | None
    one_time: bool | None
    default_required: bool | None
    created_at: datetime
    updated_at: datetime


class FormContextResponse(BaseModel):
    form: FormOut
    fields: list[FormFieldResponse]


class FormOwnershipResponse(BaseModel):
    is_owner: bool


# ---------------------------------------------------------------------------
# Submission schemas
# ---------------------------------------------------------------------------


class FieldValue(BaseModel):
    """One answer as sent by a client rendering the form."""

    id: uuid.UUID
    name: str
    value: str


class FormSubmission(BaseModel):
    form_response_values: list[FieldValue]


class RawFieldAnswer(BaseModel):
    field_id: uuid.UUID
    response: str


class RawFormSubmission(BaseModel):
    """Unvalidated submission: answers are stored as sent."""

    responses: list[RawFieldAnswer]


class SubmissionResult(BaseModel):
    form_response_id: uuid.UUID


# ---------------------------------------------------------------------------
# Response listing schemas
# ---------------------------------------------------------------------------


class FieldResponseOut(BaseModel):
    id: uuid.UUID
    field_id: uuid.UUID
    response: str | list[str]


class DetailedFieldResponseOut(FieldResponseOut):
    field_name: str
    field_type: str


class FormResponseOut(BaseModel):
    id: uuid.UUID
    user_email: str | None
    created_at: datetime
    field_responses: list[FieldResponseOut]


class DetailedFormResponseOut(BaseModel):
    id: uuid.UUID
    user_email: str | None
    created_at: datetime
    field_responses: list[DetailedFieldResponseOut]
