"""Form field API with order compaction on delete."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.errors import to_http_exception
from app.core.auth import get_current_identity
from app.core.database import get_db
from app.schemas.auth import Identity
from app.schemas.form_fields import FieldTypeInfo, FormFieldCreate, FormFieldResponse, FormFieldUpdate
from app.services import form_fields as fields_service
from app.services.exceptions import FormError
from app.services.field_types import FIELD_TYPE_SPECS

router = APIRouter()


@router.get("/types", response_model=list[FieldTypeInfo])
def list_field_types():
    """The closed set of field types a builder can offer."""
    return [
        FieldTypeInfo(type=field_type, label=spec.label, has_options=spec.has_options)
        for field_type, spec in FIELD_TYPE_SPECS.items()
    ]


@router.get("/", response_model=list[FormFieldResponse])
def list_form_fields(form_id: uuid.UUID = Query(...), db: Session = Depends(get_db)):
    return fields_service.list_fields(db, form_id)


@router.post("/", response_model=FormFieldResponse, status_code=201)
def add_field(
    payload: FormFieldCreate,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return fields_service.add_field(
            db,
            payload.form_id,
            identity,
            name=payload.name,
            type=payload.type,
            order=payload.order,
            required=payload.required,
            select_options=payload.select_options,
            default=payload.default,
        )
    except FormError as exc:
        raise to_http_exception(exc)


@router.patch("/{field_id}", response_model=FormFieldResponse)
def update_field(
    field_id: uuid.UUID,
    payload: FormFieldUpdate,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    updates = payload.model_dump(exclude_unset=True, exclude={"form_id"})
    # None means "not provided" for every updatable key.
    updates = {key: value for key, value in updates.items() if value is not None}
    try:
        return fields_service.update_field(db, field_id, payload.form_id, identity, updates)
    except FormError as exc:
        raise to_http_exception(exc)


@router.delete("/{field_id}", status_code=204)
def delete_field(
    field_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        fields_service.delete_field(db, field_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)
