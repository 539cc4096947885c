"""Form API covering the lifecycle, submissions and response reporting."""

import uuid

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.v1.errors import to_http_exception
from app.core.auth import get_current_identity
from app.core.database import get_db
from app.schemas.auth import Identity
from app.schemas.forms import (
    DateFilter,
    DetailedFormResponseOut,
    FormContextResponse,
    FormOut,
    FormOwnershipResponse,
    FormResponseOut,
    FormSubmission,
    FormUpdate,
    RawFormSubmission,
    SubmissionResult,
)
from app.services import form_responses as responses_service
from app.services import forms as forms_service
from app.services.exceptions import FormError
from app.services.permissions import check_form_ownership

router = APIRouter()


# ---------------------------------------------------------------------------
# Form lifecycle
# ---------------------------------------------------------------------------


@router.post("/", response_model=FormOut, status_code=201)
def create_form(
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return forms_service.create_form(db, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.get("/mine", response_model=list[FormOut])
def list_my_forms(
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Forms created by the caller (collaborations not included)."""
    try:
        return forms_service.list_user_forms(db, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.get("/{form_id}", response_model=FormOut)
def get_form(form_id: uuid.UUID, db: Session = Depends(get_db)):
    try:
        return forms_service.get_form(db, form_id)
    except FormError as exc:
        raise to_http_exception(exc)


@router.get("/{form_id}/context", response_model=FormContextResponse)
def get_form_context(form_id: uuid.UUID, db: Session = Depends(get_db)):
    """Form and its ordered fields, i.e. everything a submission page needs."""
    try:
        form, fields = forms_service.get_form_context(db, form_id)
    except FormError as exc:
        raise to_http_exception(exc)
    return FormContextResponse(form=form, fields=fields)


@router.patch("/{form_id}", response_model=FormOut)
def update_form(
    form_id: uuid.UUID,
    payload: FormUpdate,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return forms_service.update_form(db, form_id, identity, payload.model_dump(exclude_unset=True))
    except FormError as exc:
        raise to_http_exception(exc)


@router.delete("/{form_id}", status_code=204)
def delete_form(
    form_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        forms_service.delete_form(db, form_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.delete("/{form_id}/all", status_code=204)
def delete_form_with_all_data(
    form_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        forms_service.delete_form_with_all_data(db, form_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.get("/{form_id}/ownership", response_model=FormOwnershipResponse)
def check_ownership(
    form_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return FormOwnershipResponse(is_owner=check_form_ownership(db, form_id, identity))


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


@router.post("/{form_id}/submit", response_model=SubmissionResult, status_code=201)
def submit_response(
    form_id: uuid.UUID,
    payload: FormSubmission,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    values = [value.model_dump() for value in payload.form_response_values]
    try:
        response_id = responses_service.submit_response(db, form_id, values, identity)
    except FormError as exc:
        raise to_http_exception(exc)
    return SubmissionResult(form_response_id=response_id)


@router.post("/{form_id}/responses", response_model=SubmissionResult, status_code=201)
def add_raw_response(
    form_id: uuid.UUID,
    payload: RawFormSubmission,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Store answers without checking them against the form's fields."""
    answers = [answer.model_dump() for answer in payload.responses]
    try:
        response_id = responses_service.add_response(db, form_id, answers, identity)
    except FormError as exc:
        raise to_http_exception(exc)
    return SubmissionResult(form_response_id=response_id)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


@router.get("/{form_id}/responses", response_model=list[FormResponseOut])
def list_form_responses(
    form_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return responses_service.get_form_responses(db, form_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.get("/{form_id}/responses/detailed", response_model=list[DetailedFormResponseOut])
def list_detailed_form_responses(
    form_id: uuid.UUID,
    search: str | None = Query(None),
    field: str | None = Query(None, description='Field id, "userEmail", or "all"'),
    field_value: str | None = Query(None),
    date: DateFilter | None = Query(None),
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return responses_service.get_detailed_form_responses(
            db,
            form_id,
            identity,
            search=search,
            field=field,
            field_value=field_value,
            date=date,
        )
    except FormError as exc:
        raise to_http_exception(exc)


@router.get("/{form_id}/responses/download")
def download_form_responses(
    form_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Export all form responses as CSV."""
    try:
        filename, content = responses_service.export_responses_csv(db, form_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)

    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
