"""Response submission, validation, and reporting.

``submit_response`` is the validated path: every check runs before the first
write, and the FormResponse plus its FieldResponses are committed together.
``add_response`` is a permissive alternate entry point that stores the
caller's field/value pairs without consulting the field schema.
"""

import csv
import io
import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.field_response import FieldResponse
from app.models.form_field import FormField
from app.models.form_response import FormResponse
from app.schemas.auth import Identity
from app.services.exceptions import (
    AuthenticationRequired,
    DuplicateSubmission,
    EmptyRequiredField,
    FieldNameMismatch,
    InvalidFieldReference,
    MissingRequiredField,
)
from app.services.field_types import render_response
from app.services.form_fields import list_fields
from app.services.permissions import Role, caller_email, load_form, require_role

logger = logging.getLogger(__name__)

DATE_FILTER_WINDOWS: dict[str, timedelta] = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}

USER_EMAIL_FILTER = "userEmail"


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


def _validate_submission(fields: list[FormField], values: list[dict]) -> None:
    field_map = {field.id: field for field in fields}
    provided_ids = {value["id"] for value in values}

    for field in fields:
        if field.required and field.id not in provided_ids:
            raise MissingRequiredField(field.name)

    for value in values:
        field = field_map.get(value["id"])
        if field is None:
            raise InvalidFieldReference(value["id"])

        raw = value.get("value")
        if field.required and (not raw or raw.strip() == ""):
            raise EmptyRequiredField(field.name)

        if field.name != value.get("name"):
            raise FieldNameMismatch(field.name)


def _persist(db: Session, form_id: uuid.UUID, user_email: str | None, answers: list[tuple]) -> FormResponse:
    """Write one FormResponse and its FieldResponses in a single commit."""
    try:
        form_response = FormResponse(form_id=form_id, user_email=user_email)
        db.add(form_response)
        db.flush()

        for field_id, response, answer_email in answers:
            db.add(
                FieldResponse(
                    form_id=form_id,
                    field_id=field_id,
                    form_response_id=form_response.id,
                    user_email=answer_email,
                    response=response,
                )
            )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store response for form %s", form_id)
        raise

    db.refresh(form_response)
    return form_response


def submit_response(
    db: Session,
    form_id: uuid.UUID,
    values: list[dict],
    identity: Identity | None,
) -> uuid.UUID:
    """Validate ``values`` (``[{"id", "name", "value"}]``) against the form's fields and store them.

    Duplicate prevention is skipped when ``one_time`` is set: the flag gates
    the check off, not on. Kept as-is; see DESIGN.md.
    """
    user_email = caller_email(identity)
    form = load_form(db, form_id)

    if form.auth_required and not user_email:
        raise AuthenticationRequired()

    if user_email and not form.one_time:
        existing = db.execute(
            select(FormResponse.id)
            .where(FormResponse.user_email == user_email, FormResponse.form_id == form_id)
            .limit(1)
        ).first()
        if existing is not None:
            logger.warning("Duplicate submission by %s on form %s", user_email, form_id)
            raise DuplicateSubmission()

    fields = list_fields(db, form_id)
    try:
        _validate_submission(fields, values)
    except (MissingRequiredField, EmptyRequiredField, InvalidFieldReference, FieldNameMismatch) as exc:
        logger.warning("Rejected submission on form %s: %s", form_id, exc)
        raise

    answers = [(value["id"], value["value"].strip(), user_email) for value in values]
    form_response = _persist(db, form_id, user_email, answers)

    logger.info("Stored response %s on form %s (%d answers)", form_response.id, form_id, len(answers))
    return form_response.id


def add_response(
    db: Session,
    form_id: uuid.UUID,
    responses: list[dict],
    identity: Identity | None,
) -> uuid.UUID:
    """Store ``[{"field_id", "response"}]`` verbatim. No schema validation.

    Field responses on this path carry no responder email, only the parent does.
    """
    form = load_form(db, form_id)
    answers = [(item["field_id"], item["response"], None) for item in responses]
    form_response = _persist(db, form.id, caller_email(identity), answers)
    return form_response.id


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def _field_responses_for(db: Session, form_response_id: uuid.UUID) -> list[FieldResponse]:
    return list(
        db.execute(
            select(FieldResponse).where(FieldResponse.form_response_id == form_response_id)
        )
        .scalars()
        .all()
    )


def _submissions(db: Session, form_id: uuid.UUID, user_email: str | None = None) -> list[FormResponse]:
    query = select(FormResponse).where(FormResponse.form_id == form_id)
    if user_email is not None:
        query = query.where(FormResponse.user_email == user_email)
    return list(db.execute(query.order_by(FormResponse.created_at.desc())).scalars().all())


def get_form_responses(db: Session, form_id: uuid.UUID, identity: Identity | None) -> list[dict]:
    """Every response on a form, newest first, each with its raw field responses."""
    require_role(db, form_id, identity, Role.VIEWER)

    return [
        {
            "id": submission.id,
            "user_email": submission.user_email,
            "created_at": submission.created_at,
            "field_responses": [
                {"id": fr.id, "field_id": fr.field_id, "response": fr.response}
                for fr in _field_responses_for(db, submission.id)
            ],
        }
        for submission in _submissions(db, form_id)
    ]


def _utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _matches_date(created_at: datetime, date: str | None, now: datetime) -> bool:
    if not date or date == "all":
        return True
    created_at = _utc_naive(created_at)
    if date == "today":
        return created_at.date() == now.date()
    window = DATE_FILTER_WINDOWS.get(date)
    if window is None:
        return True
    return created_at >= now - window


def get_detailed_form_responses(
    db: Session,
    form_id: uuid.UUID,
    identity: Identity | None,
    *,
    search: str | None = None,
    field: str | None = None,
    field_value: str | None = None,
    date: str | None = None,
) -> list[dict]:
    """Owner-only listing with field names/types attached and optional filters.

    ``field == "userEmail"`` narrows by responder email; any other ``field`` is
    a field id matched by case-insensitive substring against ``field_value``.
    ``date`` is one of all/today/week/month.
    """
    require_role(db, form_id, identity, Role.OWNER)

    field_map = {f.id: f for f in list_fields(db, form_id)}
    by_email = field == USER_EMAIL_FILTER and bool(field_value)
    submissions = _submissions(db, form_id, user_email=field_value if by_email else None)

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    submissions = [s for s in submissions if _matches_date(s.created_at, date, now)]

    results = []
    for submission in submissions:
        enriched = []
        for fr in _field_responses_for(db, submission.id):
            form_field = field_map.get(fr.field_id)
            enriched.append(
                {
                    "id": fr.id,
                    "field_id": fr.field_id,
                    "field_name": form_field.name if form_field else "Unknown Field",
                    "field_type": form_field.type.value if form_field else "text",
                    "response": fr.response,
                }
            )
        results.append(
            {
                "id": submission.id,
                "user_email": submission.user_email,
                "created_at": submission.created_at,
                "field_responses": enriched,
            }
        )

    if search and search.strip():
        needle = search.lower()
        results = [
            r
            for r in results
            if needle in (r["user_email"] or "").lower()
            or any(
                needle in render_response(fr["response"]).lower() or needle in fr["field_name"].lower()
                for fr in r["field_responses"]
            )
        ]

    if field and field not in ("all", USER_EMAIL_FILTER) and field_value:
        needle = field_value.lower()

        def _field_matches(fr: dict) -> bool:
            if str(fr["field_id"]) != field:
                return False
            values = fr["response"] if isinstance(fr["response"], list) else [fr["response"] or ""]
            return any(needle in str(v).lower() for v in values)

        results = [r for r in results if any(_field_matches(fr) for fr in r["field_responses"])]

    return results


def export_responses_csv(db: Session, form_id: uuid.UUID, identity: Identity | None) -> tuple[str, str]:
    """Render all responses as CSV. Returns ``(filename, csv_text)``."""
    require_role(db, form_id, identity, Role.VIEWER)
    form = load_form(db, form_id)
    fields = list_fields(db, form_id)

    output = io.StringIO()
    writer = csv.writer(output)

    # Header row: response_id, user_email, one column per field, submitted_at
    writer.writerow(["response_id", "user_email", *[f.name for f in fields], "submitted_at"])

    for submission in reversed(_submissions(db, form_id)):
        answers = {fr.field_id: fr.response for fr in _field_responses_for(db, submission.id)}
        row = [str(submission.id), submission.user_email or ""]
        row.extend(render_response(answers.get(f.id)) for f in fields)
        row.append(submission.created_at.isoformat() if submission.created_at else "")
        writer.writerow(row)

    name = (form.name or "form").replace(" ", "_")
    return f"form_{name}_{form_id}.csv", output.getvalue()
