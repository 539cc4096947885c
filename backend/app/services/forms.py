"""Form lifecycle: create, read, partial update and the two delete paths."""

import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.field_response import FieldResponse
from app.models.form import Form
from app.models.form_collaborator import FormCollaborator
from app.models.form_field import FormField
from app.models.form_response import FormResponse
from app.schemas.auth import Identity
from app.services.exceptions import FormHasResponses
from app.services.form_fields import list_fields
from app.services.permissions import Role, load_form, require_email, require_role

logger = logging.getLogger(__name__)

UPDATABLE_FORM_KEYS = ("name", "description", "auth_required", "one_time", "default_required")


def create_form(db: Session, identity: Identity | None) -> Form:
    """Create an empty form owned by the caller."""
    email = require_email(identity)
    form = Form(
        created_by=email,
        name=settings.DEFAULT_FORM_NAME,
        description=settings.DEFAULT_FORM_DESCRIPTION,
    )
    db.add(form)
    db.commit()
    db.refresh(form)
    logger.info("Created form %s for %s", form.id, email)
    return form


def get_form(db: Session, form_id: uuid.UUID) -> Form:
    return load_form(db, form_id)


def get_form_context(db: Session, form_id: uuid.UUID) -> tuple[Form, list[FormField]]:
    """The form plus its fields in order, as needed to render it."""
    form = load_form(db, form_id)
    return form, list_fields(db, form_id)


def list_user_forms(db: Session, identity: Identity | None) -> list[Form]:
    email = require_email(identity)
    return list(
        db.execute(select(Form).where(Form.created_by == email).order_by(Form.created_at.desc()))
        .scalars()
        .all()
    )


def update_form(db: Session, form_id: uuid.UUID, identity: Identity | None, updates: dict) -> Form:
    """Patch only the keys present in ``updates``; an explicit ``None`` clears the column. Editor or above."""
    require_role(db, form_id, identity, Role.EDITOR)
    form = load_form(db, form_id)

    changes = {key: updates[key] for key in UPDATABLE_FORM_KEYS if key in updates}
    if changes:
        for key, value in changes.items():
            setattr(form, key, value)
        db.commit()
        db.refresh(form)
    return form


def _response_count(db: Session, form_id: uuid.UUID) -> int:
    return db.execute(
        select(func.count()).select_from(FormResponse).where(FormResponse.form_id == form_id)
    ).scalar_one()


def delete_form(db: Session, form_id: uuid.UUID, identity: Identity | None) -> None:
    """Delete a form without responses, together with its fields and collaborations. Owner only."""
    require_role(db, form_id, identity, Role.OWNER)

    if _response_count(db, form_id) > 0:
        raise FormHasResponses()

    db.execute(delete(FormField).where(FormField.form_id == form_id))
    db.execute(delete(FormCollaborator).where(FormCollaborator.form_id == form_id))
    db.delete(load_form(db, form_id))
    db.commit()
    logger.info("Deleted form %s", form_id)


def delete_form_with_all_data(db: Session, form_id: uuid.UUID, identity: Identity | None) -> None:
    """Delete a form and everything hanging off it. Owner only, no response guard."""
    require_role(db, form_id, identity, Role.OWNER)

    counts = {}
    for model in (FieldResponse, FormResponse, FormField, FormCollaborator):
        result = db.execute(delete(model).where(model.form_id == form_id))
        counts[model.__tablename__] = result.rowcount

    db.delete(load_form(db, form_id))
    db.commit()
    logger.info("Deleted form %s with all data %s", form_id, counts)
