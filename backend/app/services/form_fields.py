"""Field schema registry: the ordered, typed field definitions of a form.

Field mutations are owner-only. They still go through ``require_role`` so
there is a single authorization gate; the OWNER minimum is a deliberate
override of the editor level that form updates accept.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.form import Form
from app.models.form_field import FormField
from app.schemas.auth import Identity
from app.services.exceptions import NotFound
from app.services.field_types import FieldType
from app.services.permissions import Role, load_form, require_email, require_role

logger = logging.getLogger(__name__)

FIELD_MUTATION_ROLE = Role.OWNER

UPDATABLE_FIELD_KEYS = ("name", "type", "order", "required", "select_options")


def _get_field(db: Session, field_id: uuid.UUID) -> FormField:
    field = db.get(FormField, field_id)
    if field is None:
        raise NotFound("Field not found")
    return field


def _dump_options(select_options: list | None) -> list[dict] | None:
    if select_options is None:
        return None
    return [opt if isinstance(opt, dict) else opt.model_dump() for opt in select_options]


def add_field(
    db: Session,
    form_id: uuid.UUID,
    identity: Identity | None,
    *,
    name: str,
    type: FieldType | str,
    order: float,
    required: bool | None = None,
    select_options: list | None = None,
    default: Any = None,
) -> FormField:
    """Insert a field. ``required`` falls back to the form's ``default_required``."""
    require_role(db, form_id, identity, FIELD_MUTATION_ROLE)
    form = load_form(db, form_id)

    if required is None:
        required = bool(form.default_required)

    field = FormField(
        form_id=form_id,
        name=name,
        type=FieldType(type),
        order=order,
        required=required,
        default=default,
        select_options=_dump_options(select_options),
    )
    db.add(field)
    db.commit()
    db.refresh(field)
    return field


def update_field(
    db: Session,
    field_id: uuid.UUID,
    form_id: uuid.UUID,
    identity: Identity | None,
    updates: dict,
) -> FormField:
    """Apply only the keys present in ``updates``; nothing is written when it is empty."""
    require_email(identity)
    field = _get_field(db, field_id)
    require_role(db, form_id, identity, FIELD_MUTATION_ROLE)
    if field.form_id != form_id:
        raise NotFound("Field not found")

    changes = {key: updates[key] for key in UPDATABLE_FIELD_KEYS if key in updates}
    if not changes:
        return field

    if "type" in changes:
        changes["type"] = FieldType(changes["type"])
    if "select_options" in changes:
        changes["select_options"] = _dump_options(changes["select_options"])

    for key, value in changes.items():
        setattr(field, key, value)

    db.commit()
    db.refresh(field)
    return field


def delete_field(db: Session, field_id: uuid.UUID, identity: Identity | None) -> None:
    """Delete a field and shift every later sibling down by one.

    The parent form row is locked for the delete + shift so concurrent deletes
    on the same form serialize instead of double-decrementing.
    """
    require_email(identity)
    field = _get_field(db, field_id)
    require_role(db, field.form_id, identity, FIELD_MUTATION_ROLE)

    db.execute(select(Form).where(Form.id == field.form_id).with_for_update()).scalar_one()
    # Re-read under the lock; a concurrent delete may have shifted this field.
    db.refresh(field)
    deleted_order = field.order
    form_id = field.form_id

    db.delete(field)
    db.flush()

    siblings = db.execute(
        select(FormField).where(
            FormField.form_id == form_id,
            FormField.order > deleted_order,
        )
    ).scalars().all()
    for sibling in siblings:
        sibling.order = sibling.order - 1

    db.commit()
    logger.info("Deleted field %s from form %s (shifted %d siblings)", field_id, form_id, len(siblings))


def list_fields(db: Session, form_id: uuid.UUID) -> list[FormField]:
    """All fields of a form in ascending order. Open read for public submission pages."""
    return list(
        db.execute(select(FormField).where(FormField.form_id == form_id).order_by(FormField.order.asc()))
        .scalars()
        .all()
    )
