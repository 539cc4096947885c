"""Collaboration lifecycle: invitations and the listings built on them.

State machine per collaboration::

    pending -> accepted
    pending -> rejected

Both targets are terminal. Revocation deletes the row instead of moving it,
and only accepted collaborations may have their role changed.
"""

import logging
import re
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.form import Form
from app.models.form_collaborator import FormCollaborator
from app.schemas.auth import Identity
from app.services.exceptions import (
    AlreadyCollaborator,
    AlreadyInvited,
    AlreadyResponded,
    CreatorAlreadyOwner,
    Forbidden,
    InvalidCollaborationState,
    InvalidEmail,
    NotFound,
    SelfInvite,
)
from app.services.permissions import Role, caller_email, load_form, require_email, require_role

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

INVITABLE_ROLES = {Role.EDITOR, Role.VIEWER}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _get_collaboration(db: Session, collaboration_id: uuid.UUID, label: str = "Collaborator") -> FormCollaborator:
    collaboration = db.get(FormCollaborator, collaboration_id)
    if collaboration is None:
        raise NotFound(f"{label} not found")
    return collaboration


def _invitation_summary(invitation: FormCollaborator, form: Form | None) -> dict:
    return {
        "id": invitation.id,
        "form_id": invitation.form_id,
        "form_name": (form.name if form is not None else None) or settings.DEFAULT_FORM_NAME,
        "role": invitation.role,
        "invited_by": invitation.invited_by,
        "invited_at": invitation.invited_at,
    }


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------


def invite(
    db: Session,
    form_id: uuid.UUID,
    invitee_email: str,
    role: Role | str,
    identity: Identity | None,
) -> FormCollaborator:
    """Invite ``invitee_email`` to a form as editor or viewer. Owner only.

    A previously rejected invitation is replaced by a fresh pending one.
    """
    inviter = require_role(db, form_id, identity, Role.OWNER).user_email
    role = Role(role)
    if role not in INVITABLE_ROLES:
        raise InvalidCollaborationState(f"Cannot invite with role '{role.value}'")

    # Account emails are stored lower-cased; invitations must match them.
    invitee_email = invitee_email.strip().lower()
    if not EMAIL_PATTERN.match(invitee_email):
        raise InvalidEmail(invitee_email)

    if invitee_email == inviter.lower():
        raise SelfInvite()

    form = load_form(db, form_id)
    if invitee_email == form.created_by.lower():
        raise CreatorAlreadyOwner()

    existing = db.execute(
        select(FormCollaborator).where(
            FormCollaborator.form_id == form_id,
            FormCollaborator.user_email == invitee_email,
        )
    ).scalar_one_or_none()

    if existing is not None:
        if existing.status == "pending":
            raise AlreadyInvited()
        if existing.status == "accepted":
            raise AlreadyCollaborator()
        db.delete(existing)
        db.flush()

    collaboration = FormCollaborator(
        form_id=form_id,
        user_email=invitee_email,
        role=role.value,
        status="pending",
        invited_by=inviter,
        invited_at=_now(),
    )
    db.add(collaboration)
    db.commit()
    db.refresh(collaboration)

    logger.info("Invited %s as %s on form %s (by %s)", invitee_email, role.value, form_id, inviter)
    return collaboration


def _respond(
    db: Session,
    collaboration_id: uuid.UUID,
    identity: Identity | None,
    new_status: str,
) -> FormCollaborator:
    email = require_email(identity)
    collaboration = _get_collaboration(db, collaboration_id, label="Invitation")

    if collaboration.user_email != email:
        verb = "accept" if new_status == "accepted" else "reject"
        raise Forbidden(f"You can only {verb} your own invitations")

    if collaboration.status != "pending":
        raise AlreadyResponded()

    collaboration.status = new_status
    collaboration.responded_at = _now()
    db.commit()
    db.refresh(collaboration)

    logger.info("Invitation %s %s by %s", collaboration_id, new_status, email)
    return collaboration


def accept(db: Session, collaboration_id: uuid.UUID, identity: Identity | None) -> FormCollaborator:
    return _respond(db, collaboration_id, identity, "accepted")


def reject(db: Session, collaboration_id: uuid.UUID, identity: Identity | None) -> FormCollaborator:
    return _respond(db, collaboration_id, identity, "rejected")


# ---------------------------------------------------------------------------
# Owner management
# ---------------------------------------------------------------------------


def remove(db: Session, collaboration_id: uuid.UUID, identity: Identity | None) -> None:
    """Revoke a collaboration in any status. Owner only."""
    collaboration = _get_collaboration(db, collaboration_id)
    require_role(db, collaboration.form_id, identity, Role.OWNER)

    db.delete(collaboration)
    db.commit()
    logger.info("Removed collaborator %s from form %s", collaboration.user_email, collaboration.form_id)


def update_role(
    db: Session,
    collaboration_id: uuid.UUID,
    new_role: Role | str,
    identity: Identity | None,
) -> FormCollaborator:
    collaboration = _get_collaboration(db, collaboration_id)
    require_role(db, collaboration.form_id, identity, Role.OWNER)

    new_role = Role(new_role)
    if new_role not in INVITABLE_ROLES:
        raise InvalidCollaborationState(f"Cannot assign role '{new_role.value}'")

    if collaboration.status != "accepted":
        raise InvalidCollaborationState("Can only update role for accepted collaborators")

    collaboration.role = new_role.value
    db.commit()
    db.refresh(collaboration)
    return collaboration


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


def list_for_form(db: Session, form_id: uuid.UUID, identity: Identity | None) -> list[FormCollaborator]:
    """All collaborations on a form, any status. Viewer or above."""
    require_role(db, form_id, identity, Role.VIEWER)
    return list(
        db.execute(
            select(FormCollaborator)
            .where(FormCollaborator.form_id == form_id)
            .order_by(FormCollaborator.invited_at.asc())
        )
        .scalars()
        .all()
    )


def list_pending_for_caller(
    db: Session,
    identity: Identity | None,
    form_id: uuid.UUID | None = None,
) -> list[dict]:
    """Pending invitations addressed to the caller, with form names attached."""
    email = caller_email(identity)
    if email is None:
        return []

    query = select(FormCollaborator).where(
        FormCollaborator.user_email == email,
        FormCollaborator.status == "pending",
    )
    if form_id is not None:
        query = query.where(FormCollaborator.form_id == form_id)

    invitations = db.execute(query.order_by(FormCollaborator.invited_at.desc())).scalars().all()
    return [_invitation_summary(inv, db.get(Form, inv.form_id)) for inv in invitations]


def get_pending_invitation_for_form(
    db: Session,
    form_id: uuid.UUID,
    identity: Identity | None,
) -> dict | None:
    email = caller_email(identity)
    if email is None:
        return None

    invitation = db.execute(
        select(FormCollaborator).where(
            FormCollaborator.form_id == form_id,
            FormCollaborator.user_email == email,
            FormCollaborator.status == "pending",
        )
    ).scalar_one_or_none()
    if invitation is None:
        return None
    return _invitation_summary(invitation, db.get(Form, form_id))


def accessible_forms(db: Session, identity: Identity | None) -> list[dict]:
    """Forms the caller owns or collaborates on, newest first.

    Each entry is ``{"form": Form, "user_role": Role}``.
    """
    email = caller_email(identity)
    if email is None:
        return []

    owned = db.execute(select(Form).where(Form.created_by == email)).scalars().all()
    collaborations = db.execute(
        select(FormCollaborator).where(
            FormCollaborator.user_email == email,
            FormCollaborator.status == "accepted",
        )
    ).scalars().all()

    entries = [{"form": form, "user_role": Role.OWNER} for form in owned]
    for collab in collaborations:
        form = db.get(Form, collab.form_id)
        if form is not None:
            entries.append({"form": form, "user_role": Role(collab.role)})

    entries.sort(key=lambda entry: entry["form"].created_at, reverse=True)
    return entries
