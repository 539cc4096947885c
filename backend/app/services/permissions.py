"""Permission evaluator. The one place that decides what a caller may do on a form.

A caller's role on a form is ``owner`` when their email is the form's
``created_by``; otherwise it is the role of their *accepted* collaboration.
Every role-guarded operation goes through :func:`require_role`.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.form import Form
from app.models.form_collaborator import FormCollaborator
from app.schemas.auth import Identity
from app.services.exceptions import Forbidden, InsufficientPermission, NotFound, Unauthenticated

logger = logging.getLogger(__name__)


class Role(str, Enum):
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"
    NONE = "none"


ROLE_LEVELS: dict[Role, int] = {
    Role.OWNER: 3,
    Role.EDITOR: 2,
    Role.VIEWER: 1,
    Role.NONE: 0,
}


@dataclass(frozen=True)
class RoleResolution:
    role: Role
    user_email: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def caller_email(identity: Identity | None) -> str | None:
    if identity is None:
        return None
    return identity.email or None


def require_email(identity: Identity | None) -> str:
    email = caller_email(identity)
    if email is None:
        raise Unauthenticated()
    return email


def load_form(db: Session, form_id: uuid.UUID) -> Form:
    form = db.get(Form, form_id)
    if form is None:
        raise NotFound("Form not found")
    return form


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------


def resolve_role(db: Session, form_id: uuid.UUID, identity: Identity | None) -> RoleResolution:
    """Compute the caller's effective role on a form.

    Raises Unauthenticated, NotFound, or Forbidden (no accepted collaboration).
    """
    email = require_email(identity)
    form = load_form(db, form_id)

    if form.created_by == email:
        return RoleResolution(role=Role.OWNER, user_email=email)

    collaboration = db.execute(
        select(FormCollaborator).where(
            FormCollaborator.form_id == form_id,
            FormCollaborator.user_email == email,
            FormCollaborator.status == "accepted",
        )
    ).scalar_one_or_none()

    if collaboration is None:
        raise Forbidden("You don't have permission to access this form")

    return RoleResolution(role=Role(collaboration.role), user_email=email)


def require_role(
    db: Session,
    form_id: uuid.UUID,
    identity: Identity | None,
    minimum: Role = Role.VIEWER,
) -> RoleResolution:
    """Resolve the caller's role and fail unless it is at least ``minimum``."""
    resolution = resolve_role(db, form_id, identity)
    if ROLE_LEVELS[resolution.role] < ROLE_LEVELS[minimum]:
        logger.info(
            "Denied %s on form %s: required %s, has %s",
            resolution.user_email,
            form_id,
            minimum.value,
            resolution.role.value,
        )
        raise InsufficientPermission(required=minimum.value, actual=resolution.role.value)
    return resolution


# ---------------------------------------------------------------------------
# Non-authoritative probes (never raise access errors)
# ---------------------------------------------------------------------------


def get_form_permissions(db: Session, form_id: uuid.UUID, identity: Identity | None) -> dict:
    """Capability summary for UI rendering.

    Access failures collapse into a neutral "no access" result.
    """
    try:
        resolution = resolve_role(db, form_id, identity)
    except (Unauthenticated, NotFound, Forbidden):
        return {
            "can_view": False,
            "can_edit": False,
            "can_manage_collaborators": False,
            "role": Role.NONE,
        }

    role = resolution.role
    return {
        "can_view": True,
        "can_edit": role in (Role.OWNER, Role.EDITOR),
        "can_manage_collaborators": role == Role.OWNER,
        "role": role,
    }


def check_form_ownership(db: Session, form_id: uuid.UUID, identity: Identity | None) -> bool:
    try:
        return resolve_role(db, form_id, identity).role == Role.OWNER
    except (Unauthenticated, NotFound, Forbidden):
        return False
