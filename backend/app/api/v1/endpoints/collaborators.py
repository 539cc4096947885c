"""Collaborator API: invitations, role management and access listings."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.errors import to_http_exception
from app.core.auth import get_current_identity
from app.core.database import get_db
from app.schemas.auth import Identity
from app.schemas.collaborators import (
    AccessibleFormOut,
    CollaboratorResponse,
    FormPermissionsResponse,
    InviteRequest,
    PendingInvitationResponse,
    RoleUpdateRequest,
)
from app.schemas.forms import FormOut
from app.services import collaborators as collaborators_service
from app.services.exceptions import FormError
from app.services.permissions import get_form_permissions

router = APIRouter()


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------


@router.post("/", response_model=CollaboratorResponse, status_code=201)
def invite_collaborator(
    payload: InviteRequest,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return collaborators_service.invite(db, payload.form_id, payload.user_email, payload.role, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.post("/{collaboration_id}/accept", response_model=CollaboratorResponse)
def accept_invitation(
    collaboration_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return collaborators_service.accept(db, collaboration_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.post("/{collaboration_id}/reject", response_model=CollaboratorResponse)
def reject_invitation(
    collaboration_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return collaborators_service.reject(db, collaboration_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)


# ---------------------------------------------------------------------------
# Owner management
# ---------------------------------------------------------------------------


@router.delete("/{collaboration_id}", status_code=204)
def remove_collaborator(
    collaboration_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        collaborators_service.remove(db, collaboration_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.patch("/{collaboration_id}/role", response_model=CollaboratorResponse)
def update_collaborator_role(
    collaboration_id: uuid.UUID,
    payload: RoleUpdateRequest,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return collaborators_service.update_role(db, collaboration_id, payload.new_role, identity)
    except FormError as exc:
        raise to_http_exception(exc)


# ---------------------------------------------------------------------------
# Listings and probes
# ---------------------------------------------------------------------------


@router.get("/", response_model=list[CollaboratorResponse])
def list_collaborators(
    form_id: uuid.UUID = Query(...),
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    try:
        return collaborators_service.list_for_form(db, form_id, identity)
    except FormError as exc:
        raise to_http_exception(exc)


@router.get("/permissions", response_model=FormPermissionsResponse)
def form_permissions(
    form_id: uuid.UUID = Query(...),
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """What the caller may do on a form. Never fails; no access reads as role "none"."""
    permissions = get_form_permissions(db, form_id, identity)
    return FormPermissionsResponse(**{**permissions, "role": permissions["role"].value})


@router.get("/pending", response_model=list[PendingInvitationResponse])
def pending_invitations(
    form_id: uuid.UUID | None = Query(None),
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return collaborators_service.list_pending_for_caller(db, identity, form_id=form_id)


@router.get("/pending/{form_id}", response_model=PendingInvitationResponse | None)
def pending_invitation_for_form(
    form_id: uuid.UUID,
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return collaborators_service.get_pending_invitation_for_form(db, form_id, identity)


@router.get("/accessible-forms", response_model=list[AccessibleFormOut])
def accessible_forms(
    identity: Identity | None = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Owned and collaborated forms, newest first, tagged with the caller's role."""
    entries = collaborators_service.accessible_forms(db, identity)
    return [
        AccessibleFormOut(
            **FormOut.model_validate(entry["form"]).model_dump(),
            user_role=entry["user_role"].value,
        )
        for entry in entries
    ]
