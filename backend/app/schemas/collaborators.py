import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.forms import FormOut

CollaboratorRole = Literal["editor", "viewer"]
CollaboratorStatus = Literal["pending", "accepted", "rejected"]
EffectiveRole = Literal["owner", "editor", "viewer", "none"]


class InviteRequest(BaseModel):
    form_id: uuid.UUID
    user_email: str = Field(..., min_length=1, max_length=255)
    role: CollaboratorRole


class RoleUpdateRequest(BaseModel):
    new_role: CollaboratorRole


class CollaboratorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    form_id: uuid.UUID
    user_email: str
    role: CollaboratorRole
    status: CollaboratorStatus
    invited_by: str
    invited_at: datetime
    responded_at: datetime | None


class PendingInvitationResponse(BaseModel):
    id: uuid.UUID
    form_id: uuid.UUID
    form_name: str
    role: CollaboratorRole
    invited_by: str
    invited_at: datetime


class FormPermissionsResponse(BaseModel):
    can_view: bool
    can_edit: bool
    can_manage_collaborators: bool
    role: EffectiveRole


class AccessibleFormOut(FormOut):
    user_role: EffectiveRole
