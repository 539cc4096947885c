import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class FormCollaborator(Base):
    """Invitation of a non-owner to a form.

    Ownership is never stored here: the owner is always ``Form.created_by``.
    Status moves ``pending -> accepted`` or ``pending -> rejected`` once.
    """

    __tablename__ = "form_collaborators"
    __table_args__ = (
        Index("ix_form_collaborators_form_id", "form_id"),
        Index("ix_form_collaborators_user_email", "user_email"),
        Index("ix_form_collaborators_form_user", "form_id", "user_email"),
        Index("ix_form_collaborators_user_status", "user_email", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    form_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("forms.id"), nullable=False)
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        Enum("editor", "viewer", name="collaborator_role"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        Enum("pending", "accepted", "rejected", name="collaborator_status"),
        nullable=False,
        server_default="pending",
    )
    invited_by: Mapped[str] = mapped_column(String(255), nullable=False)
    invited_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    form: Mapped["Form"] = relationship(back_populates="collaborators")

    def __repr__(self) -> str:
        return f"<FormCollaborator {self.user_email} {self.role} ({self.status})>"
