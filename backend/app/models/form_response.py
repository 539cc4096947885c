import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class FormResponse(Base):
    """One submission event. ``user_email`` is empty for anonymous submissions."""

    __tablename__ = "form_responses"
    __table_args__ = (
        Index("ix_form_responses_form_id", "form_id"),
        Index("ix_form_responses_user_form", "user_email", "form_id"),
        Index("ix_form_responses_form_user", "form_id", "user_email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    form_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("forms.id"), nullable=False
    )
    user_email: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    form: Mapped["Form"] = relationship(back_populates="responses")
    field_responses: Mapped[list["FieldResponse"]] = relationship(back_populates="form_response", passive_deletes=True)

    def __repr__(self) -> str:
        who = self.user_email or "anonymous"
        return f"<FormResponse form={self.form_id} ({who})>"
