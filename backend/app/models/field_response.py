import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class FieldResponse(Base):
    """One answer inside a FormResponse.

    ``response`` holds a string, or a list of strings for multi-valued fields.
    """

    __tablename__ = "field_responses"
    __table_args__ = (
        Index("ix_field_responses_form_id", "form_id"),
        Index("ix_field_responses_field_id", "field_id"),
        Index("ix_field_responses_form_response_id", "form_response_id"),
        Index("ix_field_responses_form_field", "form_id", "field_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    form_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("forms.id"), nullable=False
    )
    # No FK: answers outlive a deleted field and are reported as "Unknown Field".
    field_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    form_response_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("form_responses.id"), nullable=False
    )
    user_email: Mapped[str | None] = mapped_column(String(255))
    response: Mapped[str | list] = mapped_column(JSONB, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    form_response: Mapped["FormResponse"] = relationship(back_populates="field_responses")

    def __repr__(self) -> str:
        return f"<FieldResponse field={self.field_id} response={self.form_response_id}>"
