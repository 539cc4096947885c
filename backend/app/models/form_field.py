import uuid
from typing import Any

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.services.field_types import FieldType


class FormField(Base):
    """One typed question on a form.

    ``order`` is dense per form (1..N) once deletes have compacted it.
    ``select_options`` is a list of ``{"name": str, "order": float}`` dicts.
    """

    __tablename__ = "form_fields"
    __table_args__ = (Index("ix_form_fields_form_id", "form_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    form_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("forms.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[FieldType] = mapped_column(
        Enum(FieldType, name="field_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    order: Mapped[float] = mapped_column(Float, nullable=False)
    required: Mapped[bool | None] = mapped_column(Boolean)
    default: Mapped[Any | None] = mapped_column(JSONB)
    select_options: Mapped[list | None] = mapped_column(JSONB)

    form: Mapped["Form"] = relationship(back_populates="fields")

    def __repr__(self) -> str:
        return f"<FormField {self.name} ({self.type.value}) #{self.order}>"
