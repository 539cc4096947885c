import uuid
from datetime import datetime

from sqlalchemy import Boolean, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Form(Base):
    """A survey owned by the user whose email is stored in ``created_by``.

    The three flags are nullable on purpose: ``None`` and ``False`` behave the
    same, but ``update`` only ever writes the keys a caller supplied.
    """

    __tablename__ = "forms"
    __table_args__ = (Index("ix_forms_created_by", "created_by"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    auth_required: Mapped[bool | None] = mapped_column(Boolean)
    one_time: Mapped[bool | None] = mapped_column(Boolean)
    default_required: Mapped[bool | None] = mapped_column(Boolean)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    fields: Mapped[list["FormField"]] = relationship(back_populates="form", passive_deletes=True)
    collaborators: Mapped[list["FormCollaborator"]] = relationship(back_populates="form", passive_deletes=True)
    responses: Mapped[list["FormResponse"]] = relationship(back_populates="form", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Form {self.name} ({self.created_by})>"
