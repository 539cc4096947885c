"""create users and form tables

Revision ID: 3f1c9a7d2b60
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b60"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

FIELD_TYPES = ("text", "textarea", "select", "number", "date", "time", "MCQ", "checkbox", "file")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("username", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column(
            "is_active",
            sa.Boolean(),
            server_default="true",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "forms",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("auth_required", sa.Boolean(), nullable=True),
        sa.Column("one_time", sa.Boolean(), nullable=True),
        sa.Column("default_required", sa.Boolean(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_forms_created_by", "forms", ["created_by"], unique=False)

    op.create_table(
        "form_collaborators",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("form_id", sa.UUID(), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("editor", "viewer", name="collaborator_role"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("pending", "accepted", "rejected", name="collaborator_status"),
            server_default="pending",
            nullable=False,
        ),
        sa.Column("invited_by", sa.String(length=255), nullable=False),
        sa.Column("invited_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_form_collaborators_form_id", "form_collaborators", ["form_id"], unique=False)
    op.create_index("ix_form_collaborators_user_email", "form_collaborators", ["user_email"], unique=False)
    op.create_index(
        "ix_form_collaborators_form_user", "form_collaborators", ["form_id", "user_email"], unique=False
    )
    op.create_index(
        "ix_form_collaborators_user_status", "form_collaborators", ["user_email", "status"], unique=False
    )

    op.create_table(
        "form_fields",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("form_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.Enum(*FIELD_TYPES, name="field_type"), nullable=False),
        sa.Column("order", sa.Float(), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=True),
        sa.Column("default", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("select_options", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_form_fields_form_id", "form_fields", ["form_id"], unique=False)

    op.create_table(
        "form_responses",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("form_id", sa.UUID(), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_form_responses_form_id", "form_responses", ["form_id"], unique=False)
    op.create_index("ix_form_responses_user_form", "form_responses", ["user_email", "form_id"], unique=False)
    op.create_index("ix_form_responses_form_user", "form_responses", ["form_id", "user_email"], unique=False)

    op.create_table(
        "field_responses",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("form_id", sa.UUID(), nullable=False),
        sa.Column("field_id", sa.UUID(), nullable=False),
        sa.Column("form_response_id", sa.UUID(), nullable=False),
        sa.Column("user_email", sa.String(length=255), nullable=True),
        sa.Column("response", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["form_id"], ["forms.id"]),
        sa.ForeignKeyConstraint(["form_response_id"], ["form_responses.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_field_responses_form_id", "field_responses", ["form_id"], unique=False)
    op.create_index("ix_field_responses_field_id", "field_responses", ["field_id"], unique=False)
    op.create_index(
        "ix_field_responses_form_response_id", "field_responses", ["form_response_id"], unique=False
    )
    op.create_index("ix_field_responses_form_field", "field_responses", ["form_id", "field_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_field_responses_form_field", table_name="field_responses")
    op.drop_index("ix_field_responses_form_response_id", table_name="field_responses")
    op.drop_index("ix_field_responses_field_id", table_name="field_responses")
    op.drop_index("ix_field_responses_form_id", table_name="field_responses")
    op.drop_table("field_responses")
    op.drop_index("ix_form_responses_form_user", table_name="form_responses")
    op.drop_index("ix_form_responses_user_form", table_name="form_responses")
    op.drop_index("ix_form_responses_form_id", table_name="form_responses")
    op.drop_table("form_responses")
    op.drop_index("ix_form_fields_form_id", table_name="form_fields")
    op.drop_table("form_fields")
    op.drop_index("ix_form_collaborators_user_status", table_name="form_collaborators")
    op.drop_index("ix_form_collaborators_form_user", table_name="form_collaborators")
    op.drop_index("ix_form_collaborators_user_email", table_name="form_collaborators")
    op.drop_index("ix_form_collaborators_form_id", table_name="form_collaborators")
    op.drop_table("form_collaborators")
    op.drop_index("ix_forms_created_by", table_name="forms")
    op.drop_table("forms")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")

    sa.Enum(name="field_type").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="collaborator_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="collaborator_role").drop(op.get_bind(), checkfirst=True)
