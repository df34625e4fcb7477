"""Create content, role and workflow tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16

Content types and fields, entries with a JSON data column, relations, media,
roles/permissions/users and the workflow transition, history, comment and
assignment tables.
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*names: str) -> list:
    return [sa.Column(name, sa.DateTime(timezone=True), nullable=False) for name in names]


def upgrade() -> None:
    op.create_table(
        "content_types",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("enable_seo", sa.Boolean(), nullable=False),
        *_timestamps("created_at", "updated_at"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_content_types_slug", "content_types", ["slug"], unique=True)
    op.create_index("ix_content_types_deleted_at", "content_types", ["deleted_at"])

    op.create_table(
        "content_fields",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column(
            "content_type_id",
            sa.String(length=26),
            sa.ForeignKey("content_types.id"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False),
        sa.Column("unique", sa.Boolean(), nullable=False),
        sa.Column("is_seo", sa.Boolean(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        # Constraints
        sa.Column("min_length", sa.Integer(), nullable=True),
        sa.Column("max_length", sa.Integer(), nullable=True),
        sa.Column("pattern", sa.String(length=255), nullable=True),
        sa.Column("min_value", sa.Float(), nullable=True),
        sa.Column("max_value", sa.Float(), nullable=True),
        sa.Column("default_value", sa.String(length=500), nullable=True),
        sa.Column("placeholder", sa.String(length=255), nullable=True),
        sa.Column("help_text", sa.String(length=500), nullable=True),
        *_timestamps("created_at", "updated_at"),
        sa.UniqueConstraint("content_type_id", "name", name="uq_content_fields_type_name"),
    )
    op.create_index("ix_content_fields_content_type_id", "content_fields", ["content_type_id"])

    op.create_table(
        "content_entries",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column(
            "content_type_id",
            sa.String(length=26),
            sa.ForeignKey("content_types.id"),
            nullable=False,
        ),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("created_by", sa.String(length=26), nullable=True),
        sa.Column("updated_by", sa.String(length=26), nullable=True),
        *_timestamps("created_at", "updated_at"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_content_entries_content_type_id", "content_entries", ["content_type_id"])
    op.create_index("ix_content_entries_status", "content_entries", ["status"])
    op.create_index("ix_content_entries_created_by", "content_entries", ["created_by"])
    op.create_index("ix_content_entries_updated_by", "content_entries", ["updated_by"])
    op.create_index("ix_content_entries_deleted_at", "content_entries", ["deleted_at"])
    op.create_index(
        "ix_content_entries_type_status", "content_entries", ["content_type_id", "status"]
    )

    op.create_table(
        "content_relations",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column(
            "from_entry_id",
            sa.String(length=26),
            sa.ForeignKey("content_entries.id"),
            nullable=False,
        ),
        sa.Column(
            "to_entry_id",
            sa.String(length=26),
            sa.ForeignKey("content_entries.id"),
            nullable=False,
        ),
        sa.Column("relation_type", sa.String(length=50), nullable=False),
        *_timestamps("created_at"),
    )
    op.create_index("ix_content_relations_from_entry_id", "content_relations", ["from_entry_id"])
    op.create_index("ix_content_relations_to_entry_id", "content_relations", ["to_entry_id"])

    op.create_table(
        "media_files",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=500), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=True),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("folder", sa.String(length=255), nullable=True),
        sa.Column("alt", sa.String(length=255), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("uploaded_by", sa.String(length=26), nullable=True),
        *_timestamps("created_at"),
    )
    op.create_index("ix_media_files_mime_type", "media_files", ["mime_type"])
    op.create_index("ix_media_files_folder", "media_files", ["folder"])
    op.create_index("ix_media_files_uploaded_by", "media_files", ["uploaded_by"])

    op.create_table(
        "roles",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps("created_at", "updated_at"),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=True)

    op.create_table(
        "permissions",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column("role_id", sa.String(length=26), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("module", sa.String(length=50), nullable=False),
        sa.Column("action", sa.String(length=20), nullable=False),
        sa.Column("field_scope", sa.String(length=20), nullable=True),
        sa.Column("allowed_fields", sa.JSON(), nullable=False),
        sa.Column("denied_fields", sa.JSON(), nullable=False),
        sa.Column("content_type_ids", sa.JSON(), nullable=False),
    )
    op.create_index("ix_permissions_role_id", "permissions", ["role_id"])
    op.create_index("ix_permissions_module_action", "permissions", ["module", "action"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("role_id", sa.String(length=26), sa.ForeignKey("roles.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps("created_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role_id", "users", ["role_id"])

    op.create_table(
        "workflow_transitions",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column("from_status", sa.String(length=32), nullable=False),
        sa.Column("to_status", sa.String(length=32), nullable=False),
        sa.Column("required_role", sa.String(length=100), nullable=False),
        sa.UniqueConstraint(
            "from_status", "to_status", "required_role", name="uq_workflow_transition"
        ),
    )

    op.create_table(
        "workflow_history",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column(
            "entry_id", sa.String(length=26), sa.ForeignKey("content_entries.id"), nullable=False
        ),
        sa.Column("from_status", sa.String(length=32), nullable=False),
        sa.Column("to_status", sa.String(length=32), nullable=False),
        sa.Column("changed_by", sa.String(length=26), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        *_timestamps("created_at"),
    )
    op.create_index("ix_workflow_history_entry_id", "workflow_history", ["entry_id"])

    op.create_table(
        "workflow_comments",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column(
            "entry_id", sa.String(length=26), sa.ForeignKey("content_entries.id"), nullable=False
        ),
        sa.Column("user_id", sa.String(length=26), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        *_timestamps("created_at"),
    )
    op.create_index("ix_workflow_comments_entry_id", "workflow_comments", ["entry_id"])

    op.create_table(
        "workflow_assignments",
        sa.Column("id", sa.String(length=26), primary_key=True),
        sa.Column(
            "entry_id", sa.String(length=26), sa.ForeignKey("content_entries.id"), nullable=False
        ),
        sa.Column("assigned_to", sa.String(length=26), nullable=False),
        sa.Column("assigned_by", sa.String(length=26), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps("created_at"),
    )
    op.create_index("ix_workflow_assignments_entry_id", "workflow_assignments", ["entry_id"])
    op.create_index("ix_workflow_assignments_assigned_to", "workflow_assignments", ["assigned_to"])
    op.create_index("ix_workflow_assignments_status", "workflow_assignments", ["status"])


def downgrade() -> None:
    for table in (
        "workflow_assignments",
        "workflow_comments",
        "workflow_history",
        "workflow_transitions",
        "users",
        "permissions",
        "roles",
        "media_files",
        "content_relations",
        "content_entries",
        "content_fields",
        "content_types",
    ):
        op.drop_table(table)
