"""
SQLAlchemy models for the Headless CMS.
"""

from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..policy.models import PermissionGrant, RolePolicy
from ..schema.registry import ContentSchema, FieldDefinition
from .base import Base, generate_ulid, utc_now


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


class ContentTypeModel(Base):
    """A runtime-defined content type."""

    __tablename__ = "content_types"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    enable_seo = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    fields = relationship(
        "ContentFieldModel",
        back_populates="content_type",
        cascade="all, delete-orphan",
        order_by="ContentFieldModel.position",
    )

    def to_schema(self) -> ContentSchema:
        """Snapshot this type and its fields for validation and filtering."""
        return ContentSchema(
            id=self.id,
            name=self.name,
            slug=self.slug,
            enable_seo=bool(self.enable_seo),
            fields=tuple(f.to_definition() for f in self.fields),
        )

    def to_dict(self, include_fields: bool = True) -> Dict[str, Any]:
        """Convert model to dictionary."""
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "enable_seo": self.enable_seo,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_fields:
            payload["fields"] = [f.to_dict() for f in self.fields if not f.is_seo]
            payload["seo_fields"] = [f.to_dict() for f in self.fields if f.is_seo]
        return payload


class ContentFieldModel(Base):
    """A field definition belonging to a content type."""

    __tablename__ = "content_fields"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    content_type_id = Column(
        String(26), ForeignKey("content_types.id"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)
    required = Column(Boolean, nullable=False, default=False)
    is_unique = Column("unique", Boolean, nullable=False, default=False)
    is_seo = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)

    # Constraints (only meaningful for the matching declared type)
    min_length = Column(Integer, nullable=True)
    max_length = Column(Integer, nullable=True)
    pattern = Column(String(255), nullable=True)
    min_value = Column(Float, nullable=True)
    max_value = Column(Float, nullable=True)
    default_value = Column(String(500), nullable=True)
    placeholder = Column(String(255), nullable=True)
    help_text = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    content_type = relationship("ContentTypeModel", back_populates="fields")

    __table_args__ = (
        UniqueConstraint("content_type_id", "name", name="uq_content_fields_type_name"),
    )

    def to_definition(self) -> FieldDefinition:
        return FieldDefinition(
            name=self.name,
            type=self.type,
            required=bool(self.required),
            unique=bool(self.is_unique),
            is_seo=bool(self.is_seo),
            min_length=self.min_length,
            max_length=self.max_length,
            pattern=self.pattern,
            min_value=self.min_value,
            max_value=self.max_value,
            default_value=self.default_value,
            placeholder=self.placeholder,
            help_text=self.help_text,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "content_type_id": self.content_type_id,
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "unique": self.is_unique,
            "is_seo": self.is_seo,
            "min_length": self.min_length,
            "max_length": self.max_length,
            "pattern": self.pattern,
            "min_value": self.min_value,
            "max_value": self.max_value,
            "default_value": self.default_value,
            "placeholder": self.placeholder,
            "help_text": self.help_text,
        }


class ContentEntryModel(Base):
    """An entry of a content type; ``data`` holds the dynamic field values."""

    __tablename__ = "content_entries"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    content_type_id = Column(
        String(26), ForeignKey("content_types.id"), nullable=False, index=True
    )
    data = Column(JSON, nullable=False, default=dict)
    status = Column(String(32), nullable=False, default="draft", index=True)

    created_by = Column(String(26), nullable=True, index=True)
    updated_by = Column(String(26), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
    published_at = Column(DateTime(timezone=True), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    __table_args__ = (
        Index("ix_content_entries_type_status", "content_type_id", "status"),
    )

    def to_dict(self, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Convert model to dictionary, optionally with a filtered data map."""
        return {
            "id": self.id,
            "content_type_id": self.content_type_id,
            "data": dict(self.data or {}) if data is None else data,
            "status": self.status,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "published_at": _iso(self.published_at),
        }


class ContentRelationModel(Base):
    """A typed link between two entries."""

    __tablename__ = "content_relations"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    from_entry_id = Column(
        String(26), ForeignKey("content_entries.id"), nullable=False, index=True
    )
    to_entry_id = Column(
        String(26), ForeignKey("content_entries.id"), nullable=False, index=True
    )
    relation_type = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from_entry_id": self.from_entry_id,
            "to_entry_id": self.to_entry_id,
            "relation_type": self.relation_type,
            "created_at": _iso(self.created_at),
        }


class MediaFileModel(Base):
    """A file already stored by the external file store."""

    __tablename__ = "media_files"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    file_name = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=True, index=True)
    size = Column(Integer, nullable=False, default=0)
    folder = Column(String(255), nullable=True, index=True)
    alt = Column(String(255), nullable=True)
    caption = Column(Text, nullable=True)
    uploaded_by = Column(String(26), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "file_name": self.file_name,
            "url": self.url,
            "mime_type": self.mime_type,
            "size": self.size,
            "folder": self.folder,
            "alt": self.alt,
            "caption": self.caption,
            "uploaded_by": self.uploaded_by,
            "created_at": _iso(self.created_at),
        }


class RoleModel(Base):
    """A named role owning a set of permissions."""

    __tablename__ = "roles"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    permissions = relationship(
        "PermissionModel",
        back_populates="role",
        cascade="all, delete-orphan",
    )

    def to_policy(self) -> RolePolicy:
        """Snapshot this role for the permission resolver."""
        return RolePolicy(
            name=self.name,
            permissions=[p.to_grant() for p in self.permissions],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "permissions": [p.to_dict() for p in self.permissions],
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class PermissionModel(Base):
    """A single (module, action, scope) grant held by a role."""

    __tablename__ = "permissions"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    role_id = Column(String(26), ForeignKey("roles.id"), nullable=False, index=True)
    module = Column(String(50), nullable=False)
    action = Column(String(20), nullable=False)
    field_scope = Column(String(20), nullable=True)
    allowed_fields = Column(JSON, nullable=False, default=list)
    denied_fields = Column(JSON, nullable=False, default=list)
    content_type_ids = Column(JSON, nullable=False, default=list)

    role = relationship("RoleModel", back_populates="permissions")

    __table_args__ = (Index("ix_permissions_module_action", "module", "action"),)

    def to_grant(self) -> PermissionGrant:
        return PermissionGrant(
            module=self.module,
            action=self.action,
            field_scope=self.field_scope or None,
            allowed_fields=tuple(self.allowed_fields or ()),
            denied_fields=tuple(self.denied_fields or ()),
            content_type_ids=tuple(self.content_type_ids or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "module": self.module,
            "action": self.action,
            "field_scope": self.field_scope,
            "allowed_fields": list(self.allowed_fields or []),
            "denied_fields": list(self.denied_fields or []),
            "content_type_ids": list(self.content_type_ids or []),
        }


class UserModel(Base):
    """A caller identity bound to a role. Credentials live elsewhere."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    email = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=True)
    role_id = Column(String(26), ForeignKey("roles.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    role = relationship("RoleModel")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "role_id": self.role_id,
            "role": self.role.name if self.role else None,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
        }


class WorkflowTransitionModel(Base):
    """One row of the role-gated transition table."""

    __tablename__ = "workflow_transitions"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    from_status = Column(String(32), nullable=False)
    to_status = Column(String(32), nullable=False)
    required_role = Column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "from_status", "to_status", "required_role", name="uq_workflow_transition"
        ),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "required_role": self.required_role,
        }


class WorkflowHistoryModel(Base):
    """Append-only audit row for a status change."""

    __tablename__ = "workflow_history"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    entry_id = Column(
        String(26), ForeignKey("content_entries.id"), nullable=False, index=True
    )
    from_status = Column(String(32), nullable=False)
    to_status = Column(String(32), nullable=False)
    changed_by = Column(String(26), nullable=False)
    comment = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entry_id": self.entry_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "changed_by": self.changed_by,
            "comment": self.comment,
            "created_at": _iso(self.created_at),
        }


class WorkflowCommentModel(Base):
    __tablename__ = "workflow_comments"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    entry_id = Column(
        String(26), ForeignKey("content_entries.id"), nullable=False, index=True
    )
    user_id = Column(String(26), nullable=False)
    comment = Column(Text, nullable=False)
    is_private = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entry_id": self.entry_id,
            "user_id": self.user_id,
            "comment": self.comment,
            "is_private": self.is_private,
            "created_at": _iso(self.created_at),
        }


class WorkflowAssignmentModel(Base):
    __tablename__ = "workflow_assignments"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    entry_id = Column(
        String(26), ForeignKey("content_entries.id"), nullable=False, index=True
    )
    assigned_to = Column(String(26), nullable=False, index=True)
    assigned_by = Column(String(26), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entry_id": self.entry_id,
            "assigned_to": self.assigned_to,
            "assigned_by": self.assigned_by,
            "status": self.status,
            "due_date": _iso(self.due_date),
            "completed_at": _iso(self.completed_at),
            "created_at": _iso(self.created_at),
        }
