"""
Role policy models consumed by the permission resolver.

These are plain pydantic snapshots of a role and its permissions so that the
resolver never touches the database.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Module(str, Enum):
    CONTENT_ENTRY = "ContentEntry"
    MEDIA = "Media"
    SEO = "SEO"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"


CRUD_ACTIONS = (Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE)


class FieldScope(str, Enum):
    ALL = "all"
    SEO_ONLY = "seo_only"
    NON_SEO_ONLY = "non_seo_only"
    CUSTOM = "custom"


class PermissionGrant(BaseModel):
    """One permission held by a role."""

    model_config = ConfigDict(frozen=True)

    module: Module
    action: Action
    field_scope: Optional[FieldScope] = None
    allowed_fields: Tuple[str, ...] = ()
    denied_fields: Tuple[str, ...] = ()
    content_type_ids: Tuple[str, ...] = ()

    @property
    def effective_scope(self) -> FieldScope:
        """An unset scope means ``all``."""
        return self.field_scope or FieldScope.ALL

    def applies_to(self, content_type_id: Optional[str]) -> bool:
        """Whether the content-type whitelist admits ``content_type_id``."""
        if not self.content_type_ids:
            return True
        return content_type_id in self.content_type_ids


class RolePolicy(BaseModel):
    """A role and the permissions it holds."""

    model_config = ConfigDict(frozen=True)

    name: str
    permissions: List[PermissionGrant] = Field(default_factory=list)


class Caller(BaseModel):
    """Verified identity of the request issuer."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: RolePolicy

    @property
    def role_name(self) -> str:
        return self.role.name
