"""
Request bodies for role and user administration.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..policy.models import Action, FieldScope, Module


class PermissionCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    module: Module
    action: Action
    field_scope: Optional[FieldScope] = None
    allowed_fields: List[str] = Field(default_factory=list)
    denied_fields: List[str] = Field(default_factory=list)
    content_type_ids: List[str] = Field(default_factory=list)


class RoleCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: List[PermissionCreate] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    """Replaces the description and, when given, the whole permission set."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    permissions: Optional[List[PermissionCreate]] = None


class RoleDuplicate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(..., min_length=3, max_length=255)
    display_name: Optional[str] = Field(None, max_length=255)
    role: Optional[str] = Field(None, description="Role name")


class UserRoleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: str = Field(..., min_length=1, description="Role name")
