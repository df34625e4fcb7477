"""
Pydantic request bodies for the HTTP boundary.
"""

from .content import (
    ContentTypeCreate,
    ContentTypeUpdate,
    EntryWrite,
    FieldCreate,
    FieldUpdate,
    MediaRegister,
    RelationCreate,
)
from .roles import (
    PermissionCreate,
    RoleCreate,
    RoleDuplicate,
    RoleUpdate,
    UserCreate,
    UserRoleUpdate,
)
from .workflow import AssignmentCreate, CommentCreate, StatusChange, TransitionComment

__all__ = [
    "AssignmentCreate",
    "CommentCreate",
    "ContentTypeCreate",
    "ContentTypeUpdate",
    "EntryWrite",
    "FieldCreate",
    "FieldUpdate",
    "MediaRegister",
    "PermissionCreate",
    "RelationCreate",
    "RoleCreate",
    "RoleDuplicate",
    "RoleUpdate",
    "StatusChange",
    "TransitionComment",
    "UserCreate",
    "UserRoleUpdate",
]
