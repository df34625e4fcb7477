"""
Role policies and the field-level permission resolver.
"""

from .field_gate import (
    can_access_field,
    filter_fields,
    find_permission,
    has_permission,
    is_full_access,
    require_permission,
)
from .models import Action, Caller, FieldScope, Module, PermissionGrant, RolePolicy

__all__ = [
    "Action",
    "Caller",
    "FieldScope",
    "Module",
    "PermissionGrant",
    "RolePolicy",
    "can_access_field",
    "filter_fields",
    "find_permission",
    "has_permission",
    "is_full_access",
    "require_permission",
]
