"""
Field-level permission resolver.

This module is pure: it decides from a RolePolicy snapshot and a ContentSchema
which fields of a dynamic payload a role may write or read. No DB access.

Resolution:
- a full-access role (create/read/update/delete on ContentEntry, Media and SEO,
  each with scope ``all``) bypasses filtering
- otherwise the first ContentEntry permission for the action whose
  content-type whitelist admits the type decides; none -> NoPermissionError
- scope ``custom`` uses allowed_fields, else denied_fields, else keeps all
- ``seo_only`` / ``non_seo_only`` keep only known fields with a matching SEO flag
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from ..errors import NoPermissionError
from ..schema.registry import ContentSchema
from .models import CRUD_ACTIONS, Action, FieldScope, Module, PermissionGrant, RolePolicy

ActionLike = Union[Action, str]


def is_full_access(role: RolePolicy) -> bool:
    """Derived on every call from the role's current permissions."""
    for module in Module:
        for action in CRUD_ACTIONS:
            if not any(
                p.module == module
                and p.action == action
                and p.effective_scope == FieldScope.ALL
                for p in role.permissions
            ):
                return False
    return True


def find_permission(
    role: RolePolicy,
    action: Optional[ActionLike],
    content_type_id: Optional[str] = None,
    module: Module = Module.CONTENT_ENTRY,
) -> Optional[PermissionGrant]:
    """
    Return the first permission for module/action that applies to the type.

    ``action=None`` matches any action.
    """
    wanted = Action(action) if action is not None else None
    for permission in role.permissions:
        if permission.module != module:
            continue
        if wanted is not None and permission.action != wanted:
            continue
        if permission.applies_to(content_type_id):
            return permission
    return None


def has_permission(
    role: RolePolicy,
    module: Module,
    action: ActionLike,
    content_type_id: Optional[str] = None,
) -> bool:
    if is_full_access(role):
        return True
    return find_permission(role, action, content_type_id, module=module) is not None


def require_permission(
    role: RolePolicy,
    module: Module,
    action: ActionLike,
    content_type_id: Optional[str] = None,
) -> None:
    """Raise NoPermissionError unless the role may perform the action."""
    if not has_permission(role, module, action, content_type_id):
        raise NoPermissionError(
            f"role '{role.name}' may not {Action(action).value} {module.value}",
            role=role.name,
            action=Action(action).value,
            module=module.value,
        )


def _field_visible(grant: PermissionGrant, schema: ContentSchema, name: str) -> bool:
    scope = grant.effective_scope
    if scope == FieldScope.CUSTOM:
        if grant.allowed_fields:
            return name in grant.allowed_fields
        if grant.denied_fields:
            return name not in grant.denied_fields
        return True
    if scope == FieldScope.ALL:
        return True

    field = schema.field(name)
    if field is None:
        return False
    if scope == FieldScope.SEO_ONLY:
        return field.is_seo
    return not field.is_seo


def filter_fields(
    role: RolePolicy,
    action: ActionLike,
    schema: ContentSchema,
    data: Mapping[str, Any],
) -> Dict[str, Any]:
    """
    Return the subset of ``data`` the role may submit for ``action``.

    The result may be empty; treating an empty result as forbidden is left to
    the caller.
    """
    if is_full_access(role):
        return dict(data)

    grant = find_permission(role, action, schema.id)
    if grant is None:
        raise NoPermissionError(
            f"role '{role.name}' has no {Action(action).value} permission "
            f"for content type '{schema.slug}'",
            role=role.name,
            action=Action(action).value,
            content_type_id=schema.id,
        )

    return {
        name: value
        for name, value in data.items()
        if _field_visible(grant, schema, name)
    }


def can_access_field(
    role: RolePolicy,
    field_name: str,
    schema: ContentSchema,
    action: Optional[ActionLike] = None,
) -> bool:
    """Single-field check using the same scope logic as ``filter_fields``."""
    if is_full_access(role):
        return True
    if schema.field(field_name) is None:
        return False

    grant = find_permission(role, action, schema.id)
    if grant is None:
        return False
    return _field_visible(grant, schema, field_name)
