"""
Role and user administration, plus idempotent seeding of default roles and
workflow transitions.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import structlog
from sqlalchemy.orm import Session

from ..db.models import (
    PermissionModel,
    RoleModel,
    UserModel,
    WorkflowTransitionModel,
)
from ..errors import ConflictError, NotFoundError
from ..schemas.roles import (
    PermissionCreate,
    RoleCreate,
    RoleDuplicate,
    RoleUpdate,
    UserCreate,
)
from ..workflow.states import DEFAULT_TRANSITIONS

logger = structlog.get_logger(__name__)


def _perm(module: str, action: str, scope: Optional[str] = None) -> Dict[str, Any]:
    return {"module": module, "action": action, "field_scope": scope}


DEFAULT_ROLES: Dict[str, Dict[str, Any]] = {
    "admin": {
        "description": "Full access to all resources",
        "permissions": [
            _perm("ContentEntry", "create", "all"),
            _perm("ContentEntry", "read", "all"),
            _perm("ContentEntry", "update", "all"),
            _perm("ContentEntry", "delete"),
            _perm("ContentEntry", "approve"),
            _perm("Media", "create"),
            _perm("Media", "read"),
            _perm("Media", "update"),
            _perm("Media", "delete"),
            _perm("SEO", "create", "all"),
            _perm("SEO", "read", "all"),
            _perm("SEO", "update", "all"),
            _perm("SEO", "delete"),
        ],
    },
    "editor": {
        "description": "Can create/edit content, upload media, and view SEO",
        "permissions": [
            _perm("ContentEntry", "create", "all"),
            _perm("ContentEntry", "read", "all"),
            _perm("ContentEntry", "update", "all"),
            _perm("Media", "create"),
            _perm("Media", "read"),
            _perm("Media", "update"),
            _perm("SEO", "read", "all"),
        ],
    },
    "manager": {
        "description": "Can approve content",
        "permissions": [
            _perm("ContentEntry", "approve"),
            _perm("ContentEntry", "read", "all"),
            _perm("Media", "read"),
            _perm("SEO", "read", "all"),
        ],
    },
    "viewer": {
        "description": "Can view content only",
        "permissions": [
            _perm("ContentEntry", "read", "all"),
            _perm("Media", "read"),
            _perm("SEO", "read", "all"),
        ],
    },
    "seo_specialist": {
        "description": "Can edit SEO fields only",
        "permissions": [
            _perm("ContentEntry", "read", "all"),
            _perm("ContentEntry", "update", "seo_only"),
            _perm("Media", "read"),
            _perm("SEO", "create", "all"),
            _perm("SEO", "read", "all"),
            _perm("SEO", "update", "all"),
        ],
    },
    "content_writer": {
        "description": "Can create/edit content (non-SEO fields)",
        "permissions": [
            _perm("ContentEntry", "create", "non_seo_only"),
            _perm("ContentEntry", "read", "all"),
            _perm("ContentEntry", "update", "non_seo_only"),
            _perm("Media", "create"),
            _perm("Media", "read"),
        ],
    },
}


def _permission_rows(permissions: Sequence[PermissionCreate]) -> List[PermissionModel]:
    return [
        PermissionModel(
            module=p.module.value,
            action=p.action.value,
            field_scope=p.field_scope.value if p.field_scope else None,
            allowed_fields=list(p.allowed_fields),
            denied_fields=list(p.denied_fields),
            content_type_ids=list(p.content_type_ids),
        )
        for p in permissions
    ]


class RoleService:
    """Service for managing roles and their permissions."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: RoleCreate) -> RoleModel:
        if self.find_by_name(data.name) is not None:
            raise ConflictError(f"role '{data.name}' already exists", role=data.name)

        role = RoleModel(
            name=data.name,
            description=data.description,
            permissions=_permission_rows(data.permissions),
        )
        self.db.add(role)
        self.db.commit()
        self.db.refresh(role)
        logger.info("role.created", role_id=role.id, role=role.name, permissions=len(role.permissions))
        return role

    def find_by_name(self, name: str) -> Optional[RoleModel]:
        return self.db.query(RoleModel).filter(RoleModel.name == name).first()

    def get(self, role_id: str) -> RoleModel:
        role = self.db.query(RoleModel).filter(RoleModel.id == role_id).first()
        if role is None:
            raise NotFoundError("role", role_id)
        return role

    def get_by_name(self, name: str) -> RoleModel:
        role = self.find_by_name(name)
        if role is None:
            raise NotFoundError("role", name)
        return role

    def list(self) -> List[RoleModel]:
        return self.db.query(RoleModel).order_by(RoleModel.name).all()

    def update(self, role_id: str, data: RoleUpdate) -> RoleModel:
        role = self.get(role_id)
        if data.name is not None and data.name != role.name:
            if self.find_by_name(data.name) is not None:
                raise ConflictError(f"role '{data.name}' already exists", role=data.name)
            role.name = data.name
        if data.description is not None:
            role.description = data.description
        if data.permissions is not None:
            role.permissions = _permission_rows(data.permissions)

        self.db.commit()
        self.db.refresh(role)
        logger.info("role.updated", role_id=role.id, role=role.name)
        return role

    def delete(self, role_id: str) -> None:
        role = self.get(role_id)
        users = self.db.query(UserModel).filter(UserModel.role_id == role.id).count()
        if users:
            raise ConflictError(
                f"role '{role.name}' is assigned to {users} users", role=role.name
            )
        self.db.delete(role)
        self.db.commit()
        logger.info("role.deleted", role_id=role_id)

    def duplicate(self, role_id: str, data: RoleDuplicate) -> RoleModel:
        """Copy a role's permissions under a new name."""
        source = self.get(role_id)
        permissions = [
            PermissionCreate(
                module=p.module,
                action=p.action,
                field_scope=p.field_scope or None,
                allowed_fields=list(p.allowed_fields or []),
                denied_fields=list(p.denied_fields or []),
                content_type_ids=list(p.content_type_ids or []),
            )
            for p in source.permissions
        ]
        return self.create(
            RoleCreate(
                name=data.name,
                description=data.description or source.description,
                permissions=permissions,
            )
        )


class UserService:
    """Service for caller identities and their role binding."""

    def __init__(self, db: Session):
        self.db = db
        self.roles = RoleService(db)

    def create(self, data: UserCreate) -> UserModel:
        if self.db.query(UserModel).filter(UserModel.email == data.email).first():
            raise ConflictError(f"user '{data.email}' already exists", email=data.email)

        role = self.roles.get_by_name(data.role) if data.role else None
        user = UserModel(
            email=data.email,
            display_name=data.display_name,
            role_id=role.id if role else None,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("user.created", user_id=user.id, role=role.name if role else None)
        return user

    def get(self, user_id: str) -> UserModel:
        user = self.db.query(UserModel).filter(UserModel.id == user_id).first()
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    def list(self) -> List[UserModel]:
        return self.db.query(UserModel).order_by(UserModel.email).all()

    def assign_role(self, user_id: str, role_name: str) -> UserModel:
        user = self.get(user_id)
        role = self.roles.get_by_name(role_name)
        user.role_id = role.id
        self.db.commit()
        self.db.refresh(user)
        logger.info("user.role_assigned", user_id=user.id, role=role.name)
        return user


def seed_default_roles(db: Session) -> int:
    """Create any missing default role. Returns the number created."""
    created = 0
    for name, definition in DEFAULT_ROLES.items():
        if db.query(RoleModel).filter(RoleModel.name == name).first():
            continue
        db.add(
            RoleModel(
                name=name,
                description=definition["description"],
                permissions=[PermissionModel(**p) for p in definition["permissions"]],
            )
        )
        created += 1
    db.commit()
    if created:
        logger.info("seed.roles", created=created)
    return created


def seed_workflow_transitions(db: Session) -> int:
    """Insert any missing default transition row. Returns the number created."""
    created = 0
    for row in DEFAULT_TRANSITIONS:
        exists = (
            db.query(WorkflowTransitionModel)
            .filter(
                WorkflowTransitionModel.from_status == row.from_status,
                WorkflowTransitionModel.to_status == row.to_status,
                WorkflowTransitionModel.required_role == row.required_role,
            )
            .first()
        )
        if exists:
            continue
        db.add(
            WorkflowTransitionModel(
                from_status=row.from_status,
                to_status=row.to_status,
                required_role=row.required_role,
            )
        )
        created += 1
    db.commit()
    if created:
        logger.info("seed.transitions", created=created)
    return created


def seed_defaults(db: Session) -> Dict[str, int]:
    return {
        "roles": seed_default_roles(db),
        "transitions": seed_workflow_transitions(db),
    }
