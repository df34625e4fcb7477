"""
Role and user administration routes. Writes require a full-access role.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db.base import get_db
from ..policy.models import Caller
from ..policy.roles import RoleService, UserService
from ..schemas.roles import (
    RoleCreate,
    RoleDuplicate,
    RoleUpdate,
    UserCreate,
    UserRoleUpdate,
)
from .deps import get_caller, require_full_access

router = APIRouter(tags=["roles"])


@router.post("/roles", status_code=201)
async def create_role(
    role: RoleCreate,
    caller: Caller = Depends(require_full_access),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    created = RoleService(db).create(role)
    return {"status": "success", "role": created.to_dict()}


@router.get("/roles")
async def list_roles(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    roles = RoleService(db).list()
    return {"roles": [r.to_dict() for r in roles], "count": len(roles)}


@router.get("/roles/{role_id}")
async def get_role(
    role_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return RoleService(db).get(role_id).to_dict()


@router.put("/roles/{role_id}")
async def update_role(
    role_id: str,
    update: RoleUpdate,
    caller: Caller = Depends(require_full_access),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    updated = RoleService(db).update(role_id, update)
    return {"status": "success", "role": updated.to_dict()}


@router.delete("/roles/{role_id}")
async def delete_role(
    role_id: str,
    caller: Caller = Depends(require_full_access),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    RoleService(db).delete(role_id)
    return {"status": "success"}


@router.post("/roles/{role_id}/duplicate", status_code=201)
async def duplicate_role(
    role_id: str,
    body: RoleDuplicate,
    caller: Caller = Depends(require_full_access),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    created = RoleService(db).duplicate(role_id, body)
    return {"status": "success", "role": created.to_dict()}


@router.post("/users", status_code=201)
async def create_user(
    user: UserCreate,
    caller: Caller = Depends(require_full_access),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    created = UserService(db).create(user)
    return {"status": "success", "user": created.to_dict()}


@router.get("/users")
async def list_users(
    caller: Caller = Depends(require_full_access),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    users = UserService(db).list()
    return {"users": [u.to_dict() for u in users], "count": len(users)}


@router.put("/users/{user_id}/role")
async def assign_user_role(
    user_id: str,
    body: UserRoleUpdate,
    caller: Caller = Depends(require_full_access),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    user = UserService(db).assign_role(user_id, body.role)
    return {"status": "success", "user": user.to_dict()}
