"""
Shared FastAPI dependencies.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..db.base import get_db
from ..db.models import UserModel
from ..errors import NoPermissionError
from ..policy.field_gate import is_full_access
from ..policy.models import Caller


def get_caller(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Caller:
    """Resolve the verified caller identity attached by the auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")

    user = db.query(UserModel).filter(UserModel.id == x_user_id).first()
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="Unknown user")
    if user.role is None:
        raise NoPermissionError(f"user '{user.id}' has no role", user_id=user.id)

    return Caller(user_id=user.id, role=user.role.to_policy())


def require_full_access(caller: Caller = Depends(get_caller)) -> Caller:
    if not is_full_access(caller.role):
        raise NoPermissionError(
            "role administration requires full access", role=caller.role_name
        )
    return caller
