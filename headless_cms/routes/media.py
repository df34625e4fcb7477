"""
Media registration routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..content.media import MediaService
from ..db.base import get_db
from ..policy.field_gate import require_permission
from ..policy.models import Action, Caller, Module
from ..schemas.content import MediaRegister
from .deps import get_caller

router = APIRouter(prefix="/media", tags=["media"])


@router.post("", status_code=201)
async def register_media(
    media: MediaRegister,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Record a file already written by the file store."""
    require_permission(caller.role, Module.MEDIA, Action.CREATE)
    created = MediaService(db).register(media, uploaded_by=caller.user_id)
    return {"status": "success", "media": created.to_dict()}


@router.get("/{media_id}")
async def get_media(
    media_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    require_permission(caller.role, Module.MEDIA, Action.READ)
    return MediaService(db).get(media_id).to_dict()
