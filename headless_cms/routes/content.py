"""
Content API routes.

Content types, fields, entries, SEO preview and relations. All endpoints are
prefixed with /content and require an identified caller.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..content.entries import EntryService
from ..content.relations import RelationService
from ..db.base import get_db
from ..policy.field_gate import require_permission
from ..policy.models import Action, Caller, Module
from ..schema.service import ContentTypeService
from ..schemas.content import (
    ContentTypeCreate,
    ContentTypeUpdate,
    EntryWrite,
    FieldCreate,
    FieldUpdate,
    RelationCreate,
)
from .deps import get_caller

router = APIRouter(prefix="/content", tags=["content"])


def _require_schema_write(caller: Caller) -> None:
    require_permission(caller.role, Module.CONTENT_ENTRY, Action.CREATE)


# =============================================================================
# Content types
# =============================================================================


@router.post("/types", status_code=201)
async def create_content_type(
    content_type: ContentTypeCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Create a new content type."""
    _require_schema_write(caller)
    created = ContentTypeService(db).create(content_type)
    return {"status": "success", "content_type": created.to_dict()}


@router.get("/types")
async def list_content_types(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    content_types = ContentTypeService(db).list()
    return {
        "content_types": [ct.to_dict() for ct in content_types],
        "count": len(content_types),
    }


@router.get("/types/{content_type_id}")
async def get_content_type(
    content_type_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return ContentTypeService(db).get(content_type_id).to_dict()


@router.put("/types/{content_type_id}")
async def update_content_type(
    content_type_id: str,
    update: ContentTypeUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    _require_schema_write(caller)
    updated = ContentTypeService(db).update(content_type_id, update)
    return {"status": "success", "content_type": updated.to_dict()}


@router.delete("/types/{content_type_id}")
async def delete_content_type(
    content_type_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    _require_schema_write(caller)
    ContentTypeService(db).delete(content_type_id)
    return {"status": "success"}


# =============================================================================
# Fields
# =============================================================================


@router.post("/types/{content_type_id}/fields", status_code=201)
async def add_field(
    content_type_id: str,
    field: FieldCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    _require_schema_write(caller)
    created = ContentTypeService(db).add_field(content_type_id, field)
    return {"status": "success", "field": created.to_dict()}


@router.put("/fields/{field_id}")
async def update_field(
    field_id: str,
    update: FieldUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    _require_schema_write(caller)
    updated = ContentTypeService(db).update_field(field_id, update)
    return {"status": "success", "field": updated.to_dict()}


@router.delete("/fields/{field_id}")
async def delete_field(
    field_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    _require_schema_write(caller)
    ContentTypeService(db).delete_field(field_id)
    return {"status": "success"}


@router.get("/fields/{field_id}/validation")
async def get_field_validation(
    field_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Describe a field's validation rules for form builders."""
    return {"rules": ContentTypeService(db).field_validation_rules(field_id)}


# =============================================================================
# Entries
# =============================================================================


@router.post("/{content_type_id}/entries", status_code=201)
async def create_entry(
    content_type_id: str,
    body: EntryWrite,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    service = EntryService(db)
    entry = service.create_entry(caller, content_type_id, body.data)
    return {"status": "success", "entry": service.present(caller, entry)}


@router.get("/{content_type_id}/entries")
async def list_entries(
    content_type_id: str,
    status: Optional[str] = None,
    limit: int = Query(50, ge=1),
    offset: int = Query(0, ge=0),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    entries = EntryService(db).list_entries(
        caller, content_type_id, status=status, limit=limit, offset=offset
    )
    return {"entries": entries, "count": len(entries), "limit": limit, "offset": offset}


@router.get("/entries/{entry_id}")
async def get_entry(
    entry_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return EntryService(db).get_entry(caller, entry_id)


@router.put("/entries/{entry_id}")
async def update_entry(
    entry_id: str,
    body: EntryWrite,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    service = EntryService(db)
    entry = service.update_entry(caller, entry_id, body.data)
    return {"status": "success", "entry": service.present(caller, entry)}


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    EntryService(db).delete_entry(caller, entry_id)
    return {"status": "success"}


@router.get("/entries/{entry_id}/seo-preview")
async def seo_preview(
    entry_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return {"seo": EntryService(db).seo_preview(entry_id, caller)}


# =============================================================================
# Relations
# =============================================================================


@router.post("/entries/{entry_id}/relations", status_code=201)
async def create_relation(
    entry_id: str,
    relation: RelationCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    require_permission(caller.role, Module.CONTENT_ENTRY, Action.UPDATE)
    created = RelationService(db).create(entry_id, relation)
    return {"status": "success", "relation": created.to_dict()}


@router.get("/entries/{entry_id}/relations")
async def list_relations(
    entry_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    relations = RelationService(db).list_for(entry_id)
    return {"relations": [r.to_dict() for r in relations], "count": len(relations)}


@router.delete("/relations/{relation_id}")
async def delete_relation(
    relation_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    require_permission(caller.role, Module.CONTENT_ENTRY, Action.UPDATE)
    RelationService(db).delete(relation_id)
    return {"status": "success"}
