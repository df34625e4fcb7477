"""
Workflow API routes.

Status transitions, history, comments, assignments and per-type statistics.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import get_settings
from ..content.entries import EntryService
from ..db.base import get_db
from ..policy.models import Caller
from ..schemas.workflow import (
    AssignmentCreate,
    CommentCreate,
    StatusChange,
    TransitionComment,
)
from ..workflow.engine import WorkflowEngine
from .deps import get_caller

router = APIRouter(prefix="/workflow", tags=["workflow"])


def _entry_response(db: Session, caller: Caller, entry) -> Dict[str, Any]:
    return {"status": "success", "entry": EntryService(db).present(caller, entry)}


@router.post("/entries/{entry_id}/status")
async def change_status(
    entry_id: str,
    change: StatusChange,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    entry = WorkflowEngine(db).change_status(
        entry_id, caller.user_id, change.status.value, change.comment
    )
    return _entry_response(db, caller, entry)


@router.post("/entries/{entry_id}/request-review")
async def request_review(
    entry_id: str,
    body: Optional[TransitionComment] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    comment = body.comment if body else ""
    entry = WorkflowEngine(db).request_review(entry_id, caller.user_id, comment)
    return _entry_response(db, caller, entry)


@router.post("/entries/{entry_id}/approve")
async def approve_entry(
    entry_id: str,
    body: Optional[TransitionComment] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    comment = body.comment if body else ""
    entry = WorkflowEngine(db).approve_entry(entry_id, caller.user_id, comment)
    return _entry_response(db, caller, entry)


@router.post("/entries/{entry_id}/reject")
async def reject_entry(
    entry_id: str,
    body: Optional[TransitionComment] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    comment = body.comment if body else ""
    entry = WorkflowEngine(db).reject_entry(entry_id, caller.user_id, comment)
    return _entry_response(db, caller, entry)


@router.post("/entries/{entry_id}/publish")
async def publish_entry(
    entry_id: str,
    body: Optional[TransitionComment] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    comment = body.comment if body else ""
    entry = WorkflowEngine(db).publish_entry(entry_id, caller.user_id, comment)
    return _entry_response(db, caller, entry)


@router.get("/entries/{entry_id}/history")
async def get_history(
    entry_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    history = WorkflowEngine(db).get_history(entry_id)
    return {"history": [h.to_dict() for h in history], "count": len(history)}


@router.post("/entries/{entry_id}/comments", status_code=201)
async def add_comment(
    entry_id: str,
    comment: CommentCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    row = WorkflowEngine(db).add_comment(
        entry_id, caller.user_id, comment.comment, comment.is_private
    )
    return {"status": "success", "comment": row.to_dict()}


@router.get("/entries/{entry_id}/comments")
async def get_comments(
    entry_id: str,
    include_private: bool = False,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    comments = WorkflowEngine(db).get_comments(entry_id, include_private=include_private)
    return {"comments": [c.to_dict() for c in comments], "count": len(comments)}


@router.post("/entries/{entry_id}/assign", status_code=201)
async def assign_entry(
    entry_id: str,
    assignment: AssignmentCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    row = WorkflowEngine(db).assign_entry(
        entry_id, assignment.assigned_to, caller.user_id, assignment.due_date
    )
    return {"status": "success", "assignment": row.to_dict()}


@router.get("/assignments")
async def list_assignments(
    status: Optional[str] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Assignments addressed to the caller."""
    rows = WorkflowEngine(db).list_assignments(caller.user_id, status=status)
    return {"assignments": [r.to_dict() for r in rows], "count": len(rows)}


@router.put("/assignments/{assignment_id}/complete")
async def complete_assignment(
    assignment_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    row = WorkflowEngine(db).complete_assignment(assignment_id, completed_by=caller.user_id)
    return {"status": "success", "assignment": row.to_dict()}


@router.get("/content-types/{content_type_id}/entries")
async def entries_by_status(
    content_type_id: str,
    status: Optional[str] = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Entries of a type, optionally narrowed to one status, newest first."""
    entries = EntryService(db).list_entries(
        caller, content_type_id, status=status, limit=get_settings().max_page_size
    )
    return {"entries": entries, "count": len(entries)}


@router.get("/content-types/{content_type_id}/stats")
async def workflow_stats(
    content_type_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return {"stats": WorkflowEngine(db).statistics(content_type_id)}
