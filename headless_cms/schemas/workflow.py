"""
Request bodies for workflow actions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..workflow.states import WorkflowStatus


class StatusChange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: WorkflowStatus
    comment: str = ""


class TransitionComment(BaseModel):
    """Body for the named shortcuts (request-review, approve, reject, publish)."""

    comment: str = ""


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    comment: str = Field(..., min_length=1)
    is_private: bool = False


class AssignmentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    assigned_to: str = Field(..., min_length=1)
    due_date: Optional[datetime] = None
