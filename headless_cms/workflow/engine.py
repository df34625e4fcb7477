"""
Workflow Engine.

Moves entries between statuses according to the stored role-gated transition
table and records the side effects: publish timestamp, history rows, comments
and reviewer assignments.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import structlog
from sqlalchemy.orm import Session

from ..db.base import utc_now
from ..db.models import (
    ContentEntryModel,
    RoleModel,
    WorkflowAssignmentModel,
    WorkflowCommentModel,
    WorkflowHistoryModel,
)
from ..db.repository import ContentRepository
from ..errors import InvalidTransitionError, NoPermissionError, NotFoundError
from .states import AssignmentStatus, TransitionTable, WorkflowStatus, is_valid_status

logger = structlog.get_logger(__name__)


class WorkflowEngine:
    """Role-gated state machine over entry status."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContentRepository(db)

    def _load_entry(self, entry_id: str) -> ContentEntryModel:
        entry = self.repo.find_entry(entry_id)
        if entry is None:
            raise NotFoundError("entry", entry_id)
        return entry

    def _load_role(self, user_id: str) -> RoleModel:
        user = self.repo.find_user(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        if user.role is None:
            raise NoPermissionError(f"user '{user_id}' has no role", user_id=user_id)
        return user.role

    def transition_table(self) -> TransitionTable:
        """The table as currently stored."""
        return TransitionTable(self.repo.load_transitions())

    def change_status(
        self,
        entry_id: str,
        user_id: str,
        to_status: str,
        comment: str = "",
    ) -> ContentEntryModel:
        """
        Transition an entry if (current, target, role) is in the table.

        A rejected transition leaves the entry and its history untouched.
        """
        entry = self._load_entry(entry_id)
        role = self._load_role(user_id)
        from_status = entry.status
        target = to_status.value if isinstance(to_status, WorkflowStatus) else str(to_status)

        if not is_valid_status(target):
            raise InvalidTransitionError(from_status, target, role.name, reason="unknown status")

        if not self.transition_table().allows(from_status, target, role.name):
            logger.warning(
                "workflow.transition_rejected",
                entry_id=entry.id,
                user_id=user_id,
                role=role.name,
                from_status=from_status,
                to_status=target,
            )
            raise InvalidTransitionError(from_status, target, role.name)

        entry.status = target
        entry.updated_by = user_id
        if target == WorkflowStatus.PUBLISHED.value:
            entry.published_at = utc_now()

        self.repo.append_history(entry.id, from_status, target, user_id, comment)
        self.db.commit()
        self.db.refresh(entry)

        logger.info(
            "workflow.status_changed",
            entry_id=entry.id,
            user_id=user_id,
            role=role.name,
            from_status=from_status,
            to_status=target,
        )
        return entry

    def request_review(self, entry_id: str, user_id: str, comment: str = "") -> ContentEntryModel:
        """Submit a draft for review."""
        entry = self._load_entry(entry_id)
        if entry.status != WorkflowStatus.DRAFT.value:
            raise InvalidTransitionError(
                entry.status,
                WorkflowStatus.IN_REVIEW.value,
                reason="entry must be in draft status to request review",
            )
        return self.change_status(entry_id, user_id, WorkflowStatus.IN_REVIEW.value, comment)

    def approve_entry(self, entry_id: str, user_id: str, comment: str = "") -> ContentEntryModel:
        return self.change_status(entry_id, user_id, WorkflowStatus.APPROVED.value, comment)

    def reject_entry(self, entry_id: str, user_id: str, comment: str = "") -> ContentEntryModel:
        return self.change_status(entry_id, user_id, WorkflowStatus.REJECTED.value, comment)

    def publish_entry(self, entry_id: str, user_id: str, comment: str = "") -> ContentEntryModel:
        return self.change_status(entry_id, user_id, WorkflowStatus.PUBLISHED.value, comment)

    def get_history(self, entry_id: str) -> List[WorkflowHistoryModel]:
        self._load_entry(entry_id)
        return self.repo.list_history(entry_id)

    # Comments

    def add_comment(
        self, entry_id: str, user_id: str, comment: str, is_private: bool = False
    ) -> WorkflowCommentModel:
        self._load_entry(entry_id)
        row = self.repo.append_comment(entry_id, user_id, comment, is_private)
        self.db.commit()
        self.db.refresh(row)
        logger.info(
            "workflow.comment_added",
            entry_id=entry_id,
            user_id=user_id,
            is_private=is_private,
        )
        return row

    def get_comments(
        self, entry_id: str, include_private: bool = False
    ) -> List[WorkflowCommentModel]:
        self._load_entry(entry_id)
        return self.repo.list_comments(entry_id, include_private=include_private)

    # Assignments

    def assign_entry(
        self,
        entry_id: str,
        assigned_to: str,
        assigned_by: str,
        due_date: Optional[datetime] = None,
    ) -> WorkflowAssignmentModel:
        """Always creates a new pending assignment."""
        self._load_entry(entry_id)
        if self.repo.find_user(assigned_to) is None:
            raise NotFoundError("user", assigned_to)

        row = self.repo.create_assignment(entry_id, assigned_to, assigned_by, due_date)
        self.db.commit()
        self.db.refresh(row)
        logger.info(
            "workflow.assignment_created",
            assignment_id=row.id,
            entry_id=entry_id,
            assigned_to=assigned_to,
            assigned_by=assigned_by,
        )
        return row

    def complete_assignment(
        self, assignment_id: str, completed_by: Optional[str] = None
    ) -> WorkflowAssignmentModel:
        """
        Mark an assignment completed.

        Any caller may complete any assignment; completed stays completed.
        """
        row = self.repo.find_assignment(assignment_id)
        if row is None:
            raise NotFoundError("assignment", assignment_id)
        if row.status == AssignmentStatus.COMPLETED.value:
            return row

        self.repo.update_assignment_status(assignment_id, AssignmentStatus.COMPLETED.value)
        self.db.commit()
        self.db.refresh(row)
        logger.info(
            "workflow.assignment_completed",
            assignment_id=row.id,
            assigned_to=row.assigned_to,
            completed_by=completed_by,
        )
        return row

    def list_assignments(
        self, user_id: str, status: Optional[str] = None
    ) -> List[WorkflowAssignmentModel]:
        return self.repo.list_assignments(assigned_to=user_id, status=status)

    # Reporting

    def statistics(self, content_type_id: str) -> Dict[str, Any]:
        """Counts per status plus total; every status is always present."""
        if self.repo.find_content_type(content_type_id) is None:
            raise NotFoundError("content type", content_type_id)
        counts: List[Tuple[str, int]] = [
            (status.value, self.repo.count_by_status(content_type_id, status.value))
            for status in WorkflowStatus
        ]
        stats: Dict[str, Any] = dict(counts)
        stats["total"] = self.repo.count_by_status(content_type_id)
        return stats
