"""
Persistence repository used by the content and workflow services.

Methods only add and flush; the calling service owns the commit.
"""

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import UniquenessCheckError
from ..workflow.states import Transition
from .base import utc_now
from .models import (
    ContentEntryModel,
    ContentTypeModel,
    MediaFileModel,
    RoleModel,
    UserModel,
    WorkflowAssignmentModel,
    WorkflowCommentModel,
    WorkflowHistoryModel,
    WorkflowTransitionModel,
)


class ContentRepository:
    """Query and write helpers over content and workflow tables."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Content types
    # ------------------------------------------------------------------

    def find_content_type(self, content_type_id: str) -> Optional[ContentTypeModel]:
        return (
            self.db.query(ContentTypeModel)
            .filter(
                ContentTypeModel.id == content_type_id,
                ContentTypeModel.deleted_at.is_(None),
            )
            .first()
        )

    def find_content_type_by_slug(self, slug: str) -> Optional[ContentTypeModel]:
        # Soft-deleted types keep their slug reserved
        return self.db.query(ContentTypeModel).filter(ContentTypeModel.slug == slug).first()

    def list_content_types(self) -> List[ContentTypeModel]:
        return (
            self.db.query(ContentTypeModel)
            .filter(ContentTypeModel.deleted_at.is_(None))
            .order_by(ContentTypeModel.name)
            .all()
        )

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def find_entry(self, entry_id: str) -> Optional[ContentEntryModel]:
        return (
            self.db.query(ContentEntryModel)
            .filter(
                ContentEntryModel.id == entry_id,
                ContentEntryModel.deleted_at.is_(None),
            )
            .first()
        )

    def save_entry(self, entry: ContentEntryModel) -> ContentEntryModel:
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_entries(
        self,
        content_type_id: str,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ContentEntryModel]:
        query = self.db.query(ContentEntryModel).filter(
            ContentEntryModel.content_type_id == content_type_id,
            ContentEntryModel.deleted_at.is_(None),
        )
        if status:
            query = query.filter(ContentEntryModel.status == status)
        return (
            query.order_by(desc(ContentEntryModel.created_at))
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_live_entries(self, content_type_id: str) -> int:
        return self.count_by_status(content_type_id)

    def count_entries_where(
        self,
        content_type_id: str,
        field_name: str,
        value: Any,
        exclude_id: Optional[str] = None,
    ) -> int:
        """
        Count live entries of a type whose stored ``field_name`` equals ``value``.

        Scalars are compared type-aware through a JSON path predicate, so the
        string "5" never matches the number 5. Any database failure is raised
        as UniquenessCheckError.
        """
        try:
            query = self.db.query(ContentEntryModel).filter(
                ContentEntryModel.content_type_id == content_type_id,
                ContentEntryModel.deleted_at.is_(None),
            )
            if exclude_id is not None:
                query = query.filter(ContentEntryModel.id != exclude_id)

            path = ContentEntryModel.data[field_name]
            # bool before int: bool is an int subclass
            if isinstance(value, bool):
                return query.filter(path.as_boolean() == value).count()
            if isinstance(value, (int, float)):
                return query.filter(path.as_float() == float(value)).count()
            if isinstance(value, str):
                return query.filter(path.as_string() == value).count()

            return sum(
                1 for entry in query.all() if (entry.data or {}).get(field_name) == value
            )
        except SQLAlchemyError as exc:
            raise UniquenessCheckError(field_name) from exc

    def count_by_status(self, content_type_id: str, status: Optional[str] = None) -> int:
        """Count live entries of a type, optionally restricted to one status."""
        query = self.db.query(func.count(ContentEntryModel.id)).filter(
            ContentEntryModel.content_type_id == content_type_id,
            ContentEntryModel.deleted_at.is_(None),
        )
        if status is not None:
            query = query.filter(ContentEntryModel.status == status)
        return int(query.scalar() or 0)

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def load_transitions(self) -> List[Transition]:
        rows = self.db.query(WorkflowTransitionModel).all()
        return [Transition(r.from_status, r.to_status, r.required_role) for r in rows]

    def append_history(
        self,
        entry_id: str,
        from_status: str,
        to_status: str,
        changed_by: str,
        comment: str = "",
    ) -> WorkflowHistoryModel:
        row = WorkflowHistoryModel(
            entry_id=entry_id,
            from_status=from_status,
            to_status=to_status,
            changed_by=changed_by,
            comment=comment or "",
            created_at=utc_now(),
        )
        self.db.add(row)
        self.db.flush()
        return row

    def list_history(self, entry_id: str) -> List[WorkflowHistoryModel]:
        return (
            self.db.query(WorkflowHistoryModel)
            .filter(WorkflowHistoryModel.entry_id == entry_id)
            .order_by(WorkflowHistoryModel.created_at, WorkflowHistoryModel.id)
            .all()
        )

    def append_comment(
        self, entry_id: str, user_id: str, comment: str, is_private: bool = False
    ) -> WorkflowCommentModel:
        row = WorkflowCommentModel(
            entry_id=entry_id,
            user_id=user_id,
            comment=comment,
            is_private=is_private,
            created_at=utc_now(),
        )
        self.db.add(row)
        self.db.flush()
        return row

    def list_comments(
        self, entry_id: str, include_private: bool = False
    ) -> List[WorkflowCommentModel]:
        query = self.db.query(WorkflowCommentModel).filter(
            WorkflowCommentModel.entry_id == entry_id
        )
        if not include_private:
            query = query.filter(WorkflowCommentModel.is_private.is_(False))
        return query.order_by(WorkflowCommentModel.created_at, WorkflowCommentModel.id).all()

    def create_assignment(
        self,
        entry_id: str,
        assigned_to: str,
        assigned_by: str,
        due_date: Optional[datetime] = None,
    ) -> WorkflowAssignmentModel:
        row = WorkflowAssignmentModel(
            entry_id=entry_id,
            assigned_to=assigned_to,
            assigned_by=assigned_by,
            status="pending",
            due_date=due_date,
            created_at=utc_now(),
        )
        self.db.add(row)
        self.db.flush()
        return row

    def find_assignment(self, assignment_id: str) -> Optional[WorkflowAssignmentModel]:
        return (
            self.db.query(WorkflowAssignmentModel)
            .filter(WorkflowAssignmentModel.id == assignment_id)
            .first()
        )

    def update_assignment_status(
        self, assignment_id: str, status: str
    ) -> Optional[WorkflowAssignmentModel]:
        row = self.find_assignment(assignment_id)
        if row is None:
            return None
        row.status = status
        if status == "completed":
            row.completed_at = utc_now()
        self.db.flush()
        return row

    def list_assignments(
        self, assigned_to: Optional[str] = None, status: Optional[str] = None
    ) -> List[WorkflowAssignmentModel]:
        query = self.db.query(WorkflowAssignmentModel)
        if assigned_to:
            query = query.filter(WorkflowAssignmentModel.assigned_to == assigned_to)
        if status:
            query = query.filter(WorkflowAssignmentModel.status == status)
        return query.order_by(desc(WorkflowAssignmentModel.created_at)).all()

    # ------------------------------------------------------------------
    # Identity and media
    # ------------------------------------------------------------------

    def find_user(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.id == user_id).first()

    def find_role(self, role_id: str) -> Optional[RoleModel]:
        return self.db.query(RoleModel).filter(RoleModel.id == role_id).first()

    def find_role_by_name(self, name: str) -> Optional[RoleModel]:
        return self.db.query(RoleModel).filter(RoleModel.name == name).first()

    def find_media(self, media_id: str) -> Optional[MediaFileModel]:
        return self.db.query(MediaFileModel).filter(MediaFileModel.id == media_id).first()
