"""
Entry Lifecycle Service.

Write path: resolve media references -> permission filter -> validate -> persist.
Every check runs before the session is written to, so a rejected request leaves
no partial state behind.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import structlog
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db.base import utc_now
from ..db.models import ContentEntryModel
from ..db.repository import ContentRepository
from ..errors import (
    ConflictError,
    ConstraintViolationError,
    NoPermissionError,
    NotFoundError,
)
from ..policy.field_gate import (
    can_access_field,
    filter_fields,
    is_full_access,
    require_permission,
)
from ..policy.models import Action, Caller, Module
from ..schema.registry import ContentSchema
from ..validation.fields import FieldValidator
from ..workflow.states import WorkflowStatus
from .media import MediaService

logger = structlog.get_logger(__name__)

SEO_KEYS = frozenset({"slug", "meta_title", "meta_description", "meta_image"})


class EntryService:
    """Create, update, read and delete content entries on behalf of a caller."""

    def __init__(self, db: Session, validator: Optional[FieldValidator] = None):
        self.db = db
        self.repo = ContentRepository(db)
        self.validator = validator or FieldValidator(self.repo)
        self.media = MediaService(db)

    def _load_schema(self, content_type_id: str) -> ContentSchema:
        content_type = self.repo.find_content_type(content_type_id)
        if content_type is None:
            raise NotFoundError("content type", content_type_id)
        return content_type.to_schema()

    def _load_entry(self, entry_id: str) -> ContentEntryModel:
        entry = self.repo.find_entry(entry_id)
        if entry is None:
            raise NotFoundError("entry", entry_id)
        return entry

    def _permitted(
        self,
        caller: Caller,
        action: Action,
        schema: ContentSchema,
        submitted: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Filter by role; a non-empty submission filtered to nothing is forbidden."""
        filtered = filter_fields(caller.role, action, schema, submitted)
        dropped = sorted(set(submitted) - set(filtered))
        if submitted and not filtered:
            raise NoPermissionError(
                f"role '{caller.role_name}' may not {action.value} any of the submitted fields",
                role=caller.role_name,
                fields=dropped,
            )
        if dropped:
            logger.info(
                "entry.fields_dropped",
                content_type_id=schema.id,
                user_id=caller.user_id,
                action=action.value,
                fields=dropped,
            )
        return filtered

    def _readable(self, caller: Caller, schema: ContentSchema, data: Mapping[str, Any]) -> Dict[str, Any]:
        if is_full_access(caller.role):
            return dict(data)
        return {
            name: value
            for name, value in data.items()
            if can_access_field(caller.role, name, schema, action=Action.READ)
        }

    def create_entry(
        self, caller: Caller, content_type_id: str, submitted: Mapping[str, Any]
    ) -> ContentEntryModel:
        """Create an entry in ``draft`` status."""
        schema = self._load_schema(content_type_id)
        require_permission(caller.role, Module.CONTENT_ENTRY, Action.CREATE, schema.id)
        resolved = self.media.resolve_references(schema, submitted)
        permitted = self._permitted(caller, Action.CREATE, schema, resolved)
        data = self.validator.validate(schema, permitted)

        entry = ContentEntryModel(
            content_type_id=schema.id,
            data=data,
            status=WorkflowStatus.DRAFT.value,
            created_by=caller.user_id,
            created_at=utc_now(),
        )
        self.repo.save_entry(entry)
        self.db.commit()
        self.db.refresh(entry)

        logger.info(
            "entry.created",
            entry_id=entry.id,
            content_type_id=schema.id,
            user_id=caller.user_id,
            fields=sorted(data),
        )
        return entry

    def update_entry(
        self, caller: Caller, entry_id: str, submitted: Mapping[str, Any]
    ) -> ContentEntryModel:
        """
        Merge a partial update into an unpublished entry.

        The status is left unchanged; there is no version check, so concurrent
        updates resolve as last write wins.
        """
        entry = self._load_entry(entry_id)
        require_permission(
            caller.role, Module.CONTENT_ENTRY, Action.UPDATE, entry.content_type_id
        )
        if entry.status == WorkflowStatus.PUBLISHED.value:
            raise ConflictError(
                "cannot edit published content directly", entry_id=entry.id
            )
        if not submitted:
            raise ConstraintViolationError("data", "no data provided")

        schema = self._load_schema(entry.content_type_id)
        resolved = self.media.resolve_references(schema, submitted)
        permitted = self._permitted(caller, Action.UPDATE, schema, resolved)
        changes = self.validator.validate_partial(schema, permitted, exclude_entry_id=entry.id)

        # New dict so the JSON column registers the change
        entry.data = {**(entry.data or {}), **changes}
        entry.updated_by = caller.user_id
        self.repo.save_entry(entry)
        self.db.commit()
        self.db.refresh(entry)

        logger.info(
            "entry.updated",
            entry_id=entry.id,
            user_id=caller.user_id,
            fields=sorted(changes),
        )
        return entry

    def get_entry(self, caller: Caller, entry_id: str) -> Dict[str, Any]:
        """Return the entry with only the fields the caller may read."""
        entry = self._load_entry(entry_id)
        schema = self._load_schema(entry.content_type_id)
        require_permission(caller.role, Module.CONTENT_ENTRY, Action.READ, schema.id)
        return entry.to_dict(data=self._readable(caller, schema, entry.data or {}))

    def present(self, caller: Caller, entry: ContentEntryModel) -> Dict[str, Any]:
        """Serialize an entry returned by a write, keeping only readable fields."""
        schema = self._load_schema(entry.content_type_id)
        return entry.to_dict(data=self._readable(caller, schema, entry.data or {}))

    def list_entries(
        self,
        caller: Caller,
        content_type_id: str,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        schema = self._load_schema(content_type_id)
        require_permission(caller.role, Module.CONTENT_ENTRY, Action.READ, schema.id)

        limit = max(1, min(limit, get_settings().max_page_size))
        entries = self.repo.list_entries(schema.id, status=status, limit=limit, offset=max(offset, 0))
        return [e.to_dict(data=self._readable(caller, schema, e.data or {})) for e in entries]

    def delete_entry(self, caller: Caller, entry_id: str) -> None:
        """Soft-delete an unpublished entry."""
        entry = self._load_entry(entry_id)
        require_permission(
            caller.role, Module.CONTENT_ENTRY, Action.DELETE, entry.content_type_id
        )
        if entry.status == WorkflowStatus.PUBLISHED.value:
            raise ConflictError("cannot delete published content", entry_id=entry.id)

        entry.deleted_at = utc_now()
        self.db.commit()
        logger.info("entry.deleted", entry_id=entry.id, user_id=caller.user_id)

    def seo_preview(self, entry_id: str, caller: Optional[Caller] = None) -> Dict[str, Any]:
        """SEO-flagged fields plus the conventional SEO keys of an entry."""
        entry = self._load_entry(entry_id)
        schema = self._load_schema(entry.content_type_id)
        if caller is not None:
            require_permission(caller.role, Module.CONTENT_ENTRY, Action.READ, schema.id)

        seo_names = {f.name for f in schema.seo_fields}
        return {
            key: value
            for key, value in (entry.data or {}).items()
            if key in seo_names or key in SEO_KEYS or key.startswith("seo_")
        }
