"""
Content type and field administration.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List

import structlog
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..db.base import utc_now
from ..db.models import ContentFieldModel, ContentTypeModel
from ..db.repository import ContentRepository
from ..errors import ConflictError, ConstraintViolationError, NotFoundError
from ..schemas.content import (
    ContentTypeCreate,
    ContentTypeUpdate,
    FieldCreate,
    FieldUpdate,
)
from ..validation.fields import check_value, coerce_default
from .registry import ContentSchema, FieldDefinition, FieldType, is_valid_slug

logger = structlog.get_logger(__name__)

# FieldCreate attribute -> ContentFieldModel column attribute
_FIELD_COLUMNS = {"unique": "is_unique"}


def _check_definition(definition: FieldDefinition) -> None:
    """Reject self-contradictory constraints and defaults that would not validate."""
    name = definition.name
    if (
        definition.min_length is not None
        and definition.max_length is not None
        and definition.min_length > definition.max_length
    ):
        raise ConstraintViolationError(
            name, "min_length cannot exceed max_length", constraint="min_length"
        )
    if (
        definition.min_value is not None
        and definition.max_value is not None
        and definition.min_value > definition.max_value
    ):
        raise ConstraintViolationError(
            name, "min_value cannot exceed max_value", constraint="min_value"
        )
    if definition.pattern:
        try:
            re.compile(definition.pattern)
        except re.error as exc:
            raise ConstraintViolationError(
                name, f"invalid pattern: {exc}", constraint="pattern"
            ) from exc
    if definition.default_value:
        check_value(definition, coerce_default(definition))


class ContentTypeService:
    """Service for managing content types and their field definitions."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContentRepository(db)

    # Content types

    def create(self, data: ContentTypeCreate) -> ContentTypeModel:
        """Create a content type, optionally with its initial fields."""
        if not is_valid_slug(data.slug):
            raise ConstraintViolationError(
                "slug",
                "slug must contain only lowercase letters, numbers, and hyphens",
                constraint="slug",
            )
        if self.repo.find_content_type_by_slug(data.slug) is not None:
            raise ConflictError(
                f"content type with slug '{data.slug}' already exists", slug=data.slug
            )

        content_type = ContentTypeModel(
            name=data.name,
            slug=data.slug,
            enable_seo=data.enable_seo,
        )
        self.db.add(content_type)
        try:
            for field in data.fields:
                self._append_field(content_type, field)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(content_type)

        logger.info(
            "content_type.created",
            content_type_id=content_type.id,
            slug=content_type.slug,
            fields=[f.name for f in content_type.fields],
        )
        return content_type

    def get(self, content_type_id: str) -> ContentTypeModel:
        content_type = self.repo.find_content_type(content_type_id)
        if content_type is None:
            raise NotFoundError("content type", content_type_id)
        return content_type

    def get_by_slug(self, slug: str) -> ContentTypeModel:
        content_type = self.repo.find_content_type_by_slug(slug)
        if content_type is None or content_type.deleted_at is not None:
            raise NotFoundError("content type", slug)
        return content_type

    def list(self) -> List[ContentTypeModel]:
        return self.repo.list_content_types()

    def load_schema(self, content_type_id: str) -> ContentSchema:
        """Fresh snapshot of a content type for validation and filtering."""
        return self.get(content_type_id).to_schema()

    def update(self, content_type_id: str, data: ContentTypeUpdate) -> ContentTypeModel:
        content_type = self.get(content_type_id)

        if data.slug is not None and data.slug != content_type.slug:
            if not is_valid_slug(data.slug):
                raise ConstraintViolationError(
                    "slug",
                    "slug must contain only lowercase letters, numbers, and hyphens",
                    constraint="slug",
                )
            if self.repo.find_content_type_by_slug(data.slug) is not None:
                raise ConflictError(
                    f"content type with slug '{data.slug}' already exists",
                    slug=data.slug,
                )
            content_type.slug = data.slug
        if data.name is not None:
            content_type.name = data.name
        if data.enable_seo is not None:
            content_type.enable_seo = data.enable_seo

        self.db.commit()
        self.db.refresh(content_type)
        logger.info("content_type.updated", content_type_id=content_type.id)
        return content_type

    def delete(self, content_type_id: str) -> None:
        """Soft-delete a content type that has no live entries."""
        content_type = self.get(content_type_id)
        live = self.repo.count_live_entries(content_type.id)
        if live > 0:
            raise ConflictError(
                f"content type '{content_type.slug}' still has {live} entries",
                content_type_id=content_type.id,
                entries=live,
            )

        content_type.fields.clear()
        content_type.deleted_at = utc_now()
        self.db.commit()
        logger.info("content_type.deleted", content_type_id=content_type.id)

    # Fields

    def get_field(self, field_id: str) -> ContentFieldModel:
        field = self.db.query(ContentFieldModel).filter(ContentFieldModel.id == field_id).first()
        if field is None or field.content_type.deleted_at is not None:
            raise NotFoundError("field", field_id)
        return field

    def add_field(self, content_type_id: str, data: FieldCreate) -> ContentFieldModel:
        content_type = self.get(content_type_id)
        field = self._append_field(content_type, data)
        self.db.commit()
        self.db.refresh(field)
        logger.info(
            "content_type.field_added",
            content_type_id=content_type.id,
            field=field.name,
            type=field.type,
            is_seo=field.is_seo,
        )
        return field

    def update_field(self, field_id: str, data: FieldUpdate) -> ContentFieldModel:
        field = self.get_field(field_id)
        changes = data.model_dump(exclude_unset=True)

        new_name = changes.get("name")
        if new_name and new_name != field.name:
            self._ensure_unique_name(field.content_type, new_name)

        for key, value in changes.items():
            if key in ("name", "type", "required", "unique", "is_seo") and value is None:
                continue
            if isinstance(value, FieldType):
                value = value.value
            setattr(field, _FIELD_COLUMNS.get(key, key), value)

        try:
            _check_definition(field.to_definition())
        except Exception:
            self.db.rollback()
            raise
        if field.is_seo:
            field.content_type.enable_seo = True

        self.db.commit()
        self.db.refresh(field)
        logger.info("content_type.field_updated", field_id=field.id, changed=sorted(changes))
        return field

    def delete_field(self, field_id: str) -> None:
        field = self.get_field(field_id)
        content_type_id = field.content_type_id
        self.db.delete(field)
        self.db.commit()
        logger.info("content_type.field_deleted", content_type_id=content_type_id, field_id=field_id)

    def field_validation_rules(self, field_id: str) -> Dict[str, Any]:
        return self.get_field(field_id).to_definition().validation_rules()

    def _ensure_unique_name(self, content_type: ContentTypeModel, name: str) -> None:
        if any(existing.name == name for existing in content_type.fields):
            raise ConflictError(
                f"field '{name}' already exists on content type '{content_type.slug}'",
                field=name,
            )

    def _append_field(
        self, content_type: ContentTypeModel, data: FieldCreate
    ) -> ContentFieldModel:
        self._ensure_unique_name(content_type, data.name)
        try:
            definition = FieldDefinition(**data.model_dump())
        except ValidationError as exc:
            raise ConstraintViolationError(data.name, str(exc)) from exc
        _check_definition(definition)

        field = ContentFieldModel(
            name=definition.name,
            type=definition.type.value,
            required=definition.required,
            is_unique=definition.unique,
            is_seo=definition.is_seo,
            position=len(content_type.fields),
            min_length=definition.min_length,
            max_length=definition.max_length,
            pattern=definition.pattern,
            min_value=definition.min_value,
            max_value=definition.max_value,
            default_value=definition.default_value,
            placeholder=definition.placeholder,
            help_text=definition.help_text,
        )
        content_type.fields.append(field)
        if definition.is_seo:
            content_type.enable_seo = True
        self.db.flush()
        return field
