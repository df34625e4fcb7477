"""
Media file records and ``<field>_media_id`` reference resolution.

Files themselves are written by an external store; this service only records
the resulting URL and swaps media ids for URLs before validation.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import structlog
from sqlalchemy.orm import Session

from ..db.models import MediaFileModel
from ..db.repository import ContentRepository
from ..errors import NotFoundError, UnknownFieldError
from ..schema.registry import ContentSchema, FieldType
from ..schemas.content import MediaRegister
from ..validation.fields import MEDIA_ID_SUFFIX, is_empty

logger = structlog.get_logger(__name__)


class MediaService:
    """Service for registered media files."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContentRepository(db)

    def register(self, data: MediaRegister, uploaded_by: Optional[str] = None) -> MediaFileModel:
        media = MediaFileModel(
            file_name=data.file_name,
            url=data.url,
            mime_type=data.mime_type,
            size=data.size,
            folder=data.folder,
            alt=data.alt,
            caption=data.caption,
            uploaded_by=uploaded_by,
        )
        self.db.add(media)
        self.db.commit()
        self.db.refresh(media)
        logger.info("media.registered", media_id=media.id, mime_type=media.mime_type)
        return media

    def get(self, media_id: str) -> MediaFileModel:
        media = self.repo.find_media(media_id)
        if media is None:
            raise NotFoundError("media", media_id)
        return media

    def resolve_references(
        self, schema: ContentSchema, submitted: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """
        Replace each ``<field>_media_id`` key with the stored URL under ``<field>``.

        A key that is itself a schema field is an ordinary value. The id key is
        never kept. An id for a field that is not a media field raises
        UnknownFieldError; an unknown id raises NotFoundError.
        """
        resolved: Dict[str, Any] = {}
        references: Dict[str, Any] = {}
        for key, value in submitted.items():
            if key.endswith(MEDIA_ID_SUFFIX) and schema.field(key) is None:
                references[key] = value
            else:
                resolved[key] = value

        for key, media_id in references.items():
            name = key[: -len(MEDIA_ID_SUFFIX)]
            field = schema.field(name)
            if field is None or field.type != FieldType.MEDIA:
                raise UnknownFieldError(key)
            if is_empty(media_id):
                continue
            resolved[name] = self.get(str(media_id)).url

        return resolved
