"""
Typed links between content entries.
"""

from __future__ import annotations

from typing import List

import structlog
from sqlalchemy.orm import Session

from ..db.models import ContentRelationModel
from ..db.repository import ContentRepository
from ..errors import NotFoundError
from ..schemas.content import RelationCreate

logger = structlog.get_logger(__name__)


class RelationService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ContentRepository(db)

    def create(self, from_entry_id: str, data: RelationCreate) -> ContentRelationModel:
        """Link two existing entries."""
        for entry_id in (from_entry_id, data.to_entry_id):
            if self.repo.find_entry(entry_id) is None:
                raise NotFoundError("entry", entry_id)

        relation = ContentRelationModel(
            from_entry_id=from_entry_id,
            to_entry_id=data.to_entry_id,
            relation_type=data.relation_type,
        )
        self.db.add(relation)
        self.db.commit()
        self.db.refresh(relation)
        logger.info(
            "relation.created",
            relation_id=relation.id,
            from_entry_id=from_entry_id,
            to_entry_id=data.to_entry_id,
            relation_type=data.relation_type,
        )
        return relation

    def list_for(self, from_entry_id: str) -> List[ContentRelationModel]:
        if self.repo.find_entry(from_entry_id) is None:
            raise NotFoundError("entry", from_entry_id)
        return (
            self.db.query(ContentRelationModel)
            .filter(ContentRelationModel.from_entry_id == from_entry_id)
            .order_by(ContentRelationModel.created_at, ContentRelationModel.id)
            .all()
        )

    def delete(self, relation_id: str) -> None:
        relation = (
            self.db.query(ContentRelationModel)
            .filter(ContentRelationModel.id == relation_id)
            .first()
        )
        if relation is None:
            raise NotFoundError("relation", relation_id)
        self.db.delete(relation)
        self.db.commit()
        logger.info("relation.deleted", relation_id=relation_id)
