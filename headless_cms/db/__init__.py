"""
Database package for the Headless CMS.
"""

from .base import Base, get_db, get_engine, init_database
from .models import (
    ContentEntryModel,
    ContentFieldModel,
    ContentRelationModel,
    ContentTypeModel,
    MediaFileModel,
    PermissionModel,
    RoleModel,
    UserModel,
    WorkflowAssignmentModel,
    WorkflowCommentModel,
    WorkflowHistoryModel,
    WorkflowTransitionModel,
)
from .repository import ContentRepository

__all__ = [
    "Base",
    "get_db",
    "get_engine",
    "init_database",
    "ContentRepository",
    "ContentEntryModel",
    "ContentFieldModel",
    "ContentRelationModel",
    "ContentTypeModel",
    "MediaFileModel",
    "PermissionModel",
    "RoleModel",
    "UserModel",
    "WorkflowAssignmentModel",
    "WorkflowCommentModel",
    "WorkflowHistoryModel",
    "WorkflowTransitionModel",
]
