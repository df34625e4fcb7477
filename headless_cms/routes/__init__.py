"""
FastAPI routers.
"""

from .content import router as content_router
from .media import router as media_router
from .roles import router as roles_router
from .workflow import router as workflow_router

__all__ = ["content_router", "media_router", "roles_router", "workflow_router"]
