"""
Headless CMS

Runtime-defined content schemas, field-level permissions and an editorial
approval workflow.
"""

import importlib.metadata

__version__ = importlib.metadata.version("headless-cms")

from .errors import (
    CMSError,
    ConflictError,
    ConstraintViolationError,
    DuplicateValueError,
    InvalidTransitionError,
    MissingRequiredError,
    NoPermissionError,
    NotFoundError,
    TypeMismatchError,
    UniquenessCheckError,
    UnknownFieldError,
)

__all__ = [
    "CMSError",
    "ConflictError",
    "ConstraintViolationError",
    "DuplicateValueError",
    "InvalidTransitionError",
    "MissingRequiredError",
    "NoPermissionError",
    "NotFoundError",
    "TypeMismatchError",
    "UniquenessCheckError",
    "UnknownFieldError",
]
