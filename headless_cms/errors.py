"""
Error taxonomy for the Headless CMS.

Every failure carries a stable ``code`` for programmatic handling and an HTTP
``status_code`` used by the API boundary. Errors are scoped to the single
operation that raised them.
"""

from typing import Any, Dict, Optional


class CMSError(Exception):
    """
    Base class for all domain errors.

    Attributes:
        code: Stable error code for programmatic handling
        message: Human-readable error description
        details: Extra key/value context (field name, ids, ...)
    """

    code = "CMS_ERROR"
    status_code = 400

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(f"{self.code}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        payload: Dict[str, Any] = {
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class FieldError(CMSError):
    """A field-level validation failure."""

    status_code = 422

    def __init__(self, field: str, message: str, **details: Any):
        self.field = field
        super().__init__(message, field=field, **details)


class MissingRequiredError(FieldError):
    code = "MISSING_REQUIRED"

    def __init__(self, field: str):
        super().__init__(field, f"field '{field}' is required")


class TypeMismatchError(FieldError):
    code = "TYPE_MISMATCH"

    def __init__(self, field: str, expected: str):
        self.expected = expected
        super().__init__(field, f"field '{field}' must be {expected}", expected=expected)


class ConstraintViolationError(FieldError):
    code = "CONSTRAINT_VIOLATION"

    def __init__(self, field: str, message: str, constraint: Optional[str] = None):
        self.constraint = constraint
        if constraint:
            super().__init__(field, message, constraint=constraint)
        else:
            super().__init__(field, message)


class DuplicateValueError(FieldError):
    code = "DUPLICATE_VALUE"
    status_code = 409

    def __init__(self, field: str, value: Any):
        self.value = value
        super().__init__(
            field,
            f"field '{field}' must be unique, value '{value}' already exists",
        )


class UnknownFieldError(FieldError):
    code = "UNKNOWN_FIELD"

    def __init__(self, field: str):
        super().__init__(field, f"field '{field}' does not exist in content type")


class NoPermissionError(CMSError):
    code = "NO_PERMISSION"
    status_code = 403


class InvalidTransitionError(CMSError):
    """Raised when a workflow status transition is not allowed."""

    code = "INVALID_TRANSITION"
    status_code = 409

    def __init__(
        self,
        from_status: str,
        to_status: str,
        role: Optional[str] = None,
        reason: str = "",
    ):
        self.from_status = from_status
        self.to_status = to_status
        self.role = role
        msg = f"invalid status transition from {from_status} to {to_status}"
        if role:
            msg += f" for role {role}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, from_status=from_status, to_status=to_status, role=role)


class NotFoundError(CMSError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, kind: str, object_id: Any = None):
        self.kind = kind
        self.object_id = object_id
        super().__init__(f"{kind} not found", kind=kind, id=object_id)


class ConflictError(CMSError):
    """The operation conflicts with the current persisted state."""

    code = "CONFLICT"
    status_code = 409


class UniquenessCheckError(CMSError):
    """
    The uniqueness query itself failed.

    This is an infrastructure failure and never means "not a duplicate".
    """

    code = "UNIQUENESS_CHECK_FAILED"
    status_code = 503

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"failed to check uniqueness for field '{field}'", field=field)
