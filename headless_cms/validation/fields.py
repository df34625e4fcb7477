"""
Data-driven field validation.

The validator dispatches on each field's declared type tag and enforces the
constraints configured on the field definition. It has no database access:
uniqueness is delegated to a ``UniquenessChecker`` supplied by the caller.

Rules:
- absent, None or "" counts as empty
- empty and required -> MissingRequiredError
- empty and optional -> default injected (coerced to the declared type) or skipped
- string/text lengths count characters, not bytes
- a field named ``slug`` must always be a lowercase hyphenated slug
- numbers accept finite int and float but never bool; ranges are inclusive
- url/media accept an absolute URL with a scheme or an absolute path
"""

from __future__ import annotations

import math
import re
from datetime import date
from typing import Any, Callable, Dict, Mapping, Optional, Protocol
from urllib.parse import urlsplit

from ..errors import (
    ConstraintViolationError,
    DuplicateValueError,
    MissingRequiredError,
    TypeMismatchError,
    UnknownFieldError,
)
from ..schema.registry import SLUG_PATTERN, ContentSchema, FieldDefinition, FieldType

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MEDIA_ID_SUFFIX = "_media_id"

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


class UniquenessChecker(Protocol):
    def count_entries_where(
        self,
        content_type_id: str,
        field_name: str,
        value: Any,
        exclude_id: Optional[str] = None,
    ) -> int: ...


def is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def is_request_uri(value: str) -> bool:
    """Accept an absolute URL with a scheme, or an absolute path."""
    if not value or any(ch.isspace() for ch in value):
        return False
    if value.startswith("/"):
        return True
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


def coerce_default(field: FieldDefinition) -> Any:
    """Convert a stored default string to the field's declared type."""
    raw = field.default_value
    if raw is None:
        return None
    if field.type == FieldType.NUMBER:
        try:
            return int(raw)
        except ValueError:
            pass
        try:
            return float(raw)
        except ValueError:
            return raw
    if field.type == FieldType.BOOLEAN:
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return raw


def _check_text(field: FieldDefinition, value: Any) -> None:
    if not isinstance(value, str):
        raise TypeMismatchError(field.name, "a string")

    length = len(value)
    if field.min_length is not None and length < field.min_length:
        raise ConstraintViolationError(
            field.name,
            f"field '{field.name}' must be at least {field.min_length} characters",
            constraint="min_length",
        )
    if field.max_length is not None and length > field.max_length:
        raise ConstraintViolationError(
            field.name,
            f"field '{field.name}' must be at most {field.max_length} characters",
            constraint="max_length",
        )
    if field.pattern:
        try:
            matched = re.search(field.pattern, value)
        except re.error as exc:
            raise ConstraintViolationError(
                field.name,
                f"field '{field.name}' has an invalid pattern: {exc}",
                constraint="pattern",
            ) from exc
        if not matched:
            raise ConstraintViolationError(
                field.name,
                f"field '{field.name}' does not match required pattern",
                constraint="pattern",
            )
    if field.name == "slug" and not SLUG_PATTERN.fullmatch(value):
        raise ConstraintViolationError(
            field.name,
            "slug must contain only lowercase letters, numbers, and hyphens",
            constraint="slug",
        )


def _check_email(field: FieldDefinition, value: Any) -> None:
    if not isinstance(value, str):
        raise TypeMismatchError(field.name, "a string")
    if not EMAIL_PATTERN.fullmatch(value):
        raise ConstraintViolationError(
            field.name, f"field '{field.name}' must be a valid email", constraint="email"
        )


def _check_url(field: FieldDefinition, value: Any) -> None:
    if not isinstance(value, str):
        raise TypeMismatchError(field.name, "a string")
    if not is_request_uri(value):
        raise ConstraintViolationError(
            field.name, f"field '{field.name}' must be a valid URL", constraint="url"
        )


def _check_number(field: FieldDefinition, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatchError(field.name, "a number")

    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise ConstraintViolationError(
            field.name, f"field '{field.name}' must be a finite number", constraint="finite"
        )
    if field.min_value is not None and number < field.min_value:
        raise ConstraintViolationError(
            field.name,
            f"field '{field.name}' must be at least {field.min_value:g}",
            constraint="min_value",
        )
    if field.max_value is not None and number > field.max_value:
        raise ConstraintViolationError(
            field.name,
            f"field '{field.name}' must be at most {field.max_value:g}",
            constraint="max_value",
        )


def _check_boolean(field: FieldDefinition, value: Any) -> None:
    if not isinstance(value, bool):
        raise TypeMismatchError(field.name, "a boolean")


def _check_date(field: FieldDefinition, value: Any) -> None:
    if not isinstance(value, str):
        raise TypeMismatchError(field.name, "a date string")
    if not DATE_PATTERN.fullmatch(value):
        raise ConstraintViolationError(
            field.name,
            f"field '{field.name}' must be a valid date (YYYY-MM-DD)",
            constraint="date",
        )
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise ConstraintViolationError(
            field.name,
            f"field '{field.name}' must be a valid date (YYYY-MM-DD)",
            constraint="date",
        ) from exc


def _check_media(field: FieldDefinition, value: Any) -> None:
    if not isinstance(value, str):
        raise TypeMismatchError(field.name, "a media URL")
    if not is_request_uri(value):
        raise ConstraintViolationError(
            field.name, f"field '{field.name}' must be a valid media URL", constraint="media"
        )


TYPE_CHECKS: Dict[FieldType, Callable[[FieldDefinition, Any], None]] = {
    FieldType.STRING: _check_text,
    FieldType.TEXT: _check_text,
    FieldType.EMAIL: _check_email,
    FieldType.URL: _check_url,
    FieldType.NUMBER: _check_number,
    FieldType.BOOLEAN: _check_boolean,
    FieldType.DATE: _check_date,
    FieldType.MEDIA: _check_media,
}


def check_value(field: FieldDefinition, value: Any) -> None:
    """Type-check and constrain a single non-empty value."""
    TYPE_CHECKS[field.type](field, value)


class FieldValidator:
    """Validate entry payloads against a ContentSchema."""

    def __init__(self, uniqueness: Optional[UniquenessChecker] = None):
        self.uniqueness = uniqueness

    def validate(self, schema: ContentSchema, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate a complete payload and return it with defaults injected.

        Raises the first FieldError encountered.
        """
        result = dict(data)
        self._reject_unknown(schema, result)

        for field in schema.fields:
            value = result.get(field.name)
            if is_empty(value):
                if field.required:
                    raise MissingRequiredError(field.name)
                if field.default_value is not None and field.default_value != "":
                    result[field.name] = coerce_default(field)
                continue

            check_value(field, value)
            self._check_unique(schema, field, value, exclude_id=None)

        return result

    def validate_partial(
        self,
        schema: ContentSchema,
        data: Mapping[str, Any],
        exclude_entry_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Validate the fields present in a partial update.

        Omitted required fields are fine; present-but-empty required fields and
        unknown names are not. Uniqueness excludes ``exclude_entry_id``.
        """
        result = dict(data)
        self._reject_unknown(schema, result)

        for name, value in result.items():
            field = schema.field(name)
            if is_empty(value):
                if field.required:
                    raise MissingRequiredError(name)
                continue

            check_value(field, value)
            self._check_unique(schema, field, value, exclude_id=exclude_entry_id)

        return result

    @staticmethod
    def _reject_unknown(schema: ContentSchema, data: Mapping[str, Any]) -> None:
        known = set(schema.field_names)
        for name in data:
            if name not in known:
                raise UnknownFieldError(name)

    def _check_unique(
        self,
        schema: ContentSchema,
        field: FieldDefinition,
        value: Any,
        exclude_id: Optional[str],
    ) -> None:
        if not field.unique or self.uniqueness is None:
            return
        count = self.uniqueness.count_entries_where(
            schema.id, field.name, value, exclude_id
        )
        if count > 0:
            raise DuplicateValueError(field.name, value)
