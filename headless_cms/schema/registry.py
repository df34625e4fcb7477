"""
Schema Registry primitives.

A content type's fields are runtime data: a declared type tag plus a bag of
optional constraints. ``ContentSchema`` is the immutable snapshot handed to the
validator and the permission resolver; it is rebuilt from storage for every
operation.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class FieldType(str, Enum):
    """Closed set of declared field types."""

    STRING = "string"
    TEXT = "text"
    EMAIL = "email"
    URL = "url"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    MEDIA = "media"


TEXTUAL_TYPES = frozenset({FieldType.STRING, FieldType.TEXT})


class FieldDefinition(BaseModel):
    """A single typed field of a content type."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    type: FieldType
    required: bool = False
    unique: bool = False
    is_seo: bool = False

    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=0)
    pattern: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    default_value: Optional[str] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None

    def validation_rules(self) -> Dict[str, Any]:
        """Describe the configured rules of this field."""
        rules: Dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
            "unique": self.unique,
        }
        if self.min_length is not None:
            rules["min_length"] = self.min_length
        if self.max_length is not None:
            rules["max_length"] = self.max_length
        if self.pattern:
            rules["pattern"] = self.pattern
        if self.min_value is not None:
            rules["min_value"] = self.min_value
        if self.max_value is not None:
            rules["max_value"] = self.max_value
        if self.default_value:
            rules["default"] = self.default_value
        if self.placeholder:
            rules["placeholder"] = self.placeholder
        if self.help_text:
            rules["help_text"] = self.help_text
        return rules


class ContentSchema(BaseModel):
    """Immutable snapshot of a content type and its ordered fields."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str
    enable_seo: bool = False
    fields: Tuple[FieldDefinition, ...] = ()

    @property
    def regular_fields(self) -> List[FieldDefinition]:
        return [f for f in self.fields if not f.is_seo]

    @property
    def seo_fields(self) -> List[FieldDefinition]:
        return [f for f in self.fields if f.is_seo]

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> Optional[FieldDefinition]:
        """Look up a field by name."""
        for definition in self.fields:
            if definition.name == name:
                return definition
        return None


def is_valid_slug(value: str) -> bool:
    return bool(SLUG_PATTERN.fullmatch(value))
