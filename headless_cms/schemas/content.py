"""
Request bodies for content types, fields, entries, relations and media.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..schema.registry import FieldType


class FieldCreate(BaseModel):
    """Definition of a new field on a content type."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    type: FieldType
    required: bool = False
    unique: bool = False
    is_seo: bool = False
    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=0)
    pattern: Optional[str] = Field(None, max_length=255)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    default_value: Optional[str] = Field(None, max_length=500)
    placeholder: Optional[str] = Field(None, max_length=255)
    help_text: Optional[str] = Field(None, max_length=500)


class FieldUpdate(BaseModel):
    """Partial update of a field; only set attributes are applied."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[FieldType] = None
    required: Optional[bool] = None
    unique: Optional[bool] = None
    is_seo: Optional[bool] = None
    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=0)
    pattern: Optional[str] = Field(None, max_length=255)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    default_value: Optional[str] = Field(None, max_length=500)
    placeholder: Optional[str] = Field(None, max_length=255)
    help_text: Optional[str] = Field(None, max_length=500)


class ContentTypeCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100)
    enable_seo: bool = False
    fields: List[FieldCreate] = Field(default_factory=list)


class ContentTypeUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    enable_seo: Optional[bool] = None


class EntryWrite(BaseModel):
    """An entry payload: an open map of field name to value."""

    data: Dict[str, Any] = Field(default_factory=dict)


class RelationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    to_entry_id: str = Field(..., min_length=1)
    relation_type: str = Field(..., min_length=1, max_length=50)


class MediaRegister(BaseModel):
    """Metadata of a file already written by the file store."""

    model_config = ConfigDict(extra="forbid")

    file_name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=500)
    mime_type: Optional[str] = Field(None, max_length=100)
    size: int = Field(0, ge=0)
    folder: Optional[str] = Field(None, max_length=255)
    alt: Optional[str] = Field(None, max_length=255)
    caption: Optional[str] = None
