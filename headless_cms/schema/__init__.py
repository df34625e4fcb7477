"""
Schema Registry: runtime content types and field definitions.
"""

from .registry import ContentSchema, FieldDefinition, FieldType, is_valid_slug

__all__ = ["ContentSchema", "FieldDefinition", "FieldType", "is_valid_slug"]
