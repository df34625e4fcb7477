"""
Field validation engine.
"""

from .fields import FieldValidator, UniquenessChecker, check_value, coerce_default

__all__ = ["FieldValidator", "UniquenessChecker", "check_value", "coerce_default"]
