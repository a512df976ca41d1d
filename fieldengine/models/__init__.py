"""Database models package for the custom fields engine."""

from .base import Base
from .field import FieldDefinition, FieldType, FieldValue
from .template import FieldTemplate

__all__ = [
    "Base",
    "FieldDefinition",
    "FieldTemplate",
    "FieldType",
    "FieldValue",
]
