"""Pydantic schemas for the custom fields engine."""

from .field import (
    FieldDefinitionCreate,
    FieldDefinitionPayload,
    FieldDefinitionRead,
    FieldDefinitionUpdate,
    FieldStats,
    ModuleStats,
)
from .render import RenderedField
from .template import (
    ApplyResult,
    ApplyTemplateRequest,
    FieldTemplateCreate,
    FieldTemplateRead,
    FieldTemplateUpdate,
)
from .value import (
    FieldError,
    FieldValueInput,
    FieldValueRead,
    Language,
    RenderContext,
    SubmitPayload,
    SubmitResult,
)

__all__ = [
    "ApplyResult",
    "ApplyTemplateRequest",
    "FieldDefinitionCreate",
    "FieldDefinitionPayload",
    "FieldDefinitionRead",
    "FieldDefinitionUpdate",
    "FieldError",
    "FieldStats",
    "FieldTemplateCreate",
    "FieldTemplateRead",
    "FieldTemplateUpdate",
    "FieldValueInput",
    "FieldValueRead",
    "Language",
    "ModuleStats",
    "RenderContext",
    "RenderedField",
    "SubmitPayload",
    "SubmitResult",
]
