"""Pydantic schemas for field templates."""
from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fieldengine.schemas.field import FieldDefinitionPayload, ModuleName


class FieldTemplateCreate(BaseModel):
    module: ModuleName
    name_en: Annotated[str, Field(min_length=1, max_length=255)]
    name_ar: Annotated[str, Field(max_length=255)] | None = None
    description_en: str | None = None
    description_ar: str | None = None
    fields: list[FieldDefinitionPayload] = Field(default_factory=list)


class FieldTemplateUpdate(BaseModel):
    """Partial update; ``module`` and ``is_system`` cannot change."""

    model_config = ConfigDict(extra="forbid")

    name_en: Annotated[str, Field(min_length=1, max_length=255)] | None = None
    name_ar: Annotated[str, Field(max_length=255)] | None = None
    description_en: str | None = None
    description_ar: str | None = None
    fields: list[FieldDefinitionPayload] | None = None
    is_active: bool | None = None


class FieldTemplateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module: str
    name_en: str
    name_ar: str | None = None
    description_en: str | None = None
    description_ar: str | None = None
    fields: list[dict[str, Any]] = Field(default_factory=list)
    is_system: bool
    is_active: bool
    created_at: datetime

    @field_validator("fields", mode="before")
    @classmethod
    def load_fields(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                return []
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


class ApplyTemplateRequest(BaseModel):
    target_module: ModuleName | None = None


class ApplyResult(BaseModel):
    module: str
    created_count: int = 0
    skipped_count: int = 0
    rejected_count: int = 0
    created_field_ids: list[int] = Field(default_factory=list)
