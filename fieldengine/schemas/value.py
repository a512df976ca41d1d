"""Pydantic schemas for stored field values and form submissions."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

Language = Literal["en", "ar"]
RenderContext = Literal["admin", "user"]


class FieldValueInput(BaseModel):
    field_id: int
    value: str | None = None
    file_url: Annotated[str, Field(max_length=500)] | None = None
    file_name: Annotated[str, Field(max_length=255)] | None = None

    @property
    def has_data(self) -> bool:
        return bool(self.value and self.value.strip()) or bool(self.file_url)


class FieldValueRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    field_id: int
    module: str
    record_id: int
    value: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    updated_at: datetime


class SubmitPayload(BaseModel):
    values: list[FieldValueInput] = Field(default_factory=list)
    context: RenderContext = "user"
    language: Language | None = None


class FieldError(BaseModel):
    field_id: int
    field_key: str | None = None
    message: str


class SubmitResult(BaseModel):
    saved_field_ids: list[int] = Field(default_factory=list)
    errors: list[FieldError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
