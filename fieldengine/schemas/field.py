"""Pydantic schemas for custom field definitions."""
from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fieldengine.models.field import FieldType

KEY_PATTERN = re.compile(r"[a-z][a-z0-9_]*")

ModuleName = Annotated[str, Field(min_length=1, max_length=50)]
Label = Annotated[str, Field(min_length=1, max_length=255)]
ShortText = Annotated[str, Field(max_length=255)]

JSON_PAYLOAD_FIELDS = ("config", "dependencies", "validation_rules")


def dump_json_payload(value: Any) -> Any:
    """Store structured payloads as JSON text; strings are kept verbatim."""

    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


def validate_field_key(value: str) -> str:
    if not KEY_PATTERN.fullmatch(value):
        msg = "Key must be lowercase letters, digits and underscores, starting with a letter"
        raise ValueError(msg)
    return value


class FieldDefinitionBase(BaseModel):
    label_en: Label
    label_ar: ShortText | None = None
    field_type: FieldType
    config: str | None = None
    dependencies: str | None = None
    validation_rules: str | None = None
    is_required: bool = False
    show_in_admin: bool = True
    show_in_user_form: bool = True
    display_order: int = 0
    help_text_en: str | None = None
    help_text_ar: str | None = None
    placeholder_en: ShortText | None = None
    placeholder_ar: ShortText | None = None

    @field_validator(*JSON_PAYLOAD_FIELDS, mode="before")
    @classmethod
    def serialize_payloads(cls, value: Any) -> Any:
        return dump_json_payload(value)


class FieldDefinitionPayload(FieldDefinitionBase):
    """A definition without its module, as carried by templates."""

    field_key: Annotated[str, Field(min_length=1, max_length=100)]

    @field_validator("field_key")
    @classmethod
    def validate_key(cls, value: str) -> str:
        return validate_field_key(value)


class FieldDefinitionCreate(FieldDefinitionPayload):
    module: ModuleName


class FieldDefinitionUpdate(BaseModel):
    """Partial update; ``module`` and ``field_key`` are immutable."""

    model_config = ConfigDict(extra="forbid")

    label_en: Label | None = None
    label_ar: ShortText | None = None
    field_type: FieldType | None = None
    config: str | None = None
    dependencies: str | None = None
    validation_rules: str | None = None
    is_required: bool | None = None
    show_in_admin: bool | None = None
    show_in_user_form: bool | None = None
    display_order: int | None = None
    help_text_en: str | None = None
    help_text_ar: str | None = None
    placeholder_en: ShortText | None = None
    placeholder_ar: ShortText | None = None

    @field_validator(*JSON_PAYLOAD_FIELDS, mode="before")
    @classmethod
    def serialize_payloads(cls, value: Any) -> Any:
        return dump_json_payload(value)


class FieldDefinitionRead(FieldDefinitionBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module: str
    field_key: str
    created_at: datetime
    updated_at: datetime


class ModuleStats(BaseModel):
    fields: int = 0
    values: int = 0


class FieldStats(BaseModel):
    total_fields: int
    total_values: int
    by_module: dict[str, ModuleStats]
