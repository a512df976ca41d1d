"""Render contract handed to the UI layer."""
from __future__ import annotations

from pydantic import BaseModel

from fieldengine.schemas.field import FieldDefinitionRead
from fieldengine.schemas.value import FieldValueRead
from fieldengine.services.field_types import FieldOption


class RenderedField(BaseModel):
    definition: FieldDefinitionRead
    current_value: FieldValueRead | None = None
    is_visible: bool = True
    label: str
    help_text: str | None = None
    placeholder: str | None = None
    options: list[FieldOption] | None = None
