"""Per-type checks and option handling for custom field values."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError, model_validator

from fieldengine.models import FieldType

logger = logging.getLogger(__name__)

BOOLEAN_VALUES = {"true", "false"}
MULTI_SELECT_SEPARATOR = ","


class FieldOption(BaseModel):
    value: str
    label: str = ""

    @model_validator(mode="after")
    def default_label(self) -> "FieldOption":
        if not self.label:
            self.label = self.value
        return self


_options_adapter = TypeAdapter(list[FieldOption])


def parse_options(config: str | Mapping[str, Any] | None) -> list[FieldOption] | None:
    """Return the ordered options of a dropdown config, or ``None`` if unknown."""

    if config is None:
        return None
    data: Any = config
    if isinstance(config, str):
        if not config.strip():
            return None
        try:
            data = json.loads(config)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring unparseable field config", extra={"error": str(exc)})
            return None
    if not isinstance(data, Mapping) or "options" not in data:
        return None
    try:
        return _options_adapter.validate_python(data["options"])
    except ValidationError as exc:
        logger.warning(
            "Ignoring malformed dropdown options",
            extra={"error": exc.errors(include_url=False)},
        )
        return None


def normalize_value(
    field_type: FieldType, value: str, options: list[FieldOption] | None = None
) -> str:
    """Check a submitted value against its field type and return the stored form."""

    match field_type:
        case FieldType.TEXT | FieldType.TEXTAREA | FieldType.COUNTRY:
            return value
        case FieldType.EMAIL | FieldType.PHONE | FieldType.URL:
            return value.strip()
        case FieldType.FILE:
            return value
        case FieldType.NUMBER:
            return _normalize_number(value)
        case FieldType.DATE:
            return _normalize_date(value)
        case FieldType.DATETIME:
            return _normalize_datetime(value)
        case FieldType.BOOLEAN:
            return _normalize_bool(value)
        case FieldType.DROPDOWN:
            return _normalize_dropdown(value, options)
        case FieldType.MULTI_SELECT:
            return _normalize_multi_select(value, options)
    raise ValueError(f"Unsupported field type: {field_type}")  # pragma: no cover


def split_multi_select(stored: str | None) -> list[str]:
    if not stored:
        return []
    return [item.strip() for item in stored.split(MULTI_SELECT_SEPARATOR) if item.strip()]


def _normalize_number(value: str) -> str:
    cleaned = value.strip()
    try:
        number = Decimal(cleaned)
    except InvalidOperation as exc:
        msg = "Number fields require numeric input"
        raise ValueError(msg) from exc
    if not number.is_finite():
        msg = "Number fields require numeric input"
        raise ValueError(msg)
    return cleaned


def _normalize_date(value: str) -> str:
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError as exc:
        msg = "Date fields require ISO 8601 date strings"
        raise ValueError(msg) from exc


def _normalize_datetime(value: str) -> str:
    cleaned = value.strip()
    try:
        datetime.fromisoformat(cleaned)
    except ValueError as exc:
        msg = "Datetime fields require ISO 8601 date-time strings"
        raise ValueError(msg) from exc
    return cleaned


def _normalize_bool(value: str) -> str:
    lowered = value.strip().lower()
    if lowered not in BOOLEAN_VALUES:
        msg = "Boolean fields accept true/false"
        raise ValueError(msg)
    return lowered


def _normalize_dropdown(value: str, options: list[FieldOption] | None) -> str:
    if options is None:
        return value
    if value not in {option.value for option in options}:
        msg = "Value must be one of the available options"
        raise ValueError(msg)
    return value


def _normalize_multi_select(value: str, options: list[FieldOption] | None) -> str:
    allowed = {option.value for option in options} if options is not None else None
    selected: list[str] = []
    for item in split_multi_select(value):
        if allowed is not None and item not in allowed:
            msg = "Value must be one of the available options"
            raise ValueError(msg)
        if item not in selected:
            selected.append(item)
    return MULTI_SELECT_SEPARATOR.join(selected)
