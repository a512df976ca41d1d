"""Composition of definitions, values and rule evaluation for one record.

``evaluate`` produces the render contract for the UI layer: the ordered,
context-filtered, visible fields with their current values attached.
``submit`` checks each submitted value on its own and persists the ones that
pass, so one invalid field never blocks the others.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from fieldengine.models import FieldDefinition, FieldValue
from fieldengine.schemas import (
    FieldDefinitionRead,
    FieldError,
    FieldValueInput,
    FieldValueRead,
    RenderContext,
    RenderedField,
    SubmitResult,
)
from fieldengine.services.definitions import FieldDefinitionStore
from fieldengine.services.dependencies import DependencyRule, is_visible, parse_dependency
from fieldengine.services.field_types import FieldOption, normalize_value, parse_options
from fieldengine.services.validation import ParsedRules, parse_validation_rules, validate
from fieldengine.services.values import FieldValueStore

logger = logging.getLogger(__name__)

REQUIRED_MESSAGES = {
    "en": "This field is required",
    "ar": "هذا الحقل مطلوب",
}
UNKNOWN_FIELD_MESSAGE = "Unknown field"
NOT_EDITABLE_MESSAGE = "Field is not editable in this context"


@dataclass(frozen=True)
class CompiledField:
    """A definition with its JSON payloads parsed once."""

    definition: FieldDefinition
    dependency: DependencyRule | None
    rules: ParsedRules | None
    options: list[FieldOption] | None

    @classmethod
    def from_definition(cls, definition: FieldDefinition) -> "CompiledField":
        return cls(
            definition=definition,
            dependency=parse_dependency(definition.dependencies),
            rules=parse_validation_rules(definition.validation_rules),
            options=parse_options(definition.config),
        )

    def shown_in(self, context: RenderContext) -> bool:
        if context == "admin":
            return self.definition.show_in_admin
        return self.definition.show_in_user_form


class FieldOrchestrator:
    """Single entry point used by the API layer for dynamic forms."""

    def __init__(self, session: AsyncSession, *, default_language: str = "en") -> None:
        self.definitions = FieldDefinitionStore(session)
        self.values = FieldValueStore(session)
        self.default_language = default_language

    async def compile_module(self, module: str) -> list[CompiledField]:
        definitions = await self.definitions.list_by_module(module)
        return [CompiledField.from_definition(definition) for definition in definitions]

    async def evaluate(
        self,
        module: str,
        record_id: int | None,
        context: RenderContext = "user",
        language: str | None = None,
    ) -> list[RenderedField]:
        """Return the visible fields of ``module`` for a record, in display order."""

        language = language or self.default_language
        compiled = await self.compile_module(module)
        stored = await self._stored_values(module, record_id)
        siblings = _sibling_values(compiled, stored)

        rendered: list[RenderedField] = []
        for field in compiled:
            if not field.shown_in(context):
                continue
            if not is_visible(field.dependency, siblings):
                continue
            rendered.append(_render(field, stored.get(field.definition.id), language))

        logger.debug(
            "Evaluated dynamic fields",
            extra={
                "field_module": module,
                "record_id": record_id,
                "render_context": context,
                "rendered": len(rendered),
                "defined": len(compiled),
            },
        )
        return rendered

    async def submit(
        self,
        module: str,
        record_id: int,
        values: Iterable[FieldValueInput],
        context: RenderContext = "user",
        language: str | None = None,
    ) -> SubmitResult:
        """Validate each value independently and persist the ones that pass."""

        language = language or self.default_language
        compiled = await self.compile_module(module)
        by_id = {field.definition.id: field for field in compiled}
        stored = await self._stored_values(module, record_id)
        submitted = [item for item in values if item.has_data]

        result = SubmitResult()
        accepted: list[FieldValueInput] = []
        emptied: set[int] = set()
        for item in submitted:
            field = by_id.get(item.field_id)
            if field is None:
                result.errors.append(
                    FieldError(field_id=item.field_id, message=UNKNOWN_FIELD_MESSAGE)
                )
                continue
            if not field.shown_in(context):
                result.errors.append(_field_error(field, NOT_EDITABLE_MESSAGE))
                continue

            message, checked = _check_value(field, item, language)
            if message is not None:
                result.errors.append(_field_error(field, message))
                continue
            # e.g. a multi-select of only separators normalizes to nothing
            if not checked.has_data:
                emptied.add(item.field_id)
                continue
            accepted.append(checked)

        submitted = [item for item in submitted if item.field_id not in emptied]
        result.errors.extend(
            _missing_required(compiled, stored, submitted, context, language)
        )

        if accepted:
            await self.values.save_values(module, record_id, accepted)
        result.saved_field_ids = list(dict.fromkeys(item.field_id for item in accepted))

        if result.errors:
            logger.info(
                "Dynamic form submitted with field errors",
                extra={
                    "field_module": module,
                    "record_id": record_id,
                    "saved": len(result.saved_field_ids),
                    "failed": len(result.errors),
                },
            )
        return result

    async def _stored_values(
        self, module: str, record_id: int | None
    ) -> dict[int, FieldValue]:
        if record_id is None:
            return {}
        rows = await self.values.get_values_for_record(module, record_id)
        return {row.field_id: row for row in rows}


def _check_value(
    field: CompiledField, item: FieldValueInput, language: str
) -> tuple[str | None, FieldValueInput]:
    if not item.value or not item.value.strip():
        return None, item
    try:
        normalized = normalize_value(field.definition.field_type, item.value, field.options)
    except ValueError as exc:
        return str(exc), item
    message = validate(field.rules, normalized, language)
    if message is not None:
        return message, item
    return None, item.model_copy(update={"value": normalized})


def _missing_required(
    compiled: Sequence[CompiledField],
    stored: Mapping[int, FieldValue],
    submitted: Sequence[FieldValueInput],
    context: RenderContext,
    language: str,
) -> list[FieldError]:
    submitted_ids = {item.field_id for item in submitted}
    siblings = _sibling_values(compiled, stored)
    keys_by_id = {field.definition.id: field.definition.field_key for field in compiled}
    for item in submitted:
        key = keys_by_id.get(item.field_id)
        if key is not None:
            siblings[key] = item.value or item.file_url or ""

    message = REQUIRED_MESSAGES.get(language, REQUIRED_MESSAGES["en"])
    errors: list[FieldError] = []
    for field in compiled:
        definition = field.definition
        if not definition.is_required or not field.shown_in(context):
            continue
        if definition.id in submitted_ids or _has_data(stored.get(definition.id)):
            continue
        if not is_visible(field.dependency, siblings):
            continue
        errors.append(_field_error(field, message))
    return errors


def _sibling_values(
    compiled: Sequence[CompiledField], stored: Mapping[int, FieldValue]
) -> dict[str, str]:
    """Map field keys to current values; values of deleted fields are ignored."""

    siblings: dict[str, str] = {}
    for field in compiled:
        row = stored.get(field.definition.id)
        if row is None:
            continue
        siblings[field.definition.field_key] = row.value or row.file_url or ""
    return siblings


def _has_data(row: FieldValue | None) -> bool:
    return row is not None and (bool(row.value and row.value.strip()) or bool(row.file_url))


def _field_error(field: CompiledField, message: str) -> FieldError:
    return FieldError(
        field_id=field.definition.id,
        field_key=field.definition.field_key,
        message=message,
    )


def _render(
    field: CompiledField, row: FieldValue | None, language: str
) -> RenderedField:
    definition = field.definition
    return RenderedField(
        definition=FieldDefinitionRead.model_validate(definition),
        current_value=FieldValueRead.model_validate(row) if row is not None else None,
        is_visible=True,
        label=_localized(language, definition.label_en, definition.label_ar) or "",
        help_text=_localized(language, definition.help_text_en, definition.help_text_ar),
        placeholder=_localized(
            language, definition.placeholder_en, definition.placeholder_ar
        ),
        options=field.options,
    )


def _localized(language: str, english: str | None, arabic: str | None) -> str | None:
    if language == "ar" and arabic:
        return arabic
    return english
