"""Template catalog and bulk application of template fields."""
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldengine.core.errors import (
    ConflictError,
    InvalidDefinitionError,
    NoFieldsAppliedError,
    NotFoundError,
    ProtectedTemplateError,
)
from fieldengine.models import FieldTemplate
from fieldengine.schemas import (
    ApplyResult,
    FieldDefinitionCreate,
    FieldDefinitionPayload,
    FieldTemplateCreate,
    FieldTemplateUpdate,
)
from fieldengine.services.definitions import FieldDefinitionStore
from fieldengine.services.system_templates import SYSTEM_TEMPLATES

logger = logging.getLogger(__name__)


class TemplateCatalog:
    """Named bundles of field definitions and their application to modules."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.definitions = FieldDefinitionStore(session)

    async def list_templates(self, module: str | None = None) -> Sequence[FieldTemplate]:
        stmt = select(FieldTemplate).where(FieldTemplate.is_active.is_(True))
        if module is not None:
            stmt = stmt.where(FieldTemplate.module == module)
        result = await self.session.execute(
            stmt.order_by(FieldTemplate.module, FieldTemplate.name_en)
        )
        return result.scalars().all()

    async def get_template(self, template_id: int) -> FieldTemplate:
        template = await self.session.get(FieldTemplate, template_id)
        if template is None:
            raise NotFoundError(f"Template {template_id} not found")
        return template

    async def find_template(self, module: str, name_en: str) -> FieldTemplate | None:
        result = await self.session.execute(
            select(FieldTemplate).where(
                FieldTemplate.module == module, FieldTemplate.name_en == name_en
            )
        )
        return result.scalar_one_or_none()

    async def create_template(
        self, payload: FieldTemplateCreate, *, is_system: bool = False
    ) -> FieldTemplate:
        if await self.find_template(payload.module, payload.name_en) is not None:
            raise _template_conflict(payload.module, payload.name_en)

        template = FieldTemplate(
            module=payload.module,
            name_en=payload.name_en,
            name_ar=payload.name_ar,
            description_en=payload.description_en,
            description_ar=payload.description_ar,
            fields=_dump_fields(payload.fields),
            is_system=is_system,
        )
        self.session.add(template)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise _template_conflict(payload.module, payload.name_en) from exc
        await self.session.refresh(template)
        return template

    async def update_template(
        self, template_id: int, patch: FieldTemplateUpdate
    ) -> FieldTemplate:
        """Apply a partial update. System templates may only be (de)activated."""

        template = await self.get_template(template_id)
        module = template.module
        changes = patch.model_dump(exclude_unset=True, exclude={"fields"})
        if "fields" in patch.model_fields_set and patch.fields is not None:
            changes["fields"] = _dump_fields(patch.fields)
        changes = {
            name: value
            for name, value in changes.items()
            if value is not None or name not in _NON_NULLABLE
        }

        if template.is_system and set(changes) - {"is_active"}:
            raise ProtectedTemplateError("System templates can only be activated or deactivated")

        new_name = changes.get("name_en")
        if new_name is not None and new_name != template.name_en:
            if await self.find_template(module, new_name) is not None:
                raise _template_conflict(module, new_name)

        for name, value in changes.items():
            setattr(template, name, value)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise _template_conflict(module, new_name or "") from exc
        await self.session.refresh(template)

        logger.info(
            "Updated field template",
            extra={"template_id": template_id, "changed": sorted(changes)},
        )
        return template

    async def delete_template(self, template_id: int) -> None:
        template = await self.get_template(template_id)
        if template.is_system:
            raise ProtectedTemplateError("System templates cannot be deleted")
        await self.session.delete(template)
        await self.session.commit()

    async def seed_system_templates(self) -> int:
        """Insert missing built-in templates; safe to call repeatedly."""

        inserted = 0
        for raw in SYSTEM_TEMPLATES:
            payload = FieldTemplateCreate.model_validate(raw)
            try:
                await self.create_template(payload, is_system=True)
            except ConflictError:
                continue
            inserted += 1

        if inserted:
            logger.info("Seeded system templates", extra={"count": inserted})
        return inserted

    async def apply_template(
        self, template_id: int, target_module: str | None = None
    ) -> ApplyResult:
        """Create the template's fields in a module, skipping keys that exist."""

        template = await self.get_template(template_id)
        module = target_module or template.module
        items = _load_fields(template)
        result = ApplyResult(module=module)

        for item in items:
            if not isinstance(item, dict):
                result.rejected_count += 1
                continue
            try:
                payload = FieldDefinitionCreate.model_validate({**item, "module": module})
            except ValidationError as exc:
                logger.warning(
                    "Rejected template field",
                    extra={
                        "template_id": template_id,
                        "field_key": item.get("field_key"),
                        "error": exc.errors(include_url=False),
                    },
                )
                result.rejected_count += 1
                continue

            if await self.definitions.find_by_key(module, payload.field_key) is not None:
                result.skipped_count += 1
                continue
            try:
                field_id = await self.definitions.create(payload)
            except ConflictError:
                result.skipped_count += 1
                continue
            except InvalidDefinitionError as exc:
                logger.warning(
                    "Rejected template field",
                    extra={
                        "template_id": template_id,
                        "field_key": payload.field_key,
                        "error": exc.message,
                    },
                )
                result.rejected_count += 1
                continue
            result.created_count += 1
            result.created_field_ids.append(field_id)

        if items and result.created_count == 0 and result.skipped_count == 0:
            raise NoFieldsAppliedError(
                f"No fields from template {template_id} could be applied to '{module}'",
                rejected_count=result.rejected_count,
            )

        logger.info(
            "Applied field template",
            extra={
                "template_id": template_id,
                "target_module": module,
                "created_count": result.created_count,
                "skipped_count": result.skipped_count,
                "rejected_count": result.rejected_count,
            },
        )
        return result


def _dump_fields(fields: list[FieldDefinitionPayload]) -> str:
    return json.dumps(
        [field.model_dump(mode="json", exclude_none=True) for field in fields],
        ensure_ascii=False,
    )


def _load_fields(template: FieldTemplate) -> list[Any]:
    try:
        data = json.loads(template.fields)
    except json.JSONDecodeError as exc:
        logger.warning(
            "Template fields are not valid JSON",
            extra={"template_id": template.id, "error": str(exc)},
        )
        return []
    if not isinstance(data, list):
        logger.warning("Template fields are not a list", extra={"template_id": template.id})
        return []
    return data


_NON_NULLABLE = frozenset({"name_en", "fields", "is_active"})


def _template_conflict(module: str, name_en: str) -> ConflictError:
    return ConflictError(f"Template '{name_en}' already exists in module '{module}'")
