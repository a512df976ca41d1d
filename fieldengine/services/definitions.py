"""Persistence of custom field definitions."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldengine.core.errors import ConflictError, InvalidDefinitionError, NotFoundError
from fieldengine.models import FieldDefinition, FieldValue
from fieldengine.schemas import (
    FieldDefinitionCreate,
    FieldDefinitionUpdate,
    FieldStats,
    ModuleStats,
)
from fieldengine.services.dependencies import parse_dependency, references_key

logger = logging.getLogger(__name__)


class FieldDefinitionStore:
    """CRUD for field definitions keyed by ``(module, field_key)``."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, payload: FieldDefinitionCreate) -> int:
        _ensure_not_self_dependent(payload.field_key, payload.dependencies)

        existing = await self.find_by_key(payload.module, payload.field_key)
        if existing is not None:
            raise _conflict(payload.module, payload.field_key)

        definition = FieldDefinition(**payload.model_dump())
        self.session.add(definition)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise _conflict(payload.module, payload.field_key) from exc

        await self.session.refresh(definition)
        logger.info(
            "Created field definition",
            extra={
                "field_id": definition.id,
                "field_module": definition.module,
                "field_key": definition.field_key,
            },
        )
        return definition.id

    async def update(self, definition_id: int, patch: FieldDefinitionUpdate) -> None:
        definition = await self.get(definition_id)
        changes = patch.model_dump(exclude_unset=True)
        if "dependencies" in changes:
            _ensure_not_self_dependent(definition.field_key, changes["dependencies"])

        for name, value in changes.items():
            if value is None and name in _NON_NULLABLE:
                continue
            setattr(definition, name, value)

        await self.session.commit()
        await self.session.refresh(definition)

    async def delete(self, definition_id: int) -> None:
        definition = await self.get(definition_id)
        module = definition.module
        await self.session.delete(definition)
        await self.session.commit()
        logger.info(
            "Deleted field definition",
            extra={"field_id": definition_id, "field_module": module},
        )

    async def get(self, definition_id: int) -> FieldDefinition:
        definition = await self.session.get(FieldDefinition, definition_id)
        if definition is None:
            raise NotFoundError(f"Field definition {definition_id} not found")
        return definition

    async def find_by_key(self, module: str, field_key: str) -> FieldDefinition | None:
        result = await self.session.execute(
            select(FieldDefinition).where(
                FieldDefinition.module == module,
                FieldDefinition.field_key == field_key,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_module(self, module: str) -> Sequence[FieldDefinition]:
        """Return a module's definitions by display order, ties by id."""

        result = await self.session.execute(
            select(FieldDefinition)
            .where(FieldDefinition.module == module)
            .order_by(FieldDefinition.display_order, FieldDefinition.id)
        )
        return result.scalars().all()

    async def get_all(self) -> Sequence[FieldDefinition]:
        result = await self.session.execute(
            select(FieldDefinition).order_by(
                FieldDefinition.module,
                FieldDefinition.display_order,
                FieldDefinition.id,
            )
        )
        return result.scalars().all()

    async def stats(self) -> FieldStats:
        """Count definitions and stored values, overall and per module."""

        by_module: dict[str, ModuleStats] = {}
        field_counts = await self.session.execute(
            select(FieldDefinition.module, func.count(FieldDefinition.id)).group_by(
                FieldDefinition.module
            )
        )
        for module, count in field_counts.all():
            by_module.setdefault(module, ModuleStats()).fields = count

        value_counts = await self.session.execute(
            select(FieldValue.module, func.count(FieldValue.id)).group_by(FieldValue.module)
        )
        for module, count in value_counts.all():
            by_module.setdefault(module, ModuleStats()).values = count

        return FieldStats(
            total_fields=sum(item.fields for item in by_module.values()),
            total_values=sum(item.values for item in by_module.values()),
            by_module=by_module,
        )


_NON_NULLABLE = frozenset(
    {
        "label_en",
        "field_type",
        "is_required",
        "show_in_admin",
        "show_in_user_form",
        "display_order",
    }
)


def _ensure_not_self_dependent(field_key: str, dependencies: str | None) -> None:
    if references_key(parse_dependency(dependencies), field_key):
        msg = f"Field '{field_key}' cannot depend on itself"
        raise InvalidDefinitionError(msg)


def _conflict(module: str, field_key: str) -> ConflictError:
    return ConflictError(f"Field '{field_key}' already exists in module '{module}'")
