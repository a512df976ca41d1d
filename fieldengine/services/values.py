"""Persistence of per-record custom field values.

The store does not validate anything: callers run the type and rule checks
before handing values over.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldengine.models import FieldValue
from fieldengine.schemas import FieldValueInput

logger = logging.getLogger(__name__)


class FieldValueStore:
    """Upsert-only storage keyed by ``(field_id, record_id)``."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_value(self, field_id: int, record_id: int) -> FieldValue | None:
        result = await self.session.execute(
            select(FieldValue).where(
                FieldValue.field_id == field_id,
                FieldValue.record_id == record_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_values_for_record(
        self, module: str, record_id: int
    ) -> Sequence[FieldValue]:
        result = await self.session.execute(
            select(FieldValue)
            .where(FieldValue.module == module, FieldValue.record_id == record_id)
            .order_by(FieldValue.field_id)
        )
        return result.scalars().all()

    async def save_values(
        self, module: str, record_id: int, values: Iterable[FieldValueInput]
    ) -> int:
        """Upsert each value, last write wins; returns the number of rows written."""

        pending = [item for item in values if item.has_data]
        if not pending:
            return 0
        return await self._upsert(module, record_id, pending, retry=True)

    async def _upsert(
        self,
        module: str,
        record_id: int,
        pending: list[FieldValueInput],
        *,
        retry: bool,
    ) -> int:
        field_ids = {item.field_id for item in pending}

        result = await self.session.execute(
            select(FieldValue).where(
                FieldValue.record_id == record_id,
                FieldValue.field_id.in_(field_ids),
            )
        )
        existing = {row.field_id: row for row in result.scalars()}

        for item in pending:
            row = existing.get(item.field_id)
            if row is None:
                row = FieldValue(field_id=item.field_id, record_id=record_id)
                self.session.add(row)
                existing[item.field_id] = row
            row.module = module
            row.value = item.value or ""
            row.file_url = item.file_url
            row.file_name = item.file_name

        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            if not retry:
                raise
            # A concurrent writer inserted one of the rows first; update it instead.
            logger.info(
                "Retrying field value upsert after concurrent insert",
                extra={"field_module": module, "record_id": record_id},
            )
            return await self._upsert(module, record_id, pending, retry=False)

        logger.info(
            "Saved field values",
            extra={"field_module": module, "record_id": record_id, "count": len(field_ids)},
        )
        return len(field_ids)

    async def delete_values_for_record(self, module: str, record_id: int) -> int:
        """Remove every value of a record; used when the owning record is deleted."""

        result = await self.session.execute(
            delete(FieldValue).where(
                FieldValue.module == module, FieldValue.record_id == record_id
            )
        )
        await self.session.commit()
        return result.rowcount or 0
