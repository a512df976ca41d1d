"""Field definition management API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldengine.api.v1.common import data_response
from fieldengine.core.db import get_session
from fieldengine.schemas import (
    FieldDefinitionCreate,
    FieldDefinitionRead,
    FieldDefinitionUpdate,
    FieldStats,
)
from fieldengine.services.definitions import FieldDefinitionStore


router = APIRouter(prefix="/fields", tags=["fields"])


@router.get("")
async def list_fields(
    module: str | None = None, session: AsyncSession = Depends(get_session)
) -> dict[str, list[FieldDefinitionRead]]:
    """Return field definitions, optionally restricted to one module."""

    store = FieldDefinitionStore(session)
    if module is None:
        definitions = await store.get_all()
    else:
        definitions = await store.list_by_module(module)
    payload = [FieldDefinitionRead.model_validate(definition) for definition in definitions]
    return data_response(payload)


@router.get("/stats")
async def field_stats(session: AsyncSession = Depends(get_session)) -> dict[str, FieldStats]:
    """Report how many fields and stored values each module has."""

    return data_response(await FieldDefinitionStore(session).stats())


@router.get("/{field_id}")
async def retrieve_field(
    field_id: int, session: AsyncSession = Depends(get_session)
) -> dict[str, FieldDefinitionRead]:
    definition = await FieldDefinitionStore(session).get(field_id)
    return data_response(FieldDefinitionRead.model_validate(definition))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_field(
    payload: FieldDefinitionCreate, session: AsyncSession = Depends(get_session)
) -> dict[str, FieldDefinitionRead]:
    """Create a new custom field definition."""

    store = FieldDefinitionStore(session)
    field_id = await store.create(payload)
    definition = await store.get(field_id)
    return data_response(FieldDefinitionRead.model_validate(definition))


@router.put("/{field_id}")
async def update_field(
    field_id: int,
    payload: FieldDefinitionUpdate,
    session: AsyncSession = Depends(get_session),
) -> dict[str, FieldDefinitionRead]:
    """Update an existing field definition; module and key cannot change."""

    store = FieldDefinitionStore(session)
    await store.update(field_id, payload)
    definition = await store.get(field_id)
    return data_response(FieldDefinitionRead.model_validate(definition))


@router.delete("/{field_id}")
async def delete_field(
    field_id: int, session: AsyncSession = Depends(get_session)
) -> dict[str, dict[str, bool]]:
    """Delete a field definition. Stored values are left in place and ignored."""

    await FieldDefinitionStore(session).delete(field_id)
    return data_response({"deleted": True})
