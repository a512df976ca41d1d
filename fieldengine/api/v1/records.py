"""Per-record dynamic form API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fieldengine.api.v1.common import data_response
from fieldengine.core.config import Settings, get_settings
from fieldengine.core.db import get_session
from fieldengine.schemas import (
    FieldValueRead,
    Language,
    RenderContext,
    RenderedField,
    SubmitPayload,
    SubmitResult,
)
from fieldengine.services.orchestrator import FieldOrchestrator
from fieldengine.services.values import FieldValueStore


router = APIRouter(prefix="/records", tags=["records"])


@router.get("/{module}/{record_id}/fields")
async def render_fields(
    module: str,
    record_id: int,
    context: RenderContext = "user",
    language: Language | None = None,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, list[RenderedField]]:
    """Return the visible fields of a record with their current values."""

    orchestrator = FieldOrchestrator(session, default_language=settings.default_language)
    rendered = await orchestrator.evaluate(module, record_id, context, language)
    return data_response(rendered)


@router.get("/{module}/{record_id}/values")
async def list_values(
    module: str, record_id: int, session: AsyncSession = Depends(get_session)
) -> dict[str, list[FieldValueRead]]:
    rows = await FieldValueStore(session).get_values_for_record(module, record_id)
    return data_response([FieldValueRead.model_validate(row) for row in rows])


@router.post("/{module}/{record_id}/values")
async def submit_values(
    module: str,
    record_id: int,
    payload: SubmitPayload,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, SubmitResult]:
    """Validate and save submitted values; failing fields are reported, not saved."""

    orchestrator = FieldOrchestrator(session, default_language=settings.default_language)
    result = await orchestrator.submit(
        module,
        record_id,
        payload.values,
        context=payload.context,
        language=payload.language,
    )
    return data_response(result)


@router.delete("/{module}/{record_id}/values")
async def delete_values(
    module: str, record_id: int, session: AsyncSession = Depends(get_session)
) -> dict[str, dict[str, int]]:
    """Drop all values of a record once the owning record has been deleted."""

    deleted = await FieldValueStore(session).delete_values_for_record(module, record_id)
    return data_response({"deleted": deleted})
