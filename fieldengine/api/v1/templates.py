"""Field template API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldengine.api.v1.common import data_response
from fieldengine.core.db import get_session
from fieldengine.schemas import (
    ApplyResult,
    ApplyTemplateRequest,
    FieldTemplateCreate,
    FieldTemplateRead,
    FieldTemplateUpdate,
)
from fieldengine.services.templates import TemplateCatalog


router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("")
async def list_templates(
    module: str | None = None, session: AsyncSession = Depends(get_session)
) -> dict[str, list[FieldTemplateRead]]:
    templates = await TemplateCatalog(session).list_templates(module)
    return data_response([FieldTemplateRead.model_validate(item) for item in templates])


@router.post("/seed")
async def seed_templates(
    session: AsyncSession = Depends(get_session),
) -> dict[str, dict[str, int]]:
    """Insert the built-in templates that are not present yet."""

    inserted = await TemplateCatalog(session).seed_system_templates()
    return data_response({"inserted": inserted})


@router.get("/{template_id}")
async def retrieve_template(
    template_id: int, session: AsyncSession = Depends(get_session)
) -> dict[str, FieldTemplateRead]:
    template = await TemplateCatalog(session).get_template(template_id)
    return data_response(FieldTemplateRead.model_validate(template))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: FieldTemplateCreate, session: AsyncSession = Depends(get_session)
) -> dict[str, FieldTemplateRead]:
    template = await TemplateCatalog(session).create_template(payload)
    return data_response(FieldTemplateRead.model_validate(template))


@router.put("/{template_id}")
async def update_template(
    template_id: int,
    payload: FieldTemplateUpdate,
    session: AsyncSession = Depends(get_session),
) -> dict[str, FieldTemplateRead]:
    """Edit or (de)activate a template; system templates only toggle activity."""

    template = await TemplateCatalog(session).update_template(template_id, payload)
    return data_response(FieldTemplateRead.model_validate(template))


@router.delete("/{template_id}")
async def delete_template(
    template_id: int, session: AsyncSession = Depends(get_session)
) -> dict[str, dict[str, bool]]:
    await TemplateCatalog(session).delete_template(template_id)
    return data_response({"deleted": True})


@router.post("/{template_id}/apply")
async def apply_template(
    template_id: int,
    payload: ApplyTemplateRequest | None = None,
    session: AsyncSession = Depends(get_session),
) -> dict[str, ApplyResult]:
    """Create the template's fields, skipping keys the module already has."""

    target_module = payload.target_module if payload is not None else None
    result = await TemplateCatalog(session).apply_template(template_id, target_module)
    return data_response(result)
