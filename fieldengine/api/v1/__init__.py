"""Version 1 API routes for the custom fields engine."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from fieldengine.api.v1.fields import router as fields_router
from fieldengine.api.v1.records import router as records_router
from fieldengine.api.v1.templates import router as templates_router
from fieldengine.core.config import Settings, get_settings

router = APIRouter()
router.include_router(fields_router)
router.include_router(records_router)
router.include_router(templates_router)


@router.get("/health", tags=["health"])
async def health_check(settings: Settings = Depends(get_settings)) -> dict[str, dict[str, str]]:
    """Report the service health information."""
    return {"data": {"status": "ok", "version": settings.version}}
