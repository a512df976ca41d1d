"""Application entrypoint for the custom fields engine service."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from fieldengine.api.v1 import router as api_v1_router
from fieldengine.core.config import Settings, get_settings
from fieldengine.core.db import AsyncSessionLocal, engine
from fieldengine.core.errors import FieldEngineError
from fieldengine.core.logging import configure_logging
from fieldengine.models import Base
from fieldengine.services.templates import TemplateCatalog

logger = logging.getLogger(__name__)

ERROR_CODE_MAP: dict[int, str] = {
    404: "RESOURCE_NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    configure_logging(settings)

    application = FastAPI(title="Custom Fields Engine", version=settings.version)

    _configure_cors(application, settings)
    _configure_exception_handlers(application)

    application.include_router(api_v1_router, prefix="/api/v1")

    @application.on_event("startup")
    async def _on_startup() -> None:  # pragma: no cover - exercised via tests
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        if settings.seed_templates_on_startup:
            async with AsyncSessionLocal() as session:
                await TemplateCatalog(session).seed_system_templates()

    return application


def _configure_cors(application: FastAPI, settings: Settings) -> None:
    if not settings.cors_origins:
        return

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _configure_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(FieldEngineError, _engine_exception_handler)
    application.add_exception_handler(HTTPException, _http_exception_handler)
    application.add_exception_handler(RequestValidationError, _validation_exception_handler)
    application.add_exception_handler(Exception, _unhandled_exception_handler)


async def _engine_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, FieldEngineError)
    logger.info("Engine error", extra={"code": exc.code, "detail": exc.message})
    return _error_response(exc.code, exc.message, exc.status_code)


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    code = ERROR_CODE_MAP.get(exc.status_code, f"HTTP_{exc.status_code}")
    response = _error_response(code, str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    logger.info("Validation error", extra={"errors": exc.errors()})
    return _error_response("VALIDATION_ERROR", "Validation error", status_code=422)


async def _unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled application error")
    return _error_response("INTERNAL_SERVER_ERROR", "Internal server error", status_code=500)


def _error_response(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"code": code, "message": message}})


app = create_app()
