"""JSON logging for the custom fields engine.

Every line carries the service name and environment; anything passed through
``extra=`` (``field_module``, ``record_id``, ``template_id``...) is merged in
as top-level keys.
"""
from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from fieldengine.core.config import Settings

SERVICE_NAME = "fieldengine"
SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")

# Attributes every LogRecord has; the rest came from ``extra=``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JSONLogFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def __init__(self, app_env: str, service: str = SERVICE_NAME) -> None:
        super().__init__()
        self.app_env = app_env
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "environment": self.app_env,
        }
        payload.update(context_of(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def context_of(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` values attached to a record."""

    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


def configure_logging(settings: Settings) -> None:
    """Send application and server logs through the JSON formatter."""

    handler = logging.StreamHandler()
    handler.setFormatter(JSONLogFormatter(settings.app_env))

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, handlers=[handler], force=True)
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.setLevel(level)
