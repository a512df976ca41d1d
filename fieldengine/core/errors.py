"""Typed failures raised by the custom fields engine services."""
from __future__ import annotations


class FieldEngineError(Exception):
    """Base class for errors surfaced to callers of the engine."""

    code = "FIELD_ENGINE_ERROR"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConflictError(FieldEngineError):
    """A field definition with the same module and key already exists."""

    code = "FIELD_CONFLICT"
    status_code = 409


class NotFoundError(FieldEngineError):
    code = "RESOURCE_NOT_FOUND"
    status_code = 404


class InvalidDefinitionError(FieldEngineError):
    """A definition payload violates an engine invariant."""

    code = "INVALID_DEFINITION"
    status_code = 422


class NoFieldsAppliedError(FieldEngineError):
    """Applying a non-empty template produced no usable fields."""

    code = "NO_FIELDS_APPLIED"
    status_code = 422

    def __init__(self, message: str, *, rejected_count: int = 0) -> None:
        super().__init__(message)
        self.rejected_count = rejected_count


class ProtectedTemplateError(FieldEngineError):
    code = "TEMPLATE_PROTECTED"
    status_code = 400
