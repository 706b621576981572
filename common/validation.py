"""Request payload validation for plugin APIs."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

import pydantic
from pydantic import BaseModel

from .errors import ValidationAppError


class ValidationError(ValueError):
    """Raised when a payload does not match its schema."""

    def __init__(self, message: str, *, details: Any | None = None):
        super().__init__(message)
        self.details = details

    def to_app_error(self, code: str) -> ValidationAppError:
        details = {"errors": self.details} if self.details is not None else None
        return ValidationAppError(message=str(self), code=code, details=details)


class SchemaModel(BaseModel):
    """Strict base model: unknown keys are rejected, strings are stripped."""

    model_config = pydantic.ConfigDict(extra="forbid", str_strip_whitespace=True)


TModel = TypeVar("TModel", bound=SchemaModel)


def parse_model(model: type[TModel], payload: Mapping[str, Any] | None) -> TModel:
    payload = payload or {}
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        details = exc.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationError("Invalid request payload", details=details) from exc


__all__ = ["ValidationError", "SchemaModel", "parse_model"]
