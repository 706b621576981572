"""Error envelope types shared by the plugin blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from werkzeug.exceptions import HTTPException


@dataclass(slots=True, eq=False)
class AppError(Exception):
    """Base API error carrying a machine readable ``code``.

    Plugin codes are namespaced as ``<plugin>.<reason>``; the envelope
    produced by :func:`common.responses.fail` serialises :meth:`to_dict`.
    """

    message: str
    code: str = "error"
    status_code: int = 400
    details: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details or {})}

    @classmethod
    def from_exception(cls, exc: Exception, *, code: str, **kwargs: Any) -> "AppError":
        """Wrap a domain exception, keeping its message."""

        return cls(message=str(exc) or exc.__class__.__name__, code=code, **kwargs)


@dataclass(slots=True, eq=False)
class ValidationAppError(AppError):
    """Malformed request payload or a rejected engine command."""

    code: str = "validation_error"
    status_code: int = 400


@dataclass(slots=True, eq=False)
class NotFoundAppError(AppError):
    """Unknown session, category or history entry."""

    code: str = "not_found"
    status_code: int = 404


@dataclass(slots=True, eq=False)
class InternalAppError(AppError):
    """Unexpected failure; the message never includes a traceback."""

    code: str = "internal_error"
    status_code: int = 500


def unknown_session(plugin: str, session_id: str) -> NotFoundAppError:
    return NotFoundAppError(message=f"Unknown session '{session_id}'", code=f"{plugin}.unknown_session")


def from_http_exception(error: HTTPException) -> AppError:
    """Map a werkzeug routing or protocol error onto the envelope, e.g. ``method_not_allowed``."""

    name = error.name or "error"
    return AppError(
        message=error.description or name,
        code=name.lower().replace(" ", "_"),
        status_code=error.code or 500,
    )


__all__ = [
    "AppError",
    "ValidationAppError",
    "NotFoundAppError",
    "InternalAppError",
    "from_http_exception",
    "unknown_session",
]
