"""JSON envelopes returned by every endpoint."""

from __future__ import annotations

from typing import Any, Mapping

from flask import Response, jsonify

from .errors import AppError


def ok(data: Any, *, status: int = 200, session_id: str | None = None) -> Response:
    """Return ``{"success": true, "data": ...}``.

    Session scoped endpoints echo the ``session_id`` so a client can keep
    issuing commands against the same engine.
    """

    payload: dict[str, Any] = {"success": True, "data": data}
    if session_id is not None:
        payload["session_id"] = session_id
    response = jsonify(payload)
    response.status_code = status
    return response


def fail(error: AppError | Mapping[str, Any], *, status: int | None = None) -> Response:
    """Return ``{"success": false, "error": {...}}``."""

    if isinstance(error, AppError):
        body = error.to_dict()
        status_code = status or error.status_code
    else:
        body = dict(error)
        status_code = status or 400
    response = jsonify({"success": False, "error": body})
    response.status_code = status_code
    return response


__all__ = ["ok", "fail"]
