"""API routes for the Scientific Calculator plugin."""

from __future__ import annotations

from typing import Any, Literal

from flask import Blueprint, Response, current_app, request

from common.errors import NotFoundAppError, ValidationAppError, unknown_session
from common.responses import fail, ok
from common.sessions import SessionNotFoundError, SessionStore, store_for
from common.validation import SchemaModel, ValidationError, parse_model

from ..core import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_PRECISION,
    Calculator,
    ExpressionError,
    HistoryIndexError,
    HistoryLog,
    Token,
    TokenError,
    evaluate_expression,
    sample_function,
    sample_surface,
    token_for_key,
    validate_token,
)

PLUGIN = "scientific_calculator"


class SessionPayload(SchemaModel):
    angle_unit: Literal["radian", "degree"] = "radian"


class EvaluatePayload(SchemaModel):
    expression: str
    angle_unit: Literal["radian", "degree"] = "radian"
    variables: dict[str, float | int] | None = None


class PlotPayload(SchemaModel):
    expression: str
    mode: Literal["1d", "2d"] = "1d"
    angle_unit: Literal["radian", "degree"] = "radian"
    x_min: float = -10.0
    x_max: float = 10.0
    samples: int | None = None
    lower: float = -5.0
    upper: float = 5.0
    step: float = 0.2


class TokenPayload(SchemaModel):
    kind: Literal["digit", "operator", "function", "delete", "clear", "evaluate"]
    value: str = ""


class TokensPayload(SchemaModel):
    tokens: list[TokenPayload]


class KeyPayload(SchemaModel):
    key: str


class RecallPayload(SchemaModel):
    index: int


api_bp = Blueprint(f"{PLUGIN}_api", __name__, url_prefix=f"/api/{PLUGIN}")


def _settings() -> dict[str, Any]:
    return current_app.config.get("PLUGIN_SETTINGS", {}).get(PLUGIN, {}) or {}


def _int_setting(name: str, default: int) -> int:
    try:
        value = int(_settings().get(name, default))
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _new_calculator() -> Calculator:
    history = HistoryLog(limit=_int_setting("history_limit", DEFAULT_HISTORY_LIMIT))
    return Calculator(history, precision=_int_setting("precision", DEFAULT_PRECISION))


def _store() -> SessionStore[Calculator]:
    return store_for(current_app, PLUGIN, _new_calculator)


def _invalid_request(exc: ValidationError) -> Response:
    return fail(exc.to_app_error(f"{PLUGIN}.invalid_request"))


def _session_missing(session_id: str) -> Response:
    return fail(unknown_session(PLUGIN, session_id))


def _state(calculator: Calculator, session_id: str, **extra: Any) -> Response:
    return ok({**calculator.snapshot(), **extra}, session_id=session_id)


@api_bp.post("/evaluate")
def evaluate() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(EvaluatePayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        result = evaluate_expression(
            payload.expression,
            angle_unit=payload.angle_unit,
            variables=payload.variables or {},
            precision=_int_setting("precision", DEFAULT_PRECISION),
        )
    except ExpressionError as exc:
        return fail(ValidationAppError.from_exception(exc, code=f"{PLUGIN}.invalid_expression"))
    return ok(result)


@api_bp.post("/plot")
def plot() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(PlotPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        if payload.mode == "1d":
            result = sample_function(
                payload.expression,
                payload.x_min,
                payload.x_max,
                samples=payload.samples or _int_setting("plot_samples", 500),
                angle_unit=payload.angle_unit,
            )
        else:
            result = sample_surface(
                payload.expression,
                lower=payload.lower,
                upper=payload.upper,
                step=payload.step,
                angle_unit=payload.angle_unit,
            )
    except ExpressionError as exc:
        return fail(ValidationAppError.from_exception(exc, code=f"{PLUGIN}.invalid_expression"))
    return ok(result)


# ---- Session scoped calculator ----------------------------------------------
@api_bp.post("/sessions")
def create_session() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(SessionPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    session = _store().create()
    session.state.angle_unit = payload.angle_unit
    return ok(session.state.snapshot(), status=201, session_id=session.session_id)


@api_bp.get("/sessions/<session_id>")
def get_session(session_id: str) -> Response:
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        return _state(session.state, session_id)


@api_bp.delete("/sessions/<session_id>")
def delete_session(session_id: str) -> Response:
    if not _store().delete(session_id):
        return _session_missing(session_id)
    return ok({"deleted": True}, session_id=session_id)


@api_bp.post("/sessions/<session_id>/input")
def input_tokens(session_id: str) -> Response:
    """Apply one token (``{kind, value}``) or a batch (``{tokens: [...]}``)."""

    raw_payload = request.get_json(silent=True) or {}
    try:
        if "tokens" in raw_payload:
            tokens = parse_model(TokensPayload, raw_payload).tokens
        else:
            tokens = [parse_model(TokenPayload, raw_payload)]
    except ValidationError as exc:
        return _invalid_request(exc)

    batch = [Token(item.kind, item.value) for item in tokens]
    try:
        for token in batch:
            validate_token(token)
    except TokenError as exc:
        return fail(ValidationAppError.from_exception(exc, code=f"{PLUGIN}.invalid_token"))

    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        for token in batch:
            session.state.apply(token)
        return _state(session.state, session_id)


@api_bp.post("/sessions/<session_id>/key")
def press_key(session_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(KeyPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)

    token = token_for_key(payload.key)
    with session.lock:
        if token is not None:
            session.state.apply(token)
        return _state(session.state, session_id, handled=token is not None)


@api_bp.post("/sessions/<session_id>/evaluate")
def evaluate_session(session_id: str) -> Response:
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        success = session.state.evaluate()
        return _state(session.state, session_id, evaluated=success)


@api_bp.get("/sessions/<session_id>/history")
def history(session_id: str) -> Response:
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        log = session.state.history
        return ok({"limit": log.limit, "entries": log.to_list()}, session_id=session_id)


@api_bp.post("/sessions/<session_id>/history/clear")
def clear_history(session_id: str) -> Response:
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        session.state.history.clear()
        return ok({"limit": session.state.history.limit, "entries": []}, session_id=session_id)


@api_bp.post("/sessions/<session_id>/history/recall")
def recall_history(session_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(RecallPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        try:
            entry = session.state.recall(payload.index)
        except HistoryIndexError as exc:
            return fail(NotFoundAppError.from_exception(exc, code=f"{PLUGIN}.unknown_history_entry"))
        return _state(session.state, session_id, recalled=entry.to_dict())


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "evaluate",
    "plot",
    "create_session",
    "get_session",
    "delete_session",
    "input_tokens",
    "press_key",
    "evaluate_session",
    "history",
    "clear_history",
    "recall_history",
]
