"""Unit converter API with standardized responses."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request

from common.errors import NotFoundAppError, ValidationAppError, unknown_session
from common.responses import fail, ok
from common.sessions import SessionNotFoundError, SessionStore, store_for
from common.validation import SchemaModel, ValidationError, parse_model

from ..core import (
    ConversionSession,
    UnknownCategoryError,
    UnknownUnitError,
    convert,
    load_catalog,
    require_category,
    resolve,
)

PLUGIN = "unit_converter"


class ConvertPayload(SchemaModel):
    category: str
    from_unit: str
    to_unit: str
    value: float | int | str


class CategoryPayload(SchemaModel):
    category: str


class UnitsPayload(SchemaModel):
    from_unit: str | None = None
    to_unit: str | None = None


class InputPayload(SchemaModel):
    value: str | float | int


api_bp = Blueprint(f"{PLUGIN}_api", __name__, url_prefix=f"/api/{PLUGIN}")


def _store() -> SessionStore[ConversionSession]:
    return store_for(current_app, PLUGIN, ConversionSession.initial)


def _invalid_request(exc: ValidationError) -> Response:
    return fail(exc.to_app_error(f"{PLUGIN}.invalid_request"))


def _session_missing(session_id: str) -> Response:
    return fail(unknown_session(PLUGIN, session_id))


def _lookup_failed(exc: Exception) -> Response:
    code = "unknown_category" if isinstance(exc, UnknownCategoryError) else "unknown_unit"
    return fail(ValidationAppError.from_exception(exc, code=f"{PLUGIN}.{code}"))


@api_bp.get("/categories")
def categories() -> Response:
    catalog = load_catalog()
    return ok({"categories": [category.name for category in catalog], "catalog": [c.to_dict() for c in catalog]})


@api_bp.get("/categories/<name>")
def category_detail(name: str) -> Response:
    try:
        category = require_category(name)
    except UnknownCategoryError as exc:
        return fail(NotFoundAppError.from_exception(exc, code=f"{PLUGIN}.unknown_category"))
    return ok(category.to_dict())


@api_bp.post("/convert")
def convert_endpoint() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(ConvertPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        category, from_unit, to_unit = resolve(payload.category, payload.from_unit, payload.to_unit)
    except (UnknownCategoryError, UnknownUnitError) as exc:
        return _lookup_failed(exc)
    return ok(
        {
            "category": category.name,
            "from_unit": from_unit.to_dict(),
            "to_unit": to_unit.to_dict(),
            "input": str(payload.value),
            "result": convert(category, from_unit, to_unit, payload.value),
        }
    )


# ---- Session scoped converter -----------------------------------------------
@api_bp.post("/sessions")
def create_session() -> Response:
    session = _store().create()
    return ok(session.state.snapshot(), status=201, session_id=session.session_id)


@api_bp.get("/sessions/<session_id>")
def get_session(session_id: str) -> Response:
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        return ok(session.state.snapshot(), session_id=session_id)


@api_bp.delete("/sessions/<session_id>")
def delete_session(session_id: str) -> Response:
    if not _store().delete(session_id):
        return _session_missing(session_id)
    return ok({"deleted": True}, session_id=session_id)


@api_bp.post("/sessions/<session_id>/category")
def select_category(session_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(CategoryPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        try:
            session.state.select_category(payload.category)
        except UnknownCategoryError as exc:
            return _lookup_failed(exc)
        return ok(session.state.snapshot(), session_id=session_id)


@api_bp.post("/sessions/<session_id>/units")
def select_units(session_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(UnitsPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        try:
            session.state.set_units(payload.from_unit, payload.to_unit)
        except UnknownUnitError as exc:
            return _lookup_failed(exc)
        return ok(session.state.snapshot(), session_id=session_id)


@api_bp.post("/sessions/<session_id>/input")
def set_input(session_id: str) -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(InputPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    with session.lock:
        session.state.set_input(str(payload.value))
        return ok(session.state.snapshot(), session_id=session_id)


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "categories",
    "category_detail",
    "convert_endpoint",
    "create_session",
    "get_session",
    "delete_session",
    "select_category",
    "select_units",
    "set_input",
]
