"""API routes for the Matrix Workbench plugin."""

from __future__ import annotations

from typing import Any, Callable

from flask import Blueprint, Response, current_app, request
from pydantic import Field

from common.errors import ValidationAppError, unknown_session
from common.responses import fail, ok
from common.sessions import SessionNotFoundError, SessionStore, store_for
from common.validation import SchemaModel, ValidationError, parse_model

from ..core import OPERATIONS, MatrixWorkbench, WorkbenchError

PLUGIN = "matrix_workbench"


class OperationPayload(SchemaModel):
    operation: str


class SelectPayload(SchemaModel):
    a: int = Field(ge=0)
    b: int = Field(ge=0)


class CellPayload(SchemaModel):
    matrix: int = Field(ge=0)
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    value: str | float | int | None = None


class ShapePayload(SchemaModel):
    matrix: int = Field(ge=0)
    index: int | None = Field(default=None, ge=0)


api_bp = Blueprint(f"{PLUGIN}_api", __name__, url_prefix=f"/api/{PLUGIN}")


def _store() -> SessionStore[MatrixWorkbench]:
    return store_for(current_app, PLUGIN, MatrixWorkbench)


def _invalid_request(exc: ValidationError) -> Response:
    return fail(exc.to_app_error(f"{PLUGIN}.invalid_request"))


def _session_missing(session_id: str) -> Response:
    return fail(unknown_session(PLUGIN, session_id))


def _rejected(exc: WorkbenchError) -> Response:
    return fail(ValidationAppError.from_exception(exc, code=f"{PLUGIN}.invalid_command"))


def _state(workbench: MatrixWorkbench, session_id: str, **extra: Any) -> Response:
    return ok({**workbench.snapshot(), **extra}, session_id=session_id)


def _run(session_id: str, model: type[SchemaModel] | None, action: Callable[..., Any]) -> Response:
    """Parse the body, fetch the session and apply ``action`` to its workbench.

    ``action`` receives the workbench (and the parsed payload when ``model``
    is given) and may return a dict of extra fields for the response.
    """

    payload = None
    if model is not None:
        try:
            payload = parse_model(model, request.get_json(silent=True) or {})
        except ValidationError as exc:
            return _invalid_request(exc)
    try:
        session = _store().get(session_id)
    except SessionNotFoundError:
        return _session_missing(session_id)
    workbench = session.state
    with session.lock:
        try:
            extra = action(workbench, payload) if model is not None else action(workbench)
        except WorkbenchError as exc:
            return _rejected(exc)
        return _state(workbench, session_id, **(extra or {}))


@api_bp.get("/operations")
def list_operations() -> Response:
    return ok({"operations": sorted(OPERATIONS)})


@api_bp.post("/sessions")
def create_session() -> Response:
    session = _store().create()
    return ok(session.state.snapshot(), status=201, session_id=session.session_id)


@api_bp.get("/sessions/<session_id>")
def get_session(session_id: str) -> Response:
    return _run(session_id, None, lambda workbench: None)


@api_bp.delete("/sessions/<session_id>")
def delete_session(session_id: str) -> Response:
    if not _store().delete(session_id):
        return _session_missing(session_id)
    return ok({"deleted": True}, session_id=session_id)


@api_bp.post("/sessions/<session_id>/operations")
def perform_operation(session_id: str) -> Response:
    return _run(session_id, OperationPayload, lambda wb, p: {"performed": wb.perform(p.operation).to_dict()})


@api_bp.post("/sessions/<session_id>/select")
def select_operands(session_id: str) -> Response:
    return _run(session_id, SelectPayload, lambda wb, p: wb.select(p.a, p.b))


@api_bp.post("/sessions/<session_id>/cells")
def update_cell(session_id: str) -> Response:
    return _run(
        session_id,
        CellPayload,
        lambda wb, p: {"stored_value": wb.update_cell(p.matrix, p.row, p.col, p.value)},
    )


@api_bp.post("/sessions/<session_id>/rows")
def add_row(session_id: str) -> Response:
    return _run(session_id, ShapePayload, lambda wb, p: wb.add_row(p.matrix))


@api_bp.delete("/sessions/<session_id>/rows")
def remove_row(session_id: str) -> Response:
    return _run(session_id, ShapePayload, lambda wb, p: wb.remove_row(p.matrix, p.index))


@api_bp.post("/sessions/<session_id>/cols")
def add_col(session_id: str) -> Response:
    return _run(session_id, ShapePayload, lambda wb, p: wb.add_col(p.matrix))


@api_bp.delete("/sessions/<session_id>/cols")
def remove_col(session_id: str) -> Response:
    return _run(session_id, ShapePayload, lambda wb, p: wb.remove_col(p.matrix, p.index))


@api_bp.post("/sessions/<session_id>/matrices")
def add_matrix(session_id: str) -> Response:
    return _run(session_id, None, lambda wb: {"added": wb.add_matrix()})


@api_bp.delete("/sessions/<session_id>/matrices/<int:index>")
def remove_matrix(session_id: str, index: int) -> Response:
    return _run(session_id, None, lambda wb: {"removed": wb.remove_matrix(index)})


@api_bp.post("/sessions/<session_id>/result/store")
def store_result(session_id: str) -> Response:
    return _run(session_id, None, lambda wb: {"stored": wb.store_result()})


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "list_operations",
    "create_session",
    "get_session",
    "delete_session",
    "perform_operation",
    "select_operands",
    "update_cell",
    "add_row",
    "remove_row",
    "add_col",
    "remove_col",
    "add_matrix",
    "remove_matrix",
    "store_result",
]
