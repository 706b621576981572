"""Editable collection of matrices with a selected operand pair."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from typing import Callable, Sequence

from common.logging import get_logger

from . import linalg
from .linalg import Grid, MatrixError

logger = get_logger(__name__)

MIN_MATRICES = 2
ERROR_LABEL = "Error"
INITIAL_MATRICES: tuple[Grid, ...] = (
    [[1.0, 2.0], [3.0, 4.0]],
    [[5.0, 6.0], [7.0, 8.0]],
)


class WorkbenchError(ValueError):
    """Raised for commands that reference something that does not exist."""


def label_for(index: int) -> str:
    """Spreadsheet style operand label: 0 → A, 25 → Z, 26 → AA."""

    if index < 0:
        raise WorkbenchError("Matrix index must be non-negative")
    label = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        label = chr(ord("A") + remainder) + label
    return label


@dataclass(frozen=True, slots=True)
class MatrixResult:
    """Last computed output. ``value`` is always two dimensional."""

    value: tuple[tuple[float, ...], ...]
    label: str

    @classmethod
    def from_grid(cls, grid: Grid, label: str) -> "MatrixResult":
        return cls(value=tuple(tuple(row) for row in grid), label=label)

    @property
    def is_error(self) -> bool:
        return self.label == ERROR_LABEL

    @property
    def is_scalar(self) -> bool:
        return len(self.value) == 1 and len(self.value[0]) == 1

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.value), len(self.value[0])

    def to_grid(self) -> Grid:
        return [list(row) for row in self.value]

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "label": self.label,
            "kind": "scalar" if self.is_scalar else "matrix",
            "rows": self.shape[0],
            "cols": self.shape[1],
            "value": self.to_grid(),
        }
        if self.is_scalar:
            payload["scalar"] = self.value[0][0]
        return payload


INITIAL_RESULT = MatrixResult.from_grid([[0.0]], "Result")
ERROR_RESULT = MatrixResult.from_grid([[0.0]], ERROR_LABEL)


@dataclass(frozen=True, slots=True)
class Operation:
    operands: str  # "ab", "a" or "b"
    compute: Callable[..., Grid]
    label: str


def _det(grid: Grid) -> Grid:
    return [[linalg.determinant(grid)]]


OPERATIONS: dict[str, Operation] = {
    "add": Operation("ab", linalg.add, "{a} + {b}"),
    "subtract": Operation("ab", linalg.subtract, "{a} - {b}"),
    "multiply": Operation("ab", linalg.multiply, "{a} × {b}"),
    "transpose_a": Operation("a", linalg.transpose, "{a}^T"),
    "transpose_b": Operation("b", linalg.transpose, "{b}^T"),
    "det_a": Operation("a", _det, "det({a})"),
    "det_b": Operation("b", _det, "det({b})"),
    "inv_a": Operation("a", linalg.inverse, "{a}^(-1)"),
    "inv_b": Operation("b", linalg.inverse, "{b}^(-1)"),
}


def coerce_cell(value: object) -> float:
    """Turn user input into a cell value; anything unusable becomes 0."""

    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    else:
        text = str(value).strip() if value is not None else ""
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def _validate_grid(grid: Sequence[Sequence[object]]) -> Grid:
    if not grid or not grid[0]:
        raise WorkbenchError("A matrix needs at least one row and one column")
    width = len(grid[0])
    if any(len(row) != width for row in grid):
        raise WorkbenchError("Matrix rows must all have the same length")
    return [[coerce_cell(cell) for cell in row] for row in grid]


class MatrixWorkbench:
    """Ordered matrices addressed by position plus the current result.

    Invariants: every matrix is rectangular and at least 1x1, at least two
    matrices exist and both operand indices point at one of them.
    """

    def __init__(self, matrices: Sequence[Sequence[Sequence[object]]] | None = None) -> None:
        source = INITIAL_MATRICES if matrices is None else matrices
        grids = [_validate_grid(grid) for grid in source]
        if len(grids) < MIN_MATRICES:
            raise WorkbenchError(f"At least {MIN_MATRICES} matrices are required")
        self._matrices: list[Grid] = grids
        self.index_a = 0
        self.index_b = 1
        self.result: MatrixResult = INITIAL_RESULT

    # ---- Accessors -------------------------------------------------------
    @property
    def matrices(self) -> list[Grid]:
        return copy.deepcopy(self._matrices)

    def __len__(self) -> int:
        return len(self._matrices)

    def matrix(self, index: int) -> Grid:
        return copy.deepcopy(self._matrix(index))

    def _matrix(self, index: int) -> Grid:
        if not 0 <= index < len(self._matrices):
            raise WorkbenchError(f"No matrix at index {index}")
        return self._matrices[index]

    # ---- Operand selection -----------------------------------------------
    def select(self, index_a: int, index_b: int) -> None:
        self._matrix(index_a)
        self._matrix(index_b)
        self.index_a, self.index_b = index_a, index_b

    # ---- Operations ------------------------------------------------------
    def perform(self, name: str) -> MatrixResult:
        """Run ``name`` on the selected operands and publish the result.

        Precondition failures never raise; they publish an ``Error`` result.
        """

        operation = OPERATIONS.get(name)
        if operation is None:
            raise WorkbenchError(f"Unknown operation '{name}'")
        label_a, label_b = label_for(self.index_a), label_for(self.index_b)
        a = self._matrices[self.index_a]
        b = self._matrices[self.index_b]
        args = {"ab": (a, b), "a": (a,), "b": (b,)}[operation.operands]
        try:
            grid = operation.compute(*args)
        except MatrixError as exc:
            logger.debug("%s on %s/%s failed: %s", name, label_a, label_b, exc)
            self.result = ERROR_RESULT
        else:
            self.result = MatrixResult.from_grid(grid, operation.label.format(a=label_a, b=label_b))
        return self.result

    def store_result(self) -> int | None:
        """Append the result as a new matrix; return its index."""

        if self.result.is_error:
            return None
        self._matrices.append(self.result.to_grid())
        return len(self._matrices) - 1

    # ---- Shape editing ---------------------------------------------------
    def add_row(self, index: int) -> None:
        grid = self._matrix(index)
        grid.append([0.0] * len(grid[0]))

    def remove_row(self, index: int, row: int | None = None) -> None:
        grid = self._matrix(index)
        row = len(grid) - 1 if row is None else row
        if not 0 <= row < len(grid):
            raise WorkbenchError(f"No row {row} in matrix {label_for(index)}")
        if len(grid) <= 1:
            return
        del grid[row]

    def add_col(self, index: int) -> None:
        for row in self._matrix(index):
            row.append(0.0)

    def remove_col(self, index: int, col: int | None = None) -> None:
        grid = self._matrix(index)
        width = len(grid[0])
        col = width - 1 if col is None else col
        if not 0 <= col < width:
            raise WorkbenchError(f"No column {col} in matrix {label_for(index)}")
        if width <= 1:
            return
        for row in grid:
            del row[col]

    def add_matrix(self) -> int:
        self._matrices.append([[0.0, 0.0], [0.0, 0.0]])
        return len(self._matrices) - 1

    def remove_matrix(self, index: int) -> bool:
        self._matrix(index)
        if len(self._matrices) <= MIN_MATRICES:
            return False
        del self._matrices[index]
        self.index_a, self.index_b = 0, 1
        return True

    def update_cell(self, index: int, row: int, col: int, value: object) -> float:
        grid = self._matrix(index)
        if not (0 <= row < len(grid) and 0 <= col < len(grid[0])):
            raise WorkbenchError(f"No cell ({row}, {col}) in matrix {label_for(index)}")
        grid[row][col] = coerce_cell(value)
        return grid[row][col]

    def snapshot(self) -> dict[str, object]:
        return {
            "matrices": [
                {
                    "index": position,
                    "label": label_for(position),
                    "rows": len(grid),
                    "cols": len(grid[0]),
                    "value": copy.deepcopy(grid),
                }
                for position, grid in enumerate(self._matrices)
            ],
            "selected": {
                "a": {"index": self.index_a, "label": label_for(self.index_a)},
                "b": {"index": self.index_b, "label": label_for(self.index_b)},
            },
            "result": self.result.to_dict(),
            "operations": sorted(OPERATIONS),
        }


__all__ = [
    "ERROR_LABEL",
    "INITIAL_MATRICES",
    "MIN_MATRICES",
    "MatrixResult",
    "MatrixWorkbench",
    "OPERATIONS",
    "WorkbenchError",
    "coerce_cell",
    "label_for",
]
