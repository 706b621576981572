"""Linear-algebra primitives over nested lists, backed by :mod:`numpy`.

Every function takes and returns plain ``list[list[float]]`` so callers never
hold numpy arrays. Shape preconditions are checked explicitly instead of
relying on numpy broadcasting.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

Grid = list[list[float]]
GridLike = Sequence[Sequence[float]]

# Relative tolerance below which a pivot is treated as zero.
_RANK_RTOL = 1e-12


class MatrixError(ValueError):
    """Base class for linear-algebra failures."""


class DimensionError(MatrixError):
    """Operand shapes do not satisfy the operation's precondition."""


class SingularMatrixError(MatrixError):
    """Matrix is not square or has no inverse."""


def as_array(grid: GridLike) -> np.ndarray:
    """Convert ``grid`` to a 2-D float array, rejecting ragged input."""

    if not grid or not grid[0]:
        raise DimensionError("Matrix must have at least one row and one column")
    width = len(grid[0])
    if any(len(row) != width for row in grid):
        raise DimensionError("Matrix rows must all have the same length")
    array = np.asarray(grid, dtype=float)
    if not np.all(np.isfinite(array)):
        raise MatrixError("Matrix contains non-finite values")
    return array


def to_grid(array: np.ndarray) -> Grid:
    result = np.atleast_2d(np.asarray(array, dtype=float))
    if not np.all(np.isfinite(result)):
        raise MatrixError("Result contains non-finite values")
    # Normalise -0.0 so results render as 0.
    return [[float(value) + 0.0 for value in row] for row in result.tolist()]


def shape(grid: GridLike) -> tuple[int, int]:
    return as_array(grid).shape  # type: ignore[return-value]


def _require_same_shape(a: np.ndarray, b: np.ndarray, verb: str) -> None:
    if a.shape != b.shape:
        raise DimensionError(
            f"Cannot {verb} a {a.shape[0]}x{a.shape[1]} and a {b.shape[0]}x{b.shape[1]} matrix"
        )


def _require_square(a: np.ndarray, what: str) -> None:
    rows, cols = a.shape
    if rows != cols:
        raise SingularMatrixError(f"{what} requires a square matrix, got {rows}x{cols}")


def add(a: GridLike, b: GridLike) -> Grid:
    left, right = as_array(a), as_array(b)
    _require_same_shape(left, right, "add")
    return to_grid(left + right)


def subtract(a: GridLike, b: GridLike) -> Grid:
    left, right = as_array(a), as_array(b)
    _require_same_shape(left, right, "subtract")
    return to_grid(left - right)


def multiply(a: GridLike, b: GridLike) -> Grid:
    left, right = as_array(a), as_array(b)
    if left.shape[1] != right.shape[0]:
        raise DimensionError(
            f"Cannot multiply a {left.shape[0]}x{left.shape[1]} by a "
            f"{right.shape[0]}x{right.shape[1]} matrix: inner dimensions differ"
        )
    return to_grid(left @ right)


def transpose(a: GridLike) -> Grid:
    return to_grid(as_array(a).T)


def determinant(a: GridLike) -> float:
    array = as_array(a)
    _require_square(array, "Determinant")
    value = float(np.linalg.det(array))
    if not math.isfinite(value):
        raise MatrixError("Determinant is not finite")
    return value + 0.0


def inverse(a: GridLike) -> Grid:
    array = as_array(a)
    _require_square(array, "Inverse")
    singular_values = np.linalg.svd(array, compute_uv=False)
    if singular_values[-1] <= singular_values[0] * _RANK_RTOL:
        raise SingularMatrixError("Matrix is singular and has no inverse")
    try:
        return to_grid(np.linalg.inv(array))
    except np.linalg.LinAlgError as exc:
        raise SingularMatrixError("Matrix is singular and has no inverse") from exc


__all__ = [
    "DimensionError",
    "Grid",
    "MatrixError",
    "SingularMatrixError",
    "add",
    "as_array",
    "determinant",
    "inverse",
    "multiply",
    "shape",
    "subtract",
    "to_grid",
    "transpose",
]
