"""Exports for the matrix workbench core."""

from .linalg import (
    DimensionError,
    MatrixError,
    SingularMatrixError,
    add,
    determinant,
    inverse,
    multiply,
    subtract,
    transpose,
)
from .workbench import (
    ERROR_LABEL,
    OPERATIONS,
    MatrixResult,
    MatrixWorkbench,
    WorkbenchError,
    coerce_cell,
    label_for,
)

__all__ = [
    "DimensionError",
    "ERROR_LABEL",
    "MatrixError",
    "MatrixResult",
    "MatrixWorkbench",
    "OPERATIONS",
    "SingularMatrixError",
    "WorkbenchError",
    "add",
    "coerce_cell",
    "determinant",
    "inverse",
    "label_for",
    "multiply",
    "subtract",
    "transpose",
]
