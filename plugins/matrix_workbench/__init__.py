"""Matrix Workbench plugin manifest."""

manifest = {
    "title": "Matrix Workbench",
    "summary": "Build and resize matrices, then add, multiply, transpose, invert or take determinants of a selected pair.",
    "category": "Calculators",
    "blueprint": "matrix_workbench",
    "api": "/api/matrix_workbench",
}

__all__ = ["manifest"]
