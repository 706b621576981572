import pytest

from plugins.matrix_workbench.core import (
    DimensionError,
    MatrixWorkbench,
    SingularMatrixError,
    WorkbenchError,
    add,
    coerce_cell,
    determinant,
    inverse,
    label_for,
    multiply,
    transpose,
)


def test_linalg_basics():
    assert add([[1, 2]], [[3, 4]]) == [[4.0, 6.0]]
    assert multiply([[1, 2], [3, 4]], [[5, 6], [7, 8]]) == [[19.0, 22.0], [43.0, 50.0]]
    assert transpose([[1, 2, 3]]) == [[1.0], [2.0], [3.0]]
    assert determinant([[1, 2], [3, 4]]) == pytest.approx(-2.0)


def test_inverse_of_diagonal():
    assert inverse([[2, 0], [0, 4]]) == [[0.5, 0.0], [0.0, 0.25]]


@pytest.mark.parametrize(
    "call, error",
    [
        (lambda: add([[1, 2]], [[1], [2]]), DimensionError),
        (lambda: multiply([[1, 2, 3], [4, 5, 6]], [[1, 2], [3, 4]]), DimensionError),
        (lambda: determinant([[1, 2, 3]]), SingularMatrixError),
        (lambda: inverse([[1, 2], [2, 4]]), SingularMatrixError),
        (lambda: inverse([[0, 0], [0, 0]]), SingularMatrixError),
    ],
)
def test_linalg_preconditions(call, error):
    with pytest.raises(error):
        call()


def test_labels_continue_past_z():
    assert [label_for(i) for i in (0, 1, 25, 26, 27)] == ["A", "B", "Z", "AA", "AB"]


def test_initial_state():
    workbench = MatrixWorkbench()
    assert workbench.matrices == [[[1.0, 2.0], [3.0, 4.0]], [[5.0, 6.0], [7.0, 8.0]]]
    assert (workbench.index_a, workbench.index_b) == (0, 1)
    assert workbench.result.label == "Result"
    assert workbench.result.to_grid() == [[0.0]]


def test_multiply_and_label():
    workbench = MatrixWorkbench()
    result = workbench.perform("multiply")
    assert result.label == "A × B"
    assert result.to_grid() == [[19.0, 22.0], [43.0, 50.0]]


def test_determinant_is_scalar():
    workbench = MatrixWorkbench()
    result = workbench.perform("det_a")
    assert result.is_scalar
    assert result.label == "det(A)"
    assert result.to_dict()["scalar"] == pytest.approx(-2.0)


def test_multiply_mismatch_publishes_error():
    workbench = MatrixWorkbench([[[1, 2, 3], [4, 5, 6]], [[1, 2], [3, 4]]])
    result = workbench.perform("multiply")
    assert result.label == "Error"
    assert result.to_grid() == [[0.0]]
    assert workbench.matrices[0] == [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]


def test_unknown_operation_raises():
    with pytest.raises(WorkbenchError):
        MatrixWorkbench().perform("cross")


def test_dimension_floor():
    workbench = MatrixWorkbench([[[7]], [[1]]])
    workbench.remove_row(0)
    workbench.remove_col(0)
    assert workbench.matrices[0] == [[7.0]]


def test_out_of_range_row_or_col_is_rejected_at_the_floor():
    workbench = MatrixWorkbench([[[7]], [[1]]])
    with pytest.raises(WorkbenchError):
        workbench.remove_row(0, 3)
    with pytest.raises(WorkbenchError):
        workbench.remove_col(0, 1)
    workbench.remove_row(0, 0)
    assert workbench.matrices[0] == [[7.0]]


def test_huge_integer_cell_becomes_zero():
    workbench = MatrixWorkbench()
    assert workbench.update_cell(0, 0, 0, 10**400) == 0.0
    assert workbench.matrices[0] == [[0.0, 2.0], [3.0, 4.0]]


def test_add_and_remove_rows_and_columns():
    workbench = MatrixWorkbench()
    workbench.add_row(0)
    workbench.add_col(0)
    assert workbench.matrices[0] == [[1.0, 2.0, 0.0], [3.0, 4.0, 0.0], [0.0, 0.0, 0.0]]
    workbench.remove_row(0, 0)
    workbench.remove_col(0)
    assert workbench.matrices[0] == [[3.0, 4.0], [0.0, 0.0]]
    with pytest.raises(WorkbenchError):
        workbench.remove_row(0, 5)


def test_operand_floor():
    workbench = MatrixWorkbench()
    assert workbench.remove_matrix(0) is False
    assert len(workbench) == 2


def test_remove_matrix_resets_selection():
    workbench = MatrixWorkbench()
    workbench.add_matrix()
    workbench.select(2, 1)
    assert workbench.remove_matrix(0) is True
    assert (workbench.index_a, workbench.index_b) == (0, 1)
    assert workbench.matrices == [[[5.0, 6.0], [7.0, 8.0]], [[0.0, 0.0], [0.0, 0.0]]]


def test_invalid_selection_is_rejected():
    workbench = MatrixWorkbench()
    with pytest.raises(WorkbenchError):
        workbench.select(0, 4)
    assert (workbench.index_a, workbench.index_b) == (0, 1)


@pytest.mark.parametrize(
    "raw, expected",
    [("2.5", 2.5), ("", 0.0), ("abc", 0.0), ("nan", 0.0), (None, 0.0), (3, 3.0), (10**400, 0.0), ("1e400", 0.0)],
)
def test_coerce_cell(raw, expected):
    assert coerce_cell(raw) == expected


def test_store_result_copies_and_skips_errors():
    workbench = MatrixWorkbench()
    workbench.perform("transpose_a")
    assert workbench.store_result() == 2
    workbench.update_cell(2, 0, 0, "9")
    assert workbench.result.to_grid() == [[1.0, 3.0], [2.0, 4.0]]

    workbench.perform("inv_a")
    workbench.update_cell(0, 0, 0, "2")
    workbench.update_cell(0, 0, 1, "4")
    workbench.update_cell(0, 1, 0, "1")
    workbench.update_cell(0, 1, 1, "2")
    assert workbench.perform("inv_a").label == "Error"
    assert workbench.store_result() is None
    assert len(workbench) == 3
