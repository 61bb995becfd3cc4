"""Tests for the compressed sparse column matrix."""

import numpy as np
import pytest
import scipy.sparse

from shiftinvert.core.matrix import SparseColumnMatrix
from shiftinvert.core.errors import StructuralError, UndefinedMatrixError


def tridiagonal_arrays():
    """4x4 tridiag(-1, 2, -1) in CSC form."""
    values = np.array([2.0, -1.0, -1.0, 2.0, -1.0, -1.0, 2.0, -1.0, -1.0, 2.0])
    rows = np.array([0, 1, 0, 1, 2, 1, 2, 3, 2, 3])
    col_ptr = np.array([0, 2, 5, 8, 10])
    return values, rows, col_ptr


def tridiagonal_dense():
    return 2.0 * np.eye(4) - np.eye(4, k=1) - np.eye(4, k=-1)


def rectangular_matrix():
    """3x2 matrix [[1, 0], [2, 3], [0, 4]]."""
    matrix = SparseColumnMatrix()
    matrix.define(
        3, 2, 4,
        np.array([1.0, 2.0, 3.0, 4.0]),
        np.array([0, 1, 1, 2]),
        np.array([0, 2, 4]),
    )
    return matrix


def random_sparse(m, n, seed=0):
    rng = np.random.default_rng(seed)
    dense = rng.standard_normal((m, n)) * (rng.random((m, n)) < 0.4)
    return dense, SparseColumnMatrix.from_scipy(dense)


def test_define_valid_tridiagonal():
    """Valid CSC arrays define a matrix that passes validation."""
    values, rows, col_ptr = tridiagonal_arrays()
    matrix = SparseColumnMatrix()
    assert not matrix.is_defined

    matrix.define(4, 4, 10, values, rows, col_ptr)

    assert matrix.is_defined
    assert matrix.is_square
    assert matrix.shape == (4, 4)
    assert matrix.nnz == 10
    assert matrix.check_structure()
    matrix.validate()
    assert np.allclose(matrix.to_dense(), tridiagonal_dense())


def test_define_does_not_copy_caller_arrays():
    """Caller-supplied arrays are bound, not copied."""
    values, rows, col_ptr = tridiagonal_arrays()
    matrix = SparseColumnMatrix()
    matrix.define(4, 4, 10, values, rows, col_ptr)

    assert matrix.owns_data is False
    assert np.shares_memory(matrix.values, values)
    assert np.shares_memory(matrix.row_indices, rows)


def test_integer_values_promoted_to_float():
    values, rows, col_ptr = tridiagonal_arrays()
    matrix = SparseColumnMatrix()
    matrix.define(4, 4, 10, values.astype(int), rows, col_ptr)

    assert matrix.dtype == np.float64


@pytest.mark.parametrize("bad_row", [-1, 4, 100])
def test_any_out_of_range_row_index_fails(bad_row):
    """Moving any single row index outside [0, m) is detected."""
    values, rows, col_ptr = tridiagonal_arrays()

    for k in range(len(rows)):
        mutated = rows.copy()
        mutated[k] = bad_row
        matrix = SparseColumnMatrix()

        with pytest.raises(StructuralError):
            matrix.define(4, 4, 10, values, mutated, col_ptr)

        matrix.define(4, 4, 10, values, mutated, col_ptr, check=False)
        assert not matrix.check_structure()


@pytest.mark.parametrize("dtype", [np.int64, np.int32, np.uint32, np.uint64])
def test_unsorted_rows_rejected(dtype):
    values, rows, col_ptr = tridiagonal_arrays()
    rows = rows.astype(dtype)
    rows[2], rows[3] = rows[3], rows[2]  # column 1 becomes [1, 0, 2]

    with pytest.raises(StructuralError, match="strictly increasing"):
        SparseColumnMatrix().define(4, 4, 10, values, rows, col_ptr.astype(dtype))


@pytest.mark.parametrize("dtype", [np.uint32, np.uint64])
def test_unsigned_descending_rows_in_single_column(dtype):
    with pytest.raises(StructuralError):
        SparseColumnMatrix().define(
            3, 1, 2,
            np.array([1.0, 2.0]),
            np.array([2, 1], dtype=dtype),
            np.array([0, 2], dtype=dtype),
        )


def test_unsigned_indices_accepted_when_valid():
    values, rows, col_ptr = tridiagonal_arrays()
    matrix = SparseColumnMatrix()

    matrix.define(4, 4, 10, values, rows.astype(np.uint32), col_ptr.astype(np.uint64))

    assert matrix.check_structure()
    assert np.allclose(matrix.multiply(np.ones(4)), tridiagonal_dense() @ np.ones(4))


def test_duplicate_rows_rejected():
    values, rows, col_ptr = tridiagonal_arrays()
    rows = rows.copy()
    rows[3] = 0  # column 1 becomes [0, 0, 2]

    with pytest.raises(StructuralError):
        SparseColumnMatrix().define(4, 4, 10, values, rows, col_ptr)


def test_rows_may_decrease_across_columns():
    """Sortedness applies within a column only."""
    matrix = SparseColumnMatrix()
    matrix.define(
        3, 3, 3,
        np.array([1.0, 2.0, 3.0]),
        np.array([2, 0, 1]),
        np.array([0, 1, 2, 3]),
    )
    assert matrix.check_structure()


@pytest.mark.parametrize(
    "col_ptr",
    [
        [1, 2, 5, 8, 10],   # does not start at 0
        [0, 2, 5, 8, 9],    # does not end at nnz
        [0, 5, 2, 8, 10],   # decreasing
    ],
)
@pytest.mark.parametrize("dtype", [np.int64, np.uint32, np.uint64])
def test_column_pointer_defects(col_ptr, dtype):
    values, rows, _ = tridiagonal_arrays()

    with pytest.raises(StructuralError):
        SparseColumnMatrix().define(
            4, 4, 10, values, rows.astype(dtype), np.array(col_ptr, dtype=dtype)
        )


def test_length_mismatch_always_rejected():
    """Array length checks run even when validation is skipped."""
    values, rows, col_ptr = tridiagonal_arrays()

    with pytest.raises(StructuralError):
        SparseColumnMatrix().define(4, 4, 10, values[:5], rows, col_ptr, check=False)
    with pytest.raises(StructuralError):
        SparseColumnMatrix().define(4, 4, 10, values, rows, col_ptr[:-1], check=False)


def test_non_integer_indices_rejected():
    values, rows, col_ptr = tridiagonal_arrays()

    with pytest.raises(StructuralError):
        SparseColumnMatrix().define(4, 4, 10, values, rows.astype(float), col_ptr)


def test_failed_define_keeps_previous_binding():
    """A matrix is never left partially defined."""
    values, rows, col_ptr = tridiagonal_arrays()
    matrix = SparseColumnMatrix()
    matrix.define(4, 4, 10, values, rows, col_ptr)

    bad_rows = rows.copy()
    bad_rows[0] = 7
    with pytest.raises(StructuralError):
        matrix.define(4, 4, 10, values, bad_rows, col_ptr)

    assert matrix.is_defined
    assert np.allclose(matrix.to_dense(), tridiagonal_dense())


@pytest.mark.parametrize(
    "operation",
    [
        "multiply",
        "multiply_transpose",
        "multiply_normal",
        "multiply_gram",
        "multiply_bordered",
    ],
)
def test_products_require_defined_matrix(operation):
    matrix = SparseColumnMatrix()

    with pytest.raises(UndefinedMatrixError):
        getattr(matrix, operation)(np.ones(4))


def test_multiply_matches_dense():
    dense, matrix = random_sparse(5, 3)
    v = np.array([1.0, -2.0, 0.5])

    assert np.allclose(matrix.multiply(v), dense @ v)


def test_multiply_transpose_matches_dense():
    dense, matrix = random_sparse(5, 3)
    v = np.arange(5, dtype=float)

    assert np.allclose(matrix.multiply_transpose(v), dense.T @ v)


def test_multiply_transpose_with_empty_columns():
    """Columns without entries produce zeros."""
    matrix = SparseColumnMatrix()
    matrix.define(
        3, 4, 2,
        np.array([5.0, 7.0]),
        np.array([1, 2]),
        np.array([0, 0, 1, 1, 2]),
    )
    w = matrix.multiply_transpose(np.array([1.0, 2.0, 3.0]))

    assert np.allclose(w, [0.0, 10.0, 0.0, 21.0])


def test_normal_product_equals_composition():
    """A^T A v agrees with the two primitive products chained."""
    _, matrix = random_sparse(6, 4, seed=3)
    rng = np.random.default_rng(7)

    for _ in range(5):
        v = rng.standard_normal(4)
        expected = matrix.multiply_transpose(matrix.multiply(v))
        assert np.allclose(matrix.multiply_normal(v), expected)


def test_gram_product_matches_dense():
    dense, matrix = random_sparse(6, 4, seed=5)
    v = np.linspace(-1.0, 1.0, 6)

    assert matrix.multiply_gram(v).shape == (6,)
    assert np.allclose(matrix.multiply_gram(v), dense @ dense.T @ v)


def test_bordered_product_matches_augmented_matrix():
    matrix = rectangular_matrix()
    dense = matrix.to_dense()
    augmented = np.block([
        [np.zeros((3, 3)), dense],
        [dense.T, np.zeros((2, 2))],
    ])
    v = np.array([1.0, 2.0, 3.0, 4.0, 5.0])

    w = matrix.multiply_bordered(v)

    assert np.allclose(w, augmented @ v)
    assert np.allclose(w[:3], dense @ v[3:])
    assert np.allclose(w[3:], dense.T @ v[:3])


def test_wrong_vector_length_raises():
    matrix = rectangular_matrix()

    with pytest.raises(ValueError):
        matrix.multiply(np.ones(3))
    with pytest.raises(ValueError):
        matrix.multiply_transpose(np.ones(2))
    with pytest.raises(ValueError):
        matrix.multiply_bordered(np.ones(4))


def test_complex_values():
    dense = np.array([[1.0 + 1.0j, 0.0], [2.0, -1.0j]])
    matrix = SparseColumnMatrix.from_scipy(dense)
    v = np.array([1.0, 1.0j])

    assert matrix.dtype == np.complex128
    assert np.allclose(matrix.multiply(v), dense @ v)
    assert np.allclose(matrix.multiply_transpose(v), dense.T @ v)


def test_from_scipy_sums_duplicates_and_sorts():
    coo = scipy.sparse.coo_matrix(
        ([1.0, 2.0, 3.0], ([2, 0, 2], [0, 0, 0])), shape=(3, 1)
    )
    matrix = SparseColumnMatrix.from_scipy(coo)

    assert matrix.owns_data is True
    assert matrix.nnz == 2
    assert list(matrix.row_indices) == [0, 2]
    assert np.allclose(matrix.values, [2.0, 4.0])


def test_copy_shares_arrays():
    values, rows, col_ptr = tridiagonal_arrays()
    matrix = SparseColumnMatrix()
    matrix.define(4, 4, 10, values, rows, col_ptr)

    other = matrix.copy()

    assert other.is_defined
    assert other.owns_data is False
    assert np.shares_memory(other.values, values)


def test_copy_of_undefined_matrix_is_undefined():
    assert not SparseColumnMatrix().copy().is_defined


def test_release_returns_to_undefined():
    matrix = rectangular_matrix()
    matrix.release()

    assert not matrix.is_defined
    assert matrix.shape == (0, 0)
    with pytest.raises(UndefinedMatrixError):
        matrix.multiply(np.ones(2))


def test_diagonal():
    values, rows, col_ptr = tridiagonal_arrays()
    matrix = SparseColumnMatrix()
    matrix.define(4, 4, 10, values, rows, col_ptr)

    assert np.allclose(matrix.diagonal(), [2.0, 2.0, 2.0, 2.0])
