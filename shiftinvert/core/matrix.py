"""Compressed sparse column matrix and its product operations."""

import logging
from typing import Optional
import numpy as np
import scipy.sparse
from numpy.typing import NDArray, ArrayLike

from shiftinvert.core.errors import StructuralError, UndefinedMatrixError

logger = logging.getLogger(__name__)


class SparseColumnMatrix:
    """
    Sparse matrix stored in compressed sparse column (CSC) form.

    Indices are 0-based. Column i owns the entries
    ``values[col_ptr[i]:col_ptr[i+1]]`` whose rows are the matching slice of
    ``row_indices``, sorted in strictly increasing order.

    A matrix is created undefined and becomes usable once ``define`` has
    bound its arrays. Arrays handed to ``define`` stay owned by the caller;
    matrices built by ``from_scipy``/``from_file`` own their arrays.
    """

    def __init__(self) -> None:
        self.m = 0
        self.n = 0
        self.nnz = 0
        self.values: Optional[NDArray] = None
        self.row_indices: Optional[NDArray] = None
        self.col_ptr: Optional[NDArray] = None
        self.owns_data = False

    def define(
        self,
        rows: int,
        cols: int,
        nnz: int,
        values: ArrayLike,
        row_indices: ArrayLike,
        col_ptr: ArrayLike,
        check: bool = True,
    ) -> None:
        """
        Bind CSC storage to the matrix.

        Args:
            rows: Number of rows m
            cols: Number of columns n
            nnz: Number of stored entries
            values: Entry values, length >= nnz (real or complex)
            row_indices: Row of each entry, length >= nnz
            col_ptr: Column start offsets, length n + 1
            check: Scan the arrays for CSC invariant violations

        Raises:
            StructuralError: Arrays are malformed or violate the invariants.
                The matrix keeps its previous binding in that case.
        """
        m, n, nnz = int(rows), int(cols), int(nnz)
        if m < 0 or n < 0 or nnz < 0:
            raise StructuralError("define", "dimensions must be non-negative")

        values = np.asarray(values)
        if not np.issubdtype(values.dtype, np.inexact):
            values = values.astype(np.float64)
        row_indices = _index_array(row_indices, "row_indices")
        col_ptr = _index_array(col_ptr, "col_ptr")

        if values.ndim != 1 or values.shape[0] < nnz:
            raise StructuralError("define", f"values must hold {nnz} entries")
        if row_indices.ndim != 1 or row_indices.shape[0] < nnz:
            raise StructuralError("define", f"row_indices must hold {nnz} entries")
        if col_ptr.ndim != 1 or col_ptr.shape[0] != n + 1:
            raise StructuralError("define", f"col_ptr must have length {n + 1}")

        if check:
            defect = _structure_defect(m, n, nnz, row_indices, col_ptr)
            if defect is not None:
                raise StructuralError("define", defect)

        self.release()
        self.m, self.n, self.nnz = m, n, nnz
        self.values = values[:nnz]
        self.row_indices = row_indices[:nnz]
        self.col_ptr = col_ptr
        logger.debug("Defined %dx%d matrix with %d non-zeros", m, n, nnz)

    @classmethod
    def from_scipy(cls, A, check: bool = True) -> "SparseColumnMatrix":
        """Build an owning matrix from any scipy sparse matrix or dense array."""
        csc = scipy.sparse.csc_matrix(A, copy=True)
        csc.sum_duplicates()  # leaves indices sorted
        matrix = cls()
        matrix.define(
            csc.shape[0], csc.shape[1], csc.nnz,
            csc.data, csc.indices, csc.indptr,
            check=check,
        )
        matrix.owns_data = True
        return matrix

    @classmethod
    def from_file(cls, path, check: bool = True) -> "SparseColumnMatrix":
        """Load an owning matrix from a Matrix Market or Harwell-Boeing file."""
        from shiftinvert.utils.loader import load_matrix

        m, n, values, row_indices, col_ptr = load_matrix(path)
        matrix = cls()
        matrix.define(m, n, len(values), values, row_indices, col_ptr, check=check)
        matrix.owns_data = True
        return matrix

    def release(self) -> None:
        """Drop the bound arrays and return to the undefined state."""
        if self.is_defined:
            logger.debug("Released %dx%d matrix", self.m, self.n)
        self.m = self.n = self.nnz = 0
        self.values = None
        self.row_indices = None
        self.col_ptr = None
        self.owns_data = False

    def copy(self) -> "SparseColumnMatrix":
        """New matrix bound to the same arrays (non-owning)."""
        other = SparseColumnMatrix()
        if self.is_defined:
            other.define(
                self.m, self.n, self.nnz,
                self.values, self.row_indices, self.col_ptr,
                check=False,
            )
        return other

    @property
    def is_defined(self) -> bool:
        return self.col_ptr is not None

    @property
    def shape(self) -> tuple[int, int]:
        return (self.m, self.n)

    @property
    def is_square(self) -> bool:
        return self.m == self.n

    @property
    def dtype(self) -> np.dtype:
        self._require_defined("dtype")
        return self.values.dtype

    def check_structure(self) -> bool:
        """True when the bound arrays satisfy the CSC invariants."""
        self._require_defined("check_structure")
        defect = _structure_defect(
            self.m, self.n, self.nnz, self.row_indices, self.col_ptr
        )
        return defect is None

    def validate(self) -> None:
        """Raise StructuralError if the bound arrays break an invariant."""
        self._require_defined("validate")
        defect = _structure_defect(
            self.m, self.n, self.nnz, self.row_indices, self.col_ptr
        )
        if defect is not None:
            raise StructuralError("validate", defect)

    def multiply(self, v: ArrayLike) -> NDArray:
        """w = A v, scattering each column into w[row]."""
        self._require_defined("multiply")
        v = as_vector(v, self.n, "multiply")
        w = np.zeros(self.m, dtype=np.result_type(self.values, v))
        counts = np.diff(self.col_ptr)
        np.add.at(w, self.row_indices, self.values * np.repeat(v, counts))
        return w

    def multiply_transpose(self, v: ArrayLike) -> NDArray:
        """w = A^T v, gathering v[row] * value over each column."""
        self._require_defined("multiply_transpose")
        v = as_vector(v, self.m, "multiply_transpose")
        w = np.zeros(self.n, dtype=np.result_type(self.values, v))
        if self.nnz:
            starts = self.col_ptr[:-1]
            nonempty = starts < self.col_ptr[1:]
            products = v[self.row_indices] * self.values
            w[nonempty] = np.add.reduceat(products, starts[nonempty])
        return w

    def multiply_normal(self, v: ArrayLike) -> NDArray:
        """w = A^T A v through one temporary of length m."""
        return self.multiply_transpose(self.multiply(v))

    def multiply_gram(self, v: ArrayLike) -> NDArray:
        """w = A A^T v through one temporary of length n."""
        return self.multiply(self.multiply_transpose(v))

    def multiply_bordered(self, v: ArrayLike) -> NDArray:
        """
        Product with the augmented matrix [[0, A], [A^T, 0]].

        Args:
            v: Vector of length m + n, split as [v1 (m); v2 (n)]

        Returns:
            [A v2; A^T v1]
        """
        self._require_defined("multiply_bordered")
        m, n = self.m, self.n
        v = as_vector(v, m + n, "multiply_bordered")
        w = np.empty(m + n, dtype=np.result_type(self.values, v))
        w[:m] = self.multiply(v[m:])
        w[m:] = self.multiply_transpose(v[:m])
        return w

    def diagonal(self) -> NDArray:
        """Main diagonal, zeros where no entry is stored."""
        return self.to_scipy().diagonal()

    def to_scipy(self, copy: bool = False) -> scipy.sparse.csc_matrix:
        """View (or copy) of the matrix as a scipy CSC matrix."""
        self._require_defined("to_scipy")
        return scipy.sparse.csc_matrix(
            (self.values, self.row_indices, self.col_ptr),
            shape=self.shape,
            copy=copy,
        )

    def to_dense(self) -> NDArray:
        return self.to_scipy().toarray()

    def _require_defined(self, where: str) -> None:
        if not self.is_defined:
            raise UndefinedMatrixError(where)

    def __repr__(self) -> str:
        if not self.is_defined:
            return "SparseColumnMatrix(undefined)"
        return (
            f"SparseColumnMatrix(shape={self.shape}, nnz={self.nnz}, "
            f"dtype={self.values.dtype})"
        )


def as_vector(v: ArrayLike, size: int, where: str) -> NDArray:
    """Coerce v to a 1-D array of the expected length."""
    v = np.asarray(v)
    if v.ndim != 1 or v.shape[0] != size:
        raise ValueError(
            f"{where}: expected a vector of length {size}, got shape {v.shape}"
        )
    return v


def _index_array(x: ArrayLike, name: str) -> NDArray:
    x = np.asarray(x)
    if x.size and not np.issubdtype(x.dtype, np.integer):
        raise StructuralError("define", f"{name} must hold integers")
    if not x.size or np.issubdtype(x.dtype, np.unsignedinteger):
        # unsigned differences wrap around instead of going negative
        x = x.astype(np.intp)
    return x


def _structure_defect(
    m: int, n: int, nnz: int, row_indices: NDArray, col_ptr: NDArray
) -> Optional[str]:
    """Describe the first violated CSC invariant, or None."""
    if col_ptr[0] != 0:
        return "col_ptr[0] must be 0"
    if col_ptr[n] != nnz:
        return f"col_ptr[{n}] = {col_ptr[n]} does not match nnz = {nnz}"
    if np.any(col_ptr[1:] < col_ptr[:-1]):
        return "column pointers are not non-decreasing"
    if nnz == 0:
        return None

    rows = row_indices[:nnz]
    if rows.min() < 0 or rows.max() >= m:
        return f"row index outside [0, {m})"

    # Ordering only applies inside a column; the first entry of a column
    # may be smaller than the last entry of the previous one.
    increasing = rows[1:] > rows[:-1]
    starts = col_ptr[1:n]
    starts = starts[(starts > 0) & (starts < nnz)]
    increasing[starts - 1] = True
    if not np.all(increasing):
        return "row indices are not strictly increasing within a column"
    return None
