"""Diagonal shift of a CSC matrix: A - sigma I."""

import logging
import numpy as np

from shiftinvert.core.errors import NotSquareError, UndefinedMatrixError
from shiftinvert.core.matrix import SparseColumnMatrix

logger = logging.getLogger(__name__)


def subtract_shift_from_diagonal(
    A: SparseColumnMatrix, sigma: complex
) -> SparseColumnMatrix:
    """
    Build A - sigma I without re-sorting.

    Each column i is handled in row order:
      1. entries with row < i are copied,
      2. the diagonal entry becomes value - sigma, or a new entry -sigma
         is inserted when column i stores no diagonal,
      3. entries with row > i are copied.

    Since the new entry lands between the rows above and below the diagonal,
    the output keeps strictly increasing rows per column. The result holds
    nnz(A) plus one entry per column that lacked a diagonal.

    Args:
        A: Square, defined matrix
        sigma: Shift (a complex shift gives a complex result)

    Returns:
        New owning matrix A - sigma I
    """
    if not A.is_defined:
        raise UndefinedMatrixError("subtract_shift_from_diagonal")
    if not A.is_square:
        raise NotSquareError("subtract_shift_from_diagonal")

    n = A.n
    rows = A.row_indices
    cols = np.repeat(np.arange(n), np.diff(A.col_ptr))

    on_diagonal = rows == cols
    has_diagonal = np.zeros(n, dtype=bool)
    has_diagonal[cols[on_diagonal]] = True

    values = A.values.astype(np.result_type(A.values, sigma), copy=True)
    values[on_diagonal] -= sigma

    # A missing diagonal goes right after the entries above it
    missing = np.flatnonzero(~has_diagonal)
    above_counts = np.bincount(cols[rows < cols], minlength=n)
    insert_at = A.col_ptr[missing] + above_counts[missing]

    values = np.insert(values, insert_at, -sigma)
    row_indices = np.insert(rows, insert_at, missing)
    col_ptr = A.col_ptr + np.concatenate(([0], np.cumsum(~has_diagonal)))

    shifted = SparseColumnMatrix()
    shifted.define(
        n, n, A.nnz + missing.size, values, row_indices, col_ptr, check=False
    )
    shifted.owns_data = True
    logger.debug(
        "Shifted %dx%d matrix by %s, %d diagonal entries inserted",
        n, n, sigma, missing.size,
    )
    return shifted
