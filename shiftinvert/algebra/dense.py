"""Dense matrix product variant using NumPy."""

import numpy as np
from numpy.typing import NDArray, ArrayLike

from shiftinvert.core.matrix import as_vector


class DenseMatrix:
    """NumPy implementation of the MatrixWithProduct capability set."""

    def __init__(self, A: ArrayLike) -> None:
        A = np.asarray(A)
        if A.ndim != 2:
            raise ValueError(f"DenseMatrix needs a 2-D array, got {A.ndim}-D")
        if not np.issubdtype(A.dtype, np.inexact):
            A = A.astype(np.float64)
        self.A = A

    @property
    def shape(self) -> tuple[int, int]:
        return self.A.shape

    @property
    def dtype(self) -> np.dtype:
        return self.A.dtype

    def multiply(self, v: ArrayLike) -> NDArray:
        """Compute A @ v."""
        return self.A @ as_vector(v, self.shape[1], "multiply")

    def multiply_transpose(self, v: ArrayLike) -> NDArray:
        """Compute A.T @ v."""
        return self.A.T @ as_vector(v, self.shape[0], "multiply_transpose")
