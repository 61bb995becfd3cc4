"""Matrix-free and composite product variants."""

from typing import Callable, Optional
import numpy as np
from numpy.typing import NDArray

from shiftinvert.algebra.protocols import MatrixWithProduct


class CallbackMatrix:
    """
    Matrix-free product wrapper.
    Useful when the matrix is only known through its action on a vector.
    """

    def __init__(
        self,
        shape: tuple[int, int],
        multiply: Callable[[NDArray], NDArray],
        multiply_transpose: Optional[Callable[[NDArray], NDArray]] = None,
        dtype=np.float64,
    ):
        """
        Initialize callback matrix.

        Args:
            shape: (m, n) dimensions
            multiply: Function computing A @ v
            multiply_transpose: Function computing A.T @ v (optional)
            dtype: Result type reported to eigensolver adapters
        """
        self.shape = shape
        self.dtype = np.dtype(dtype)
        self._multiply = multiply
        self._multiply_transpose = multiply_transpose

    def multiply(self, v: NDArray) -> NDArray:
        """Compute A @ v."""
        return self._multiply(v)

    def multiply_transpose(self, v: NDArray) -> NDArray:
        """Compute A.T @ v."""
        if self._multiply_transpose is None:
            raise NotImplementedError("Transpose product not provided")
        return self._multiply_transpose(v)

    def __matmul__(self, v: NDArray) -> NDArray:
        """Support A @ v syntax."""
        return self.multiply(v)


class ProductMatrix:
    """
    Composition A B of two product-capable matrices.
    Neither factor is formed explicitly.
    """

    def __init__(self, first: MatrixWithProduct, second: MatrixWithProduct):
        """
        Args:
            first: Left factor A, shape (m, k)
            second: Right factor B, shape (k, n)
        """
        if first.shape[1] != second.shape[0]:
            raise ValueError(
                f"Cannot compose shapes {first.shape} and {second.shape}"
            )
        self.first = first
        self.second = second

    @property
    def shape(self) -> tuple[int, int]:
        return (self.first.shape[0], self.second.shape[1])

    def multiply(self, v: NDArray) -> NDArray:
        """Compute A (B v)."""
        return self.first.multiply(self.second.multiply(v))

    def multiply_transpose(self, v: NDArray) -> NDArray:
        """Compute B^T (A^T v)."""
        return self.second.multiply_transpose(self.first.multiply_transpose(v))

    def __matmul__(self, v: NDArray) -> NDArray:
        return self.multiply(v)
