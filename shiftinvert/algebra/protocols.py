"""Product and factorization protocols."""

from typing import Protocol, Any, Tuple
from numpy.typing import NDArray

from shiftinvert.core.config import ColumnOrdering
from shiftinvert.core.matrix import SparseColumnMatrix


class MatrixWithProduct(Protocol):
    """
    Capability set consumed by eigensolver adapters.
    Implemented by sparse, dense, callback and product matrices alike.
    """

    @property
    def shape(self) -> tuple[int, int]:
        """(m, n) dimensions."""
        ...

    def multiply(self, v: NDArray) -> NDArray:
        """
        Compute A @ v.

        Args:
            v: Vector of length n

        Returns:
            Vector of length m
        """
        ...

    def multiply_transpose(self, v: NDArray) -> NDArray:
        """
        Compute A.T @ v.

        Args:
            v: Vector of length m

        Returns:
            Vector of length n
        """
        ...


class FactorizationBackend(Protocol):
    """
    Protocol for the external direct sparse solver.
    Status codes follow SuperLU: 0 success, < 0 illegal argument,
    1..n singular pivot, > n memory exhausted.
    """

    def factor(
        self,
        matrix: SparseColumnMatrix,
        pivot_threshold: float,
        ordering: ColumnOrdering,
        perm_r: NDArray,
        perm_c: NDArray,
    ) -> Tuple[Any, int]:
        """
        Compute sparse LU factors.

        Args:
            matrix: Square CSC matrix to factor
            pivot_threshold: Partial pivoting tolerance in [0, 1]
            ordering: Fill-reducing column ordering
            perm_r: Output row permutation, length n
            perm_c: Output column permutation, length n

        Returns:
            (factors, info) where factors may be None on failure
        """
        ...

    def solve(self, factors: Any, rhs: NDArray) -> NDArray:
        """
        Solve using precomputed factors.

        Args:
            factors: Object returned by factor
            rhs: Right-hand side

        Returns:
            Solution x
        """
        ...

    def release(self, factors: Any) -> None:
        """
        Free factor storage.

        Args:
            factors: Object returned by factor
        """
        ...
