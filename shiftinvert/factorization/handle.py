"""Factorization lifecycle for shift-invert solves."""

import logging
from enum import Enum, auto
from typing import Any, Optional, Union
import numpy as np
from numpy.typing import NDArray, ArrayLike

from shiftinvert.algebra.protocols import FactorizationBackend
from shiftinvert.algebra.superlu import SuperLUBackend
from shiftinvert.core.config import (
    ColumnOrdering,
    OperatorConfig,
    check_pivot_threshold,
)
from shiftinvert.core.errors import (
    NotFactoredError,
    NotSquareError,
    UndefinedMatrixError,
    error_from_status,
)
from shiftinvert.core.matrix import SparseColumnMatrix, as_vector
from shiftinvert.factorization.shift import subtract_shift_from_diagonal

logger = logging.getLogger(__name__)


class FactorState(Enum):
    """Lifecycle of the stored factors."""
    UNFACTORED = auto()
    FACTORED = auto()


class FactorizationHandle:
    """
    Owns the LU factors and permutations of one square matrix.

    Re-factoring always releases the previous factors before the backend is
    called, so two factorizations are never alive at once. A failed attempt
    leaves the handle UNFACTORED.
    """

    def __init__(
        self,
        backend: Optional[FactorizationBackend] = None,
        pivot_threshold: float = 0.1,
        ordering: Union[ColumnOrdering, int, str] = ColumnOrdering.MMD_ATA,
    ) -> None:
        """
        Args:
            backend: Direct sparse solver (SuperLU when None)
            pivot_threshold: Partial pivoting tolerance in [0, 1]
            ordering: Fill-reducing column ordering
        """
        self.backend = backend if backend is not None else SuperLUBackend()
        self.pivot_threshold = check_pivot_threshold(pivot_threshold)
        self.ordering = ColumnOrdering.coerce(ordering)
        self.perm_r: Optional[NDArray] = None
        self.perm_c: Optional[NDArray] = None
        self.state = FactorState.UNFACTORED
        self._factors: Optional[Any] = None
        self._shift: Optional[complex] = None
        self._n = 0

    @classmethod
    def from_config(
        cls,
        config: OperatorConfig,
        backend: Optional[FactorizationBackend] = None,
    ) -> "FactorizationHandle":
        return cls(backend, config.pivot_threshold, config.ordering)

    @property
    def factored(self) -> bool:
        return self.state == FactorState.FACTORED

    @property
    def shift(self) -> Optional[complex]:
        """Shift of the factored matrix, None when A itself was factored."""
        return self._shift

    @property
    def n(self) -> int:
        return self._n

    def attach(self, matrix: SparseColumnMatrix) -> None:
        """Drop all state and reserve permutations for a newly defined matrix."""
        self.release()
        if matrix.is_defined and matrix.is_square:
            self._reserve(matrix.n)

    def factor(self, matrix: SparseColumnMatrix) -> None:
        """Factor A."""
        self._prepare(matrix, "factor")
        self._run(matrix, None, "factor")

    def factor_shifted(self, matrix: SparseColumnMatrix, sigma: complex) -> None:
        """Factor A - sigma I; the shifted copy is dropped on every path."""
        self._prepare(matrix, "factor_shifted")
        shifted = subtract_shift_from_diagonal(matrix, sigma)
        try:
            self._run(shifted, sigma, "factor_shifted")
        finally:
            shifted.release()

    def solve(self, v: ArrayLike, out: Optional[NDArray] = None) -> NDArray:
        """
        Solve (A or A - sigma I) w = v with the stored factors.

        Args:
            v: Right-hand side of length n
            out: Buffer receiving the solution; may be v itself

        Returns:
            The solution (out when given)
        """
        if not self.factored:
            raise NotFactoredError("solve")
        v = as_vector(v, self._n, "solve")
        solution = self.backend.solve(self._factors, v)
        if out is None:
            return solution
        as_vector(out, self._n, "solve")
        if not np.can_cast(solution.dtype, out.dtype, casting="same_kind"):
            raise ValueError(
                f"solve: cannot store a {solution.dtype} solution "
                f"in a {out.dtype} buffer"
            )
        out[...] = solution
        return out

    def release_factors(self) -> None:
        """Free the stored factors and return to UNFACTORED."""
        if self._factors is not None:
            self.backend.release(self._factors)
            self._factors = None
            logger.debug("Released factors of order %d", self._n)
        self.state = FactorState.UNFACTORED
        self._shift = None

    def release(self) -> None:
        """Free factors and permutation storage."""
        self.release_factors()
        self.perm_r = None
        self.perm_c = None
        self._n = 0

    def _reserve(self, n: int) -> None:
        self.perm_r = np.empty(n, dtype=np.intc)
        self.perm_c = np.empty(n, dtype=np.intc)
        self._n = n

    def _prepare(self, matrix: SparseColumnMatrix, where: str) -> None:
        if not matrix.is_defined:
            raise UndefinedMatrixError(where)
        if not matrix.is_square:
            raise NotSquareError(where)
        self.release_factors()
        if self.perm_r is None or self._n != matrix.n:
            self._reserve(matrix.n)

    def _run(
        self,
        matrix: SparseColumnMatrix,
        sigma: Optional[complex],
        where: str,
    ) -> None:
        logger.debug(
            "%s: order %d, nnz %d, ordering %s, threshold %g",
            where, matrix.n, matrix.nnz, self.ordering.name, self.pivot_threshold,
        )
        factors, info = self.backend.factor(
            matrix, self.pivot_threshold, self.ordering, self.perm_r, self.perm_c
        )
        error = error_from_status(info, matrix.n, where)
        if error is not None:
            if factors is not None:
                self.backend.release(factors)
            logger.debug("%s failed with status %d", where, info)
            raise error

        self._factors = factors
        self._shift = sigma
        self.state = FactorState.FACTORED
