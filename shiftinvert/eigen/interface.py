"""Operator interface for external eigensolvers."""

import logging
from typing import Callable, Optional, Tuple
import numpy as np
import scipy.sparse.linalg
from numpy.typing import NDArray, ArrayLike

from shiftinvert.algebra.protocols import FactorizationBackend
from shiftinvert.core.config import OperatorConfig
from shiftinvert.core.errors import NotFactoredError
from shiftinvert.core.matrix import SparseColumnMatrix
from shiftinvert.factorization.handle import FactorizationHandle

logger = logging.getLogger(__name__)

OPERATOR_KINDS = ("multiply", "normal", "gram", "bordered", "inverse")


class LinearOperator:
    """
    Provides A v, A^T v, A^T A v, A A^T v, the bordered product and
    (A - sigma I)^{-1} v to an outer eigensolver.

    The eigensolver treats each operation as a plain function v -> w and
    calls them one at a time; an instance must not be shared between
    concurrent solvers.
    """

    def __init__(
        self,
        matrix: Optional[SparseColumnMatrix] = None,
        config: Optional[OperatorConfig] = None,
        backend: Optional[FactorizationBackend] = None,
    ):
        """
        Initialize operator.

        Args:
            matrix: Matrix to wrap (an undefined one is created when None)
            config: Pivot threshold, ordering and validation settings
            backend: Direct sparse solver (SuperLU when None)
        """
        self.config = config if config is not None else OperatorConfig()
        self.matrix = matrix if matrix is not None else SparseColumnMatrix()
        self.handle = FactorizationHandle.from_config(self.config, backend)
        self.handle.attach(self.matrix)

    @classmethod
    def from_arrays(
        cls,
        rows: int,
        cols: int,
        nnz: int,
        values: ArrayLike,
        row_indices: ArrayLike,
        col_ptr: ArrayLike,
        config: Optional[OperatorConfig] = None,
        backend: Optional[FactorizationBackend] = None,
    ) -> "LinearOperator":
        """Operator over caller-owned CSC arrays."""
        operator = cls(config=config, backend=backend)
        operator.define(rows, cols, nnz, values, row_indices, col_ptr)
        return operator

    @classmethod
    def from_scipy(
        cls,
        A,
        config: Optional[OperatorConfig] = None,
        backend: Optional[FactorizationBackend] = None,
    ) -> "LinearOperator":
        """Operator over a copy of a scipy sparse matrix or dense array."""
        config = config if config is not None else OperatorConfig()
        matrix = SparseColumnMatrix.from_scipy(A, check=config.check)
        return cls(matrix, config, backend)

    @classmethod
    def from_file(
        cls,
        path,
        config: Optional[OperatorConfig] = None,
        backend: Optional[FactorizationBackend] = None,
    ) -> "LinearOperator":
        """Operator over a Matrix Market or Harwell-Boeing file."""
        config = config if config is not None else OperatorConfig()
        matrix = SparseColumnMatrix.from_file(path, check=config.check)
        return cls(matrix, config, backend)

    def define(
        self,
        rows: int,
        cols: int,
        nnz: int,
        values: ArrayLike,
        row_indices: ArrayLike,
        col_ptr: ArrayLike,
        check: Optional[bool] = None,
    ) -> None:
        """
        Bind CSC arrays, dropping any previous matrix and factors.

        Args:
            rows, cols, nnz: Matrix dimensions and entry count
            values, row_indices, col_ptr: CSC arrays (0-based)
            check: Validate structure (config.check when None)
        """
        if check is None:
            check = self.config.check
        self.matrix.define(rows, cols, nnz, values, row_indices, col_ptr, check)
        self.handle.attach(self.matrix)

    @property
    def shape(self) -> tuple[int, int]:
        return self.matrix.shape

    @property
    def nnz(self) -> int:
        return self.matrix.nnz

    @property
    def dtype(self) -> np.dtype:
        return self.matrix.dtype

    @property
    def is_defined(self) -> bool:
        return self.matrix.is_defined

    @property
    def is_factored(self) -> bool:
        return self.handle.factored

    @property
    def shift(self) -> Optional[complex]:
        """Shift of the current factorization (None for A itself)."""
        return self.handle.shift

    def multiply(self, v: ArrayLike) -> NDArray:
        """A @ v."""
        return self.matrix.multiply(v)

    def multiply_transpose(self, v: ArrayLike) -> NDArray:
        """A.T @ v."""
        return self.matrix.multiply_transpose(v)

    def multiply_normal(self, v: ArrayLike) -> NDArray:
        """A.T @ A @ v."""
        return self.matrix.multiply_normal(v)

    def multiply_gram(self, v: ArrayLike) -> NDArray:
        """A @ A.T @ v."""
        return self.matrix.multiply_gram(v)

    def multiply_bordered(self, v: ArrayLike) -> NDArray:
        """[[0, A], [A.T, 0]] @ v."""
        return self.matrix.multiply_bordered(v)

    def factor(self) -> None:
        """Factor A for apply_inverse."""
        self.handle.factor(self.matrix)

    def factor_shifted(self, sigma: complex) -> None:
        """Factor A - sigma I for apply_inverse."""
        self.handle.factor_shifted(self.matrix, sigma)

    def apply_inverse(
        self, v: ArrayLike, out: Optional[NDArray] = None
    ) -> NDArray:
        """
        (A - sigma I)^{-1} v using the current factorization.

        Args:
            v: Vector of length n
            out: Optional output buffer, may alias v

        Returns:
            Solution vector
        """
        return self.handle.solve(v, out)

    def copy(self) -> "LinearOperator":
        """
        New operator over the same matrix arrays.

        Factors cannot be duplicated, so the copy always starts unfactored.
        """
        other = LinearOperator(self.matrix.copy(), self.config, self.handle.backend)
        if self.is_factored:
            logger.warning(
                "Copied operator does not inherit the factorization; "
                "call factor() or factor_shifted() on the copy"
            )
        return other

    def close(self) -> None:
        """Release factors, permutations and the matrix binding."""
        self.handle.release()
        self.matrix.release()

    def __enter__(self) -> "LinearOperator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def scipy_operator(self, kind: str = "multiply") -> scipy.sparse.linalg.LinearOperator:
        """
        Wrap one product as a scipy.sparse.linalg.LinearOperator.

        Args:
            kind: "multiply", "normal", "gram", "bordered" or "inverse"

        Returns:
            Operator usable by scipy.sparse.linalg.eigs/eigsh
        """
        m, n = self.shape
        dtype = self.dtype
        rmatvec: Optional[Callable[[NDArray], NDArray]] = None

        if kind == "multiply":
            shape, matvec = (m, n), self.multiply
            rmatvec = self._adjoint
        elif kind == "normal":
            shape, matvec = (n, n), self.multiply_normal
        elif kind == "gram":
            shape, matvec = (m, m), self.multiply_gram
        elif kind == "bordered":
            shape, matvec = (m + n, m + n), self.multiply_bordered
        elif kind == "inverse":
            if not self.is_factored:
                raise NotFactoredError("scipy_operator")
            shape, matvec = (n, n), self.apply_inverse
            if self.shift is not None:
                dtype = np.result_type(dtype, self.shift)
        else:
            raise ValueError(f"kind must be one of {OPERATOR_KINDS}, got {kind!r}")

        return scipy.sparse.linalg.LinearOperator(
            shape,
            matvec=lambda x: matvec(np.ravel(x)),
            rmatvec=None if rmatvec is None else lambda x: rmatvec(np.ravel(x)),
            dtype=dtype,
        )

    def scipy_interface(
        self,
    ) -> Tuple[scipy.sparse.linalg.LinearOperator, scipy.sparse.linalg.LinearOperator]:
        """
        Returns (A, OPinv) for scipy.sparse.linalg.eigs/eigsh in
        shift-invert mode. The operator must already be factored.
        """
        return self.scipy_operator("multiply"), self.scipy_operator("inverse")

    def _adjoint(self, v: NDArray) -> NDArray:
        if np.iscomplexobj(self.matrix.values):
            return np.conj(self.multiply_transpose(np.conj(v)))
        return self.multiply_transpose(v)

    def __repr__(self) -> str:
        state = "factored" if self.is_factored else "unfactored"
        return f"LinearOperator({self.matrix!r}, {state})"
