"""
shiftinvert: sparse shift-invert linear operators for iterative eigensolvers.

This library provides:
- Compressed sparse column matrices with A v, A^T v, A^T A v, A A^T v
  and bordered products
- Diagonal shifting A - sigma I without re-sorting
- Sparse LU factorization (SuperLU via SciPy) with a typed error taxonomy
- An operator interface usable directly or through scipy.sparse.linalg
"""

import logging

__version__ = "0.1.0"

from shiftinvert.core.config import ColumnOrdering, OperatorConfig
from shiftinvert.core.errors import (
    OperatorError,
    UndefinedMatrixError,
    NotSquareError,
    StructuralError,
    InvalidParameterError,
    MemoryOverflowError,
    SingularMatrixError,
    NotFactoredError,
    CannotReadFileError,
)
from shiftinvert.core.matrix import SparseColumnMatrix
from shiftinvert.factorization.shift import subtract_shift_from_diagonal
from shiftinvert.factorization.handle import FactorizationHandle, FactorState
from shiftinvert.eigen.interface import LinearOperator

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ColumnOrdering",
    "OperatorConfig",
    "OperatorError",
    "UndefinedMatrixError",
    "NotSquareError",
    "StructuralError",
    "InvalidParameterError",
    "MemoryOverflowError",
    "SingularMatrixError",
    "NotFactoredError",
    "CannotReadFileError",
    "SparseColumnMatrix",
    "subtract_shift_from_diagonal",
    "FactorizationHandle",
    "FactorState",
    "LinearOperator",
]
