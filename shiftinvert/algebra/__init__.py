"""Product capability variants and direct-solver backends."""

from shiftinvert.algebra.protocols import MatrixWithProduct, FactorizationBackend
from shiftinvert.algebra.dense import DenseMatrix
from shiftinvert.algebra.operators import CallbackMatrix, ProductMatrix
from shiftinvert.algebra.superlu import SuperLUBackend, SuperLUFactors

__all__ = [
    "MatrixWithProduct",
    "FactorizationBackend",
    "DenseMatrix",
    "CallbackMatrix",
    "ProductMatrix",
    "SuperLUBackend",
    "SuperLUFactors",
]
