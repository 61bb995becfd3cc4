"""Core data structures: CSC matrix, configuration and errors."""

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
]
