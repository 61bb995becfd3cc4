"""Diagonal shifting and LU factorization lifecycle."""

from shiftinvert.factorization.shift import subtract_shift_from_diagonal
from shiftinvert.factorization.handle import FactorizationHandle, FactorState

__all__ = [
    "subtract_shift_from_diagonal",
    "FactorizationHandle",
    "FactorState",
]
