"""Operator contract consumed by iterative eigensolvers."""

from shiftinvert.eigen.interface import LinearOperator

__all__ = [
    "LinearOperator",
]
