"""Operator configuration."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ColumnOrdering(Enum):
    """Fill-reducing column ordering applied before factorization."""
    NATURAL = 0         # no permutation
    MMD_ATA = 1         # minimum degree on A^T A
    MMD_AT_PLUS_A = 2   # minimum degree on A^T + A
    COLAMD = 3          # approximate minimum degree, column variant

    @property
    def permc_spec(self) -> str:
        """Name understood by SuperLU."""
        return self.name

    @classmethod
    def coerce(cls, value: Union["ColumnOrdering", int, str]) -> "ColumnOrdering":
        """Accept an enum member, its integer code or its name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown column ordering {value!r}") from None
        return cls(value)


@dataclass(frozen=True)
class OperatorConfig:
    """Settings shared by the matrix, factorization and operator."""

    pivot_threshold: float = 0.1
    ordering: ColumnOrdering = ColumnOrdering.MMD_ATA
    check: bool = True  # validate CSC structure on define

    def __post_init__(self) -> None:
        check_pivot_threshold(self.pivot_threshold)
        object.__setattr__(self, "ordering", ColumnOrdering.coerce(self.ordering))


def check_pivot_threshold(value: float) -> float:
    """Return value if it is a valid partial pivoting tolerance."""
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"pivot_threshold must lie in [0, 1], got {value}")
    return value
