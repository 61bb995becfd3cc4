"""Direct sparse backend using SuperLU through SciPy."""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple
import numpy as np
import scipy.sparse.linalg
from numpy.typing import NDArray

from shiftinvert.core.config import ColumnOrdering
from shiftinvert.core.matrix import SparseColumnMatrix

logger = logging.getLogger(__name__)


@dataclass
class SuperLUFactors:
    """LU factors of one matrix, kept until released."""

    lu: Optional[Any]   # scipy.sparse.linalg.SuperLU
    dtype: np.dtype


class SuperLUBackend:
    """
    scipy.sparse.linalg.splu implementation of FactorizationBackend.

    SciPy reports SuperLU's ``info`` as exceptions; they are mapped back to
    status codes so callers see the same contract as the C library.
    """

    def __init__(
        self,
        panel_size: Optional[int] = None,
        relax: Optional[int] = None,
    ) -> None:
        """
        Args:
            panel_size: SuperLU panel size (library default when None)
            relax: Supernode relaxation (library default when None)
        """
        self.panel_size = panel_size
        self.relax = relax

    def factor(
        self,
        matrix: SparseColumnMatrix,
        pivot_threshold: float,
        ordering: ColumnOrdering,
        perm_r: NDArray,
        perm_c: NDArray,
    ) -> Tuple[Optional[SuperLUFactors], int]:
        """Factor matrix and write the permutations into perm_r/perm_c."""
        n = matrix.n
        # splu may canonicalise its input in place
        csc = matrix.to_scipy(copy=True)
        try:
            lu = scipy.sparse.linalg.splu(
                csc,
                permc_spec=ordering.permc_spec,
                diag_pivot_thresh=pivot_threshold,
                relax=self.relax,
                panel_size=self.panel_size,
            )
        except MemoryError as exc:
            logger.debug("splu ran out of memory: %s", exc)
            return None, n + 1
        except RuntimeError as exc:
            logger.debug("splu found a zero pivot: %s", exc)
            return None, n
        except (SystemError, ValueError, TypeError) as exc:
            logger.debug("splu rejected its arguments: %s", exc)
            return None, -1

        perm_r[:] = lu.perm_r
        perm_c[:] = lu.perm_c
        return SuperLUFactors(lu=lu, dtype=csc.dtype), 0

    def solve(self, factors: SuperLUFactors, rhs: NDArray) -> NDArray:
        """Solve with the stored factors; complex rhs on real factors is split."""
        lu = factors.lu
        real_factors = not np.issubdtype(factors.dtype, np.complexfloating)
        if np.iscomplexobj(rhs) and real_factors:
            real = lu.solve(np.ascontiguousarray(rhs.real, dtype=factors.dtype))
            imag = lu.solve(np.ascontiguousarray(rhs.imag, dtype=factors.dtype))
            return real + 1j * imag
        return lu.solve(np.ascontiguousarray(rhs, dtype=factors.dtype))

    def release(self, factors: SuperLUFactors) -> None:
        factors.lu = None
