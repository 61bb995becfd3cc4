"""Matrix file loading into compressed sparse column arrays."""

import logging
from pathlib import Path
import numpy as np
import scipy.io
import scipy.sparse
from numpy.typing import NDArray

from shiftinvert.core.errors import CannotReadFileError

logger = logging.getLogger(__name__)

MATRIX_MARKET_SUFFIXES = (".mtx", ".mtx.gz", ".mtx.bz2")
HARWELL_BOEING_SUFFIXES = (".rua", ".rsa", ".hb", ".rb")


def load_matrix(path) -> tuple[int, int, NDArray, NDArray, NDArray]:
    """
    Read a sparse matrix file.

    Matrix Market files go through scipy.io.mmread and Harwell-Boeing files
    through scipy.io.hb_read. Duplicates are summed and rows sorted.

    Args:
        path: File path; the format is chosen from the suffix

    Returns:
        (m, n, values, row_indices, col_ptr) in 0-based CSC form

    Raises:
        CannotReadFileError: Missing file, unknown format or parse failure
    """
    path = Path(path)
    name = path.name.lower()

    if name.endswith(MATRIX_MARKET_SUFFIXES):
        reader = scipy.io.mmread
    elif name.endswith(HARWELL_BOEING_SUFFIXES):
        reader = scipy.io.hb_read
    else:
        raise CannotReadFileError("load_matrix", f"unknown format for {path}")

    if not path.is_file():
        raise CannotReadFileError("load_matrix", f"{path} does not exist")

    try:
        raw = reader(str(path))
    except (OSError, ValueError, TypeError, IndexError) as exc:
        raise CannotReadFileError("load_matrix", f"{path}: {exc}") from exc

    csc = scipy.sparse.csc_matrix(raw)
    csc.sum_duplicates()
    m, n = csc.shape
    logger.debug("Loaded %dx%d matrix with %d non-zeros from %s", m, n, csc.nnz, path)
    return m, n, csc.data, csc.indices, csc.indptr
