"""Error taxonomy for sparse operator and factorization failures."""

from typing import Optional


class OperatorError(Exception):
    """Base class for every error raised by shiftinvert."""

    message = "operator error"

    def __init__(self, where: str = "", detail: str = ""):
        self.where = where
        self.detail = detail
        text = f"{self.message}: {detail}" if detail else self.message
        super().__init__(f"{where}: {text}" if where else text)


class UndefinedMatrixError(OperatorError):
    message = "matrix has not been defined"


class NotSquareError(OperatorError):
    message = "matrix is not square"


class StructuralError(OperatorError, ValueError):
    message = "inconsistent compressed-column data"


class InvalidParameterError(OperatorError):
    message = "factorization rejected its arguments"


class MemoryOverflowError(OperatorError, MemoryError):
    message = "factorization ran out of working memory"


class SingularMatrixError(OperatorError):
    message = "matrix is singular"


class NotFactoredError(OperatorError):
    message = "matrix has not been factored"


class CannotReadFileError(OperatorError, OSError):
    message = "cannot read matrix file"


def error_from_status(info: int, n: int, where: str) -> Optional[OperatorError]:
    """
    Translate a SuperLU-style status code into an error.

    Args:
        info: Status returned by the factorization call
        n: Order of the factored matrix
        where: Name of the operation that produced the status

    Returns:
        The matching error, or None when info == 0
    """
    if info < 0:
        return InvalidParameterError(where, f"argument {-info} is illegal")
    if info > n:
        return MemoryOverflowError(where, f"status {info} for order {n}")
    if info > 0:
        return SingularMatrixError(where, f"zero pivot in column {info}")
    return None


def check_status(info: int, n: int, where: str) -> None:
    """Raise the error matching a non-zero status code."""
    error = error_from_status(info, n, where)
    if error is not None:
        raise error
