"""Error hierarchy for query execution and row mapping."""
from __future__ import annotations

from typing import Optional


class PersistenceError(RuntimeError):
    """Base exception for persistence failures.

    The underlying driver exception, when there is one, is kept on ``cause``
    and chained as ``__cause__``.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ExecutionError(PersistenceError):
    """Raised when a query, count, update or fetch fails at the data source."""


class RowMappingError(PersistenceError):
    """Raised when a positioned row cannot be converted into a record."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        *,
        row_index: Optional[int] = None,
    ) -> None:
        super().__init__(message, cause)
        self.row_index = row_index


class ResourceReleaseError(PersistenceError):
    """Raised when releasing a cursor fails and no other error is in flight."""


__all__ = [
    "ExecutionError",
    "PersistenceError",
    "ResourceReleaseError",
    "RowMappingError",
]
