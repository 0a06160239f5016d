"""Forward-only cursor handle over a DB-API result and its positioner."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .errors import ExecutionError, ResourceReleaseError

LOGGER = logging.getLogger("resultpage.cursor")

__all__ = [
    "CursorMode",
    "QueryCursor",
    "advance",
    "forward_before",
]


class CursorMode(str, Enum):
    """How rows are pulled from the driver."""

    STREAM = "stream"
    MATERIALIZED = "materialized"

    @classmethod
    def parse(cls, value: Any, default: Optional["CursorMode"] = None) -> "CursorMode":
        if isinstance(value, CursorMode):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        if default is not None:
            return default
        raise ValueError(f"unknown cursor mode {value!r}")


class QueryCursor:
    """Exclusive handle over a live driver cursor.

    ``next()`` moves to the following row and returns False once the result
    is exhausted; ``get()`` reads a column of the current row by name. The
    handle must be released exactly once, normally by using it as a context
    manager.
    """

    def __init__(
        self,
        driver_cursor: Any,
        mode: CursorMode = CursorMode.STREAM,
        *,
        rows: Optional[List[Sequence[Any]]] = None,
    ) -> None:
        self._cursor = driver_cursor
        self.mode = mode
        self._rows = rows
        self._offset = 0
        self._current: Optional[Sequence[Any]] = None
        self._exhausted = False
        self._position = 0
        self.release_count = 0
        self._index = _column_index(getattr(driver_cursor, "description", None))

    @classmethod
    def open(cls, driver_cursor: Any, mode: CursorMode = CursorMode.STREAM) -> "QueryCursor":
        """Wrap an executed driver cursor, fetching everything up front when materialized."""

        rows = None
        if mode is CursorMode.MATERIALIZED:
            try:
                rows = list(driver_cursor.fetchall())
            except Exception as exc:
                raise ExecutionError(f"failed to fetch query result: {exc}", exc) from exc
        return cls(driver_cursor, mode, rows=rows)

    # ------------------------------------------------------------------
    # Positioning
    # ------------------------------------------------------------------

    @property
    def column_names(self) -> List[str]:
        return list(self._index)

    @property
    def position(self) -> int:
        """1-based number of the current row, 0 before the first ``next()``."""

        return self._position

    @property
    def released(self) -> bool:
        return self.release_count > 0

    def next(self) -> bool:
        if self.released:
            raise ExecutionError("cursor has already been released")
        if self._exhausted:
            return False
        if self._rows is not None:
            if self._offset >= len(self._rows):
                row = None
            else:
                row = self._rows[self._offset]
                self._offset += 1
        else:
            try:
                row = self._cursor.fetchone()
            except Exception as exc:
                raise ExecutionError(f"failed to fetch next row: {exc}", exc) from exc
        if row is None:
            self._exhausted = True
            self._current = None
            return False
        self._current = row
        self._position += 1
        return True

    def get(self, column_name: str) -> Any:
        if self._current is None:
            raise LookupError("cursor is not positioned on a row")
        index = self._index.get(column_name)
        if index is None:
            index = _casefold_lookup(self._index, column_name)
        if index is None:
            raise KeyError(f"unknown column {column_name!r}")
        return self._current[index]

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the driver cursor. Further calls are no-ops."""

        if self.released:
            return
        self.release_count += 1
        self._current = None
        self._rows = None
        try:
            self._cursor.close()
        except Exception as exc:
            raise ResourceReleaseError(f"failed to release cursor: {exc}", exc) from exc

    def __enter__(self) -> "QueryCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            self.close()
        except ResourceReleaseError as release_exc:
            if exc_type is None:
                raise
            LOGGER.warning(
                "cursor release failed while another error was propagating: %s",
                release_exc,
                extra={"primary_error": repr(exc)},
            )
        return False


def _column_index(description: Optional[Sequence[Sequence[Any]]]) -> Dict[str, int]:
    index: Dict[str, int] = {}
    for position, entry in enumerate(description or []):
        name = str(entry[0])
        # first occurrence wins for duplicated projection names
        index.setdefault(name, position)
    return index


def _casefold_lookup(index: Dict[str, int], column_name: str) -> Optional[int]:
    target = column_name.casefold()
    for name, position in index.items():
        if name.casefold() == target:
            return position
    return None


def advance(cursor: QueryCursor, rows_to_skip: int) -> int:
    """Step *cursor* forward *rows_to_skip* rows without mapping them.

    Stops silently when the result runs out; returns the number of rows
    actually skipped.
    """

    skipped = 0
    while skipped < rows_to_skip:
        if not cursor.next():
            break
        skipped += 1
    return skipped


def forward_before(cursor: QueryCursor, start_row: int) -> int:
    """Position *cursor* just before the 1-based *start_row*."""

    return advance(cursor, max(0, start_row - 1))
