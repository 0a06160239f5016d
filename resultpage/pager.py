"""Bounded, ordered paging over a positioned cursor."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .cursor import QueryCursor, forward_before
from .mapper import RowMapper, map_to_row
from .meta import Table
from .record import Record

__all__ = ["PagingWindow", "UNBOUNDED", "map_to_rows", "page"]

UNBOUNDED: Optional[int] = None


@dataclass(frozen=True, slots=True)
class PagingWindow:
    """Slice of a result to materialize.

    ``start_row`` is 1-based and clamped to 1. ``count`` of ``UNBOUNDED``
    (or any negative number) reads until the cursor is exhausted.
    """

    start_row: int = 1
    count: Optional[int] = UNBOUNDED

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_row", max(1, int(self.start_row)))
        if self.count is not None:
            count = int(self.count)
            object.__setattr__(self, "count", count if count >= 0 else UNBOUNDED)

    @property
    def bounded(self) -> bool:
        return self.count is not None

    @property
    def end_row(self) -> Optional[int]:
        """Exclusive 1-based end row, or None when unbounded."""

        if self.count is None:
            return None
        return self.start_row + self.count


def map_to_rows(
    cursor: QueryCursor,
    table: Table,
    window: Optional[PagingWindow] = None,
    mapper: Optional[RowMapper] = None,
) -> List[Record]:
    """Map the rows of *window* from *cursor* in cursor order.

    Rows are only skipped up front for bounded windows; an unbounded window
    maps every remaining row from the current position. A mapping failure
    propagates and no partial list is returned.
    """

    window = window or PagingWindow()
    start_row = window.start_row
    if window.bounded and start_row > 1:
        forward_before(cursor, start_row)
    end_row = window.end_row

    rows: List[Record] = []
    row_index = start_row
    while cursor.next():
        if end_row is not None and row_index >= end_row:
            break
        rows.append(map_to_row(cursor, table, row_index, mapper))
        row_index += 1
    return rows


page = map_to_rows
