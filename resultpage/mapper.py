"""Row mappers turning the current cursor row into a :class:`Record`."""
from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable

from .cursor import QueryCursor
from .errors import PersistenceError, RowMappingError
from .meta import Table
from .record import Record
from .types import normalize

__all__ = [
    "CallableRowMapper",
    "DEFAULT_ROW_MAPPER",
    "DefaultRowMapper",
    "RowMapper",
    "map_to_row",
]


@runtime_checkable
class RowMapper(Protocol):
    """Maps the row the cursor is positioned on. Must not move the cursor."""

    def map(self, cursor: QueryCursor, table: Table, row_index: int) -> Mapping[str, Any]:
        ...


class DefaultRowMapper:
    """Reads every column of *table* by name and normalizes it by its type."""

    def map(self, cursor: QueryCursor, table: Table, row_index: int) -> Record:
        values = {}
        try:
            for column in table.columns:
                values[column.name] = normalize(cursor.get(column.name), column.type)
        except Exception as exc:
            raise RowMappingError(
                f"failed to map row {row_index} of {table.name!r}: {exc}",
                exc,
                row_index=row_index,
            ) from exc
        return Record(values)


class CallableRowMapper:
    """Adapts a plain ``fn(cursor, table, row_index)`` to :class:`RowMapper`."""

    def __init__(self, fn: Callable[[QueryCursor, Table, int], Mapping[str, Any]]) -> None:
        self._fn = fn

    def map(self, cursor: QueryCursor, table: Table, row_index: int) -> Mapping[str, Any]:
        return self._fn(cursor, table, row_index)


DEFAULT_ROW_MAPPER = DefaultRowMapper()


def map_to_row(
    cursor: QueryCursor,
    table: Table,
    row_index: int,
    mapper: Optional[RowMapper] = None,
) -> Record:
    """Map the current row with *mapper*, or the default mapper when None."""

    active = mapper if mapper is not None else DEFAULT_ROW_MAPPER
    try:
        return Record.of(active.map(cursor, table, row_index))
    except PersistenceError:
        raise
    except Exception as exc:
        raise RowMappingError(
            f"row mapper failed on row {row_index} of {table.name!r}: {exc}",
            exc,
            row_index=row_index,
        ) from exc
