"""Table metadata: column descriptors and SQLite discovery helpers."""
from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .types import ColumnType, column_type_for

__all__ = [
    "Column",
    "SimpleTable",
    "Table",
    "list_tables",
    "read_table",
    "table_from_description",
]


@dataclass(frozen=True, slots=True)
class Column:
    """Descriptor for a single result column."""

    name: str
    type: ColumnType = ColumnType.OTHER
    declared_type: Optional[str] = None
    nullable: bool = True

    @classmethod
    def declared(cls, name: str, declared_type: Optional[str], *, nullable: bool = True) -> "Column":
        return cls(
            name=name,
            type=column_type_for(declared_type),
            declared_type=declared_type or None,
            nullable=nullable,
        )


@dataclass(frozen=True, slots=True)
class Table:
    """Ordered column metadata for a table or a query projection."""

    name: str
    columns: Tuple[Column, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        columns = tuple(self.columns)
        seen: set[str] = set()
        for column in columns:
            if column.name in seen:
                raise ValueError(f"duplicate column name {column.name!r} in table {self.name!r}")
            seen.add(column.name)
        object.__setattr__(self, "columns", columns)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None


@dataclass(frozen=True, slots=True)
class SimpleTable:
    """Table name entry as listed from a schema."""

    name: str
    type: str = "table"


def _quote_pragma_arg(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"


def read_table(conn: sqlite3.Connection, table_name: str) -> Table:
    """Discover column metadata for *table_name* from a SQLite connection."""

    cursor = conn.execute(f"PRAGMA table_info({_quote_pragma_arg(table_name)})")
    try:
        rows = cursor.fetchall()
    finally:
        cursor.close()
    if not rows:
        raise LookupError(f"unknown table {table_name!r}")
    columns = []
    # cid, name, type, notnull, dflt_value, pk
    for row in sorted(rows, key=lambda item: int(item[0])):
        columns.append(Column.declared(str(row[1]), row[2], nullable=not bool(row[3])))
    return Table(name=table_name, columns=tuple(columns))


def list_tables(conn: sqlite3.Connection) -> List[SimpleTable]:
    """Return the user tables and views of a SQLite database in catalog order."""

    cursor = conn.execute(
        "SELECT name, type FROM sqlite_master "
        "WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%'"
    )
    try:
        return [SimpleTable(name=str(row[0]), type=str(row[1])) for row in cursor.fetchall() if row[0]]
    finally:
        cursor.close()


def table_from_description(
    name: str,
    description: Optional[Sequence[Sequence[Any]]],
    *,
    type_names: Optional[Iterable[Optional[str]]] = None,
) -> Table:
    """Build a :class:`Table` from a DB-API ``cursor.description``.

    DB-API type codes are driver specific, so columns are typed ``OTHER``
    unless *type_names* supplies declared SQL type names in column order.
    """

    entries = list(description or [])
    declared = list(type_names or [])
    columns = []
    for index, entry in enumerate(entries):
        declared_type = declared[index] if index < len(declared) else None
        null_ok = entry[6] if len(entry) > 6 else None
        columns.append(
            Column.declared(str(entry[0]), declared_type, nullable=null_ok is not False)
        )
    return Table(name=name, columns=tuple(columns))
