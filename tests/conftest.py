from __future__ import annotations

import sqlite3
from typing import Any, List, Optional, Sequence

import pytest

from resultpage import Column, ColumnType, Table


class FakeDriverCursor:
    """DB-API cursor double that records executes, fetches and closes."""

    def __init__(
        self,
        rows: Sequence[Sequence[Any]],
        columns: Sequence[str],
        *,
        fail_execute: Optional[Exception] = None,
        fail_fetch_at: Optional[int] = None,
        fail_close: Optional[Exception] = None,
        rowcount: int = -1,
    ) -> None:
        self._rows = [tuple(row) for row in rows]
        self.description = [(name, None, None, None, None, None, None) for name in columns]
        self.fail_execute = fail_execute
        self.fail_fetch_at = fail_fetch_at
        self.fail_close = fail_close
        self.rowcount = rowcount
        self.arraysize = 1
        self.executed: List[tuple] = []
        self.fetchone_calls = 0
        self.fetchall_calls = 0
        self.close_calls = 0
        self._offset = 0

    def execute(self, sql: str, params: Sequence[Any] = ()) -> "FakeDriverCursor":
        self.executed.append((sql, tuple(params)))
        if self.fail_execute is not None:
            raise self.fail_execute
        return self

    def fetchone(self):
        self.fetchone_calls += 1
        if self.fail_fetch_at is not None and self._offset + 1 == self.fail_fetch_at:
            raise RuntimeError("network dropped")
        if self._offset >= len(self._rows):
            return None
        row = self._rows[self._offset]
        self._offset += 1
        return row

    def fetchall(self):
        self.fetchall_calls += 1
        remaining = self._rows[self._offset :]
        self._offset = len(self._rows)
        return remaining

    def close(self) -> None:
        self.close_calls += 1
        if self.fail_close is not None:
            raise self.fail_close


class FakeConnection:
    def __init__(self, *cursors: FakeDriverCursor) -> None:
        self._cursors = list(cursors)
        self.opened: List[FakeDriverCursor] = []

    def cursor(self) -> FakeDriverCursor:
        cursor = self._cursors.pop(0)
        self.opened.append(cursor)
        return cursor


PEOPLE_ROWS = [(1, "a"), (2, "b"), (3, "c")]


@pytest.fixture
def people_table() -> Table:
    return Table(
        name="people",
        columns=(
            Column("id", ColumnType.INTEGER),
            Column("name", ColumnType.TEXT),
        ),
    )


@pytest.fixture
def people_conn():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    conn.executemany("INSERT INTO people(id, name) VALUES(?, ?)", PEOPLE_ROWS)
    conn.commit()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def fake_cursor_factory():
    def _factory(rows=PEOPLE_ROWS, columns=("id", "name"), **kwargs) -> FakeDriverCursor:
        return FakeDriverCursor(rows, columns, **kwargs)

    return _factory


@pytest.fixture
def make_connection():
    return FakeConnection
