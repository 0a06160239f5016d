"""Query execution with scoped cursor release."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .cursor import CursorMode, QueryCursor
from .errors import ExecutionError, ResourceReleaseError
from .mapper import RowMapper
from .meta import Table
from .pager import UNBOUNDED, PagingWindow, map_to_rows
from .record import Record
from .sql import Sql

LOGGER = logging.getLogger("resultpage.executor")

DEFAULT_FETCH_SIZE = 100

__all__ = ["DEFAULT_FETCH_SIZE", "QueryExecutor"]


def _close_quietly(driver_cursor: Any) -> None:
    try:
        driver_cursor.close()
    except Exception as exc:
        LOGGER.warning("failed to release cursor after execution error: %s", exc)


class QueryExecutor:
    """Runs statements against a DB-API connection.

    Query cursors come back as :class:`QueryCursor` handles which must be
    released by the caller's ``with`` block; count and update statements
    release their own cursor before returning.
    """

    def __init__(
        self,
        *,
        cursor_mode: CursorMode = CursorMode.STREAM,
        fetch_size: Optional[int] = DEFAULT_FETCH_SIZE,
    ) -> None:
        self.cursor_mode = CursorMode.parse(cursor_mode)
        self.fetch_size = int(fetch_size) if fetch_size else None

    @classmethod
    def from_settings(cls, settings: Optional[Dict[str, Any]]) -> "QueryExecutor":
        paging = (settings or {}).get("paging")
        if not isinstance(paging, dict):
            paging = {}
        mode = CursorMode.parse(paging.get("cursor_mode"), CursorMode.STREAM)
        try:
            fetch_size = int(paging.get("fetch_size") or DEFAULT_FETCH_SIZE)
        except (TypeError, ValueError):
            fetch_size = DEFAULT_FETCH_SIZE
        if fetch_size <= 0:
            fetch_size = DEFAULT_FETCH_SIZE
        return cls(cursor_mode=mode, fetch_size=fetch_size)

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def _run(self, conn: Any, sql: Sql) -> Any:
        """Execute *sql* and return the raw driver cursor."""

        try:
            driver_cursor = conn.cursor()
        except Exception as exc:
            raise ExecutionError(f"failed to open cursor: {exc}", exc) from exc
        if self.fetch_size:
            try:
                driver_cursor.arraysize = self.fetch_size
            except AttributeError:
                pass
        LOGGER.debug("executing %s", sql.text, extra={"param_count": len(sql.params)})
        try:
            driver_cursor.execute(sql.text, sql.args())
        except Exception as exc:
            LOGGER.debug("execution failed: %s", exc)
            _close_quietly(driver_cursor)
            raise ExecutionError(f"query execution failed: {exc}", exc) from exc
        return driver_cursor

    def execute(
        self,
        conn: Any,
        sql: Sql,
        cursor_mode: Optional[CursorMode] = None,
    ) -> QueryCursor:
        """Execute a query and hand back its cursor.

        The returned cursor is owned by the caller and has to be released,
        normally with ``with executor.execute(conn, sql) as cursor:``.
        """

        mode = CursorMode.parse(cursor_mode) if cursor_mode is not None else self.cursor_mode
        driver_cursor = self._run(conn, sql)
        try:
            return QueryCursor.open(driver_cursor, mode)
        except ExecutionError:
            _close_quietly(driver_cursor)
            raise

    @contextmanager
    def open_query(
        self,
        conn: Any,
        sql: Sql,
        cursor_mode: Optional[CursorMode] = None,
    ) -> Iterator[QueryCursor]:
        with self.execute(conn, sql, cursor_mode) as cursor:
            yield cursor

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def execute_list_query(
        self,
        conn: Any,
        table: Table,
        sql: Sql,
        *,
        cursor_mode: Optional[CursorMode] = None,
        start_row: int = 1,
        count: Optional[int] = UNBOUNDED,
        mapper: Optional[RowMapper] = None,
    ) -> List[Record]:
        window = PagingWindow(start_row=start_row, count=count)
        with self.execute(conn, sql, cursor_mode) as cursor:
            return map_to_rows(cursor, table, window, mapper)

    def execute_count(self, conn: Any, sql: Sql) -> int:
        """Run a ``COUNT`` style query and return the first column of the first row."""

        driver_cursor = self._run(conn, sql)
        try:
            row = driver_cursor.fetchone()
            value = 0 if row is None or row[0] is None else int(row[0])
        except Exception as exc:
            _close_quietly(driver_cursor)
            raise ExecutionError(f"count query failed: {exc}", exc) from exc
        self._release(driver_cursor)
        return value

    def execute_update(self, conn: Any, sql: Sql) -> int:
        """Run an INSERT/UPDATE/DELETE and return the driver's affected-row count.

        -1 means the driver could not determine the count.
        """

        driver_cursor = self._run(conn, sql)
        rowcount = getattr(driver_cursor, "rowcount", -1)
        self._release(driver_cursor)
        return int(rowcount if rowcount is not None else -1)

    @staticmethod
    def _release(driver_cursor: Any) -> None:
        try:
            driver_cursor.close()
        except Exception as exc:
            raise ResourceReleaseError(f"failed to release cursor: {exc}", exc) from exc
