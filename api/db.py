"""Schema access layer wiring settings, connections and the paging engine."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from core.db import schema_connection
from core.paths import resolve_schema_path, resolve_working_dir
from core.settings import load_settings
from resultpage import QueryExecutor, Record, Sql, Table, TableCache, read_table
from resultpage.listing import PagingData, paging_tables, resolve_paging
from resultpage.meta import list_tables
from resultpage.pager import UNBOUNDED

LOGGER = logging.getLogger("resultpage.api.db")


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SchemaAccess:
    """Read access to the SQLite schemas configured under ``settings["schemas"]``."""

    def __init__(
        self,
        *,
        working_dir: Optional[Path] = None,
        settings: Optional[Dict[str, Any]] = None,
        executor: Optional[QueryExecutor] = None,
        table_cache: Optional[TableCache] = None,
    ) -> None:
        self.working_dir = Path(working_dir or resolve_working_dir())
        self._settings = dict(settings or load_settings(self.working_dir))
        self.executor = executor or QueryExecutor.from_settings(self._settings)
        self.table_cache = table_cache or TableCache.from_settings(self._settings)

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def schema_ids(self) -> List[str]:
        schemas = self._settings.get("schemas")
        if not isinstance(schemas, dict):
            return []
        return sorted(str(key) for key in schemas.keys())

    def _schema_path(self, schema_id: str) -> Path:
        path = resolve_schema_path(self.working_dir, self._settings, schema_id)
        if path is None:
            raise LookupError("unknown schema_id")
        return path

    @contextmanager
    def _schema(self, schema_id: str) -> Iterator[sqlite3.Connection]:
        path = self._schema_path(schema_id)
        with schema_connection(path, read_only=True) as conn:
            yield conn

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def tables_page(
        self,
        schema_id: str,
        *,
        keyword: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> PagingData:
        query = resolve_paging(page, page_size, keyword, settings=self._settings)
        with self._schema(schema_id) as conn:
            tables = list_tables(conn)
        return paging_tables(tables, query)

    def table(self, schema_id: str, table_name: str, *, reload: bool = False) -> Table:
        if reload:
            self.table_cache.invalidate(schema_id, table_name)
        cached = self.table_cache.peek(schema_id, table_name)
        if cached is not None:
            return cached
        with self._schema(schema_id) as conn:
            return self.table_cache.get(schema_id, table_name, lambda: read_table(conn, table_name))

    def invalidate(self, schema_id: str) -> None:
        self._schema_path(schema_id)
        self.table_cache.invalidate(schema_id)

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def rows(
        self,
        schema_id: str,
        table_name: str,
        *,
        start_row: int = 1,
        count: Optional[int] = UNBOUNDED,
    ) -> List[Record]:
        table = self.table(schema_id, table_name)
        sql = Sql(f"SELECT * FROM {quote_identifier(table.name)}")
        with self._schema(schema_id) as conn:
            return self.executor.execute_list_query(
                conn,
                table,
                sql,
                start_row=start_row,
                count=count,
            )

    def count(self, schema_id: str, table_name: str) -> int:
        table = self.table(schema_id, table_name)
        sql = Sql(f"SELECT COUNT(*) FROM {quote_identifier(table.name)}")
        with self._schema(schema_id) as conn:
            return self.executor.execute_count(conn, sql)


__all__ = ["SchemaAccess", "quote_identifier"]
