"""Generic result-set to record mapping and paging for DB-API drivers."""
from __future__ import annotations

from .cache import TableCache
from .cursor import CursorMode, QueryCursor, advance, forward_before
from .errors import ExecutionError, PersistenceError, ResourceReleaseError, RowMappingError
from .executor import QueryExecutor
from .mapper import DEFAULT_ROW_MAPPER, CallableRowMapper, DefaultRowMapper, RowMapper, map_to_row
from .meta import Column, SimpleTable, Table, list_tables, read_table, table_from_description
from .pager import UNBOUNDED, PagingWindow, map_to_rows, page
from .record import Record
from .sql import Sql, SqlParamValue, create_sql_param_value
from .types import ColumnType, column_type_for, normalize

__version__ = "0.3.0"

__all__ = [
    "CallableRowMapper",
    "Column",
    "ColumnType",
    "CursorMode",
    "DEFAULT_ROW_MAPPER",
    "DefaultRowMapper",
    "ExecutionError",
    "PagingWindow",
    "PersistenceError",
    "QueryCursor",
    "QueryExecutor",
    "Record",
    "ResourceReleaseError",
    "RowMapper",
    "RowMappingError",
    "SimpleTable",
    "Sql",
    "SqlParamValue",
    "Table",
    "TableCache",
    "UNBOUNDED",
    "advance",
    "column_type_for",
    "create_sql_param_value",
    "forward_before",
    "list_tables",
    "map_to_row",
    "map_to_rows",
    "normalize",
    "page",
    "read_table",
    "table_from_description",
]
