"""Statement text plus typed bound parameters."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from .meta import Column
from .types import ColumnType, normalize

__all__ = ["Sql", "SqlParamValue", "create_sql_param_value"]


@dataclass(frozen=True, slots=True)
class SqlParamValue:
    """A bound parameter value with its declared semantic type."""

    value: Any
    type: ColumnType = ColumnType.OTHER


@dataclass(slots=True)
class Sql:
    """An already built statement and its positional parameters."""

    text: str
    params: List[SqlParamValue] = field(default_factory=list)

    @classmethod
    def of(cls, text: str, *values: Any) -> "Sql":
        sql = cls(text)
        for value in values:
            sql.add_param(value)
        return sql

    def add_param(self, value: Any, column_type: Optional[ColumnType] = None) -> "Sql":
        if isinstance(value, SqlParamValue):
            self.params.append(value)
        else:
            self.params.append(SqlParamValue(value, column_type or ColumnType.OTHER))
        return self

    def args(self) -> Tuple[Any, ...]:
        return tuple(param.value for param in self.params)

    def __str__(self) -> str:
        return self.text


def create_sql_param_value(column: Column, value: Any) -> SqlParamValue:
    return SqlParamValue(normalize(value, column.type), column.type)
