"""Semantic column types and driver value normalization."""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional

__all__ = [
    "ColumnType",
    "column_type_for",
    "normalize",
]


class ColumnType(str, Enum):
    """Logical column type independent of the driver representation."""

    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    TEXT = "text"
    BOOLEAN = "boolean"
    BINARY = "binary"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "ColumnType":
        if isinstance(value, ColumnType):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return cls.OTHER


_TRUE_TOKENS = {"true", "t", "yes", "y", "1", "on"}
_FALSE_TOKENS = {"false", "f", "no", "n", "0", "off"}


def _to_integer(raw: Any) -> int:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError(f"non-integral value {raw!r} for integer column")
        return int(raw)
    if isinstance(raw, Decimal):
        if not raw.is_finite() or raw != raw.to_integral_value():
            raise ValueError(f"non-integral value {raw!r} for integer column")
        return int(raw)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw).decode("utf-8")
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"invalid integer literal {raw!r}") from exc
        return _to_integer(parsed)
    raise TypeError(f"cannot convert {type(raw).__name__} to integer")


def _to_float(raw: Any) -> float:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw).decode("utf-8")
    if isinstance(raw, str):
        return float(raw.strip())
    return float(raw)


def _to_decimal(raw: Any) -> Decimal:
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, bool):
        return Decimal(int(raw))
    if isinstance(raw, int):
        return Decimal(raw)
    if isinstance(raw, float):
        # str() keeps the shortest repr so 0.1 stays 0.1
        return Decimal(str(raw))
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw).decode("utf-8")
    if isinstance(raw, str):
        try:
            return Decimal(raw.strip())
        except InvalidOperation as exc:
            raise ValueError(f"invalid decimal literal {raw!r}") from exc
    raise TypeError(f"cannot convert {type(raw).__name__} to decimal")


def _to_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode("utf-8")
    return str(raw)


def _to_boolean(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, Decimal)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        token = raw.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    raise ValueError(f"cannot interpret {raw!r} as boolean")


def _to_binary(raw: Any) -> bytes:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw)
    if isinstance(raw, str):
        return raw.encode("utf-8")
    raise TypeError(f"cannot convert {type(raw).__name__} to bytes")


def _parse_iso_datetime(value: str) -> datetime:
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _from_epoch(raw: Any) -> Optional[datetime]:
    """Unix-epoch seconds as stored by SQLite ``unixepoch()``, read as UTC."""

    if isinstance(raw, bool) or not isinstance(raw, (int, float, Decimal)):
        return None
    return datetime.fromtimestamp(float(raw), timezone.utc)


def _to_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return _parse_iso_datetime(text).date()
    epoch = _from_epoch(raw)
    if epoch is not None:
        return epoch.date()
    raise TypeError(f"cannot convert {type(raw).__name__} to date")


def _to_time(raw: Any) -> time:
    if isinstance(raw, datetime):
        return raw.time()
    if isinstance(raw, time):
        return raw
    if isinstance(raw, str):
        return time.fromisoformat(raw.strip())
    epoch = _from_epoch(raw)
    if epoch is not None:
        return epoch.time()
    raise TypeError(f"cannot convert {type(raw).__name__} to time")


def _to_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, date):
        value = datetime(raw.year, raw.month, raw.day)
    elif isinstance(raw, str):
        value = _parse_iso_datetime(raw)
    else:
        value = _from_epoch(raw)
        if value is None:
            raise TypeError(f"cannot convert {type(raw).__name__} to timestamp")
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value


_CONVERTERS: Dict[ColumnType, Callable[[Any], Any]] = {
    ColumnType.INTEGER: _to_integer,
    ColumnType.FLOAT: _to_float,
    ColumnType.DECIMAL: _to_decimal,
    ColumnType.TEXT: _to_text,
    ColumnType.BOOLEAN: _to_boolean,
    ColumnType.BINARY: _to_binary,
    ColumnType.DATE: _to_date,
    ColumnType.TIME: _to_time,
    ColumnType.TIMESTAMP: _to_timestamp,
}


def normalize(raw: Any, column_type: ColumnType) -> Any:
    """Convert a raw driver value into the canonical Python value for *column_type*.

    ``None`` passes through for every type and ``OTHER`` values are returned
    untouched. Conversion failures raise ``TypeError`` or ``ValueError``.
    """

    if raw is None:
        return None
    converter = _CONVERTERS.get(ColumnType.parse(column_type))
    if converter is None:
        return raw
    return converter(raw)


def column_type_for(declared: Optional[str]) -> ColumnType:
    """Derive the semantic type from a declared SQL type name."""

    text = (declared or "").strip().upper()
    if not text:
        return ColumnType.OTHER
    if "BOOL" in text:
        return ColumnType.BOOLEAN
    if "TIMESTAMP" in text or "DATETIME" in text:
        return ColumnType.TIMESTAMP
    if "DATE" in text:
        return ColumnType.DATE
    if "TIME" in text:
        return ColumnType.TIME
    if "INT" in text:
        return ColumnType.INTEGER
    if "CHAR" in text or "CLOB" in text or "TEXT" in text:
        return ColumnType.TEXT
    if "BLOB" in text or "BINARY" in text or "BYTEA" in text:
        return ColumnType.BINARY
    if "REAL" in text or "FLOA" in text or "DOUB" in text:
        return ColumnType.FLOAT
    if "DEC" in text or "NUMERIC" in text:
        return ColumnType.DECIMAL
    return ColumnType.OTHER
