from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from resultpage.types import ColumnType, column_type_for, normalize


@pytest.mark.parametrize("column_type", list(ColumnType))
def test_none_passes_through_every_type(column_type: ColumnType) -> None:
    assert normalize(None, column_type) is None


def test_integer_normalization_is_driver_independent() -> None:
    assert normalize(7, ColumnType.INTEGER) == 7
    assert normalize(7.0, ColumnType.INTEGER) == 7
    assert normalize(Decimal("7"), ColumnType.INTEGER) == 7
    assert normalize(" 7 ", ColumnType.INTEGER) == 7
    assert normalize("7.00", ColumnType.INTEGER) == 7
    assert normalize(True, ColumnType.INTEGER) == 1
    assert type(normalize(True, ColumnType.INTEGER)) is int


def test_integer_rejects_fractions() -> None:
    with pytest.raises(ValueError):
        normalize(1.5, ColumnType.INTEGER)
    with pytest.raises(ValueError):
        normalize("abc", ColumnType.INTEGER)


def test_decimal_keeps_short_float_repr() -> None:
    assert normalize(0.1, ColumnType.DECIMAL) == Decimal("0.1")
    assert normalize("1.50", ColumnType.DECIMAL) == normalize(1.5, ColumnType.DECIMAL)
    assert isinstance(normalize(3, ColumnType.DECIMAL), Decimal)


def test_float_text_and_binary() -> None:
    assert normalize("2.5", ColumnType.FLOAT) == 2.5
    assert normalize(Decimal("2.5"), ColumnType.FLOAT) == 2.5
    assert normalize(b"caf\xc3\xa9", ColumnType.TEXT) == "café"
    assert normalize(12, ColumnType.TEXT) == "12"
    assert normalize(memoryview(b"\x00\x01"), ColumnType.BINARY) == b"\x00\x01"
    assert normalize(bytearray(b"ab"), ColumnType.BINARY) == b"ab"


def test_boolean_tokens() -> None:
    assert normalize(1, ColumnType.BOOLEAN) is True
    assert normalize(0, ColumnType.BOOLEAN) is False
    assert normalize("Yes", ColumnType.BOOLEAN) is True
    assert normalize("f", ColumnType.BOOLEAN) is False
    with pytest.raises(ValueError):
        normalize(2, ColumnType.BOOLEAN)


def test_dates_and_times() -> None:
    assert normalize("2024-03-01", ColumnType.DATE) == date(2024, 3, 1)
    assert normalize(datetime(2024, 3, 1, 12, 30), ColumnType.DATE) == date(2024, 3, 1)
    assert normalize("12:30:05", ColumnType.TIME) == time(12, 30, 5)
    assert normalize(date(2024, 3, 1), ColumnType.TIMESTAMP) == datetime(2024, 3, 1)


def test_timestamps_with_offsets_compare_equal_after_normalization() -> None:
    utc = normalize("2024-03-01T10:00:00Z", ColumnType.TIMESTAMP)
    shifted = normalize(
        datetime(2024, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2))),
        ColumnType.TIMESTAMP,
    )
    assert utc == shifted
    assert shifted.tzinfo == timezone.utc


def test_unix_epoch_values_normalize_as_utc() -> None:
    assert normalize(1700000000, ColumnType.DATE) == date(2023, 11, 14)
    assert normalize(1700000000, ColumnType.TIME) == time(22, 13, 20)
    stamp = normalize(1700000000, ColumnType.TIMESTAMP)
    assert stamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert stamp == normalize("2023-11-14T22:13:20Z", ColumnType.TIMESTAMP)
    assert normalize(1700000000.5, ColumnType.TIMESTAMP).microsecond == 500000
    with pytest.raises(TypeError):
        normalize(True, ColumnType.DATE)


def test_other_is_opaque() -> None:
    token = object()
    assert normalize(token, ColumnType.OTHER) is token


@pytest.mark.parametrize(
    ("declared", "expected"),
    [
        ("INTEGER", ColumnType.INTEGER),
        ("bigint", ColumnType.INTEGER),
        ("VARCHAR(20)", ColumnType.TEXT),
        ("BLOB", ColumnType.BINARY),
        ("DOUBLE PRECISION", ColumnType.FLOAT),
        ("NUMERIC(10,2)", ColumnType.DECIMAL),
        ("BOOLEAN", ColumnType.BOOLEAN),
        ("DATE", ColumnType.DATE),
        ("DATETIME", ColumnType.TIMESTAMP),
        ("TIME", ColumnType.TIME),
        ("", ColumnType.OTHER),
        (None, ColumnType.OTHER),
        ("GEOMETRY", ColumnType.OTHER),
    ],
)
def test_column_type_for_declared_names(declared, expected) -> None:
    assert column_type_for(declared) is expected


def test_parse_accepts_strings() -> None:
    assert ColumnType.parse("integer") is ColumnType.INTEGER
    assert ColumnType.parse("nonsense") is ColumnType.OTHER
