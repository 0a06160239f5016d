"""Read-only row records produced by the mappers."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Tuple, Union


class Record(Mapping):
    """Ordered, read-only mapping of column name to normalized value.

    Insertion order follows the column order of the mapper that built the
    record; equality ignores order and compares equal to any mapping with
    the same items.
    """

    __slots__ = ("_values",)

    def __init__(
        self,
        values: Union[Mapping, Iterable[Tuple[str, Any]], None] = None,
    ) -> None:
        self._values: Dict[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Record({self._values!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Return a mutable copy owned by the caller."""

        return dict(self._values)

    @classmethod
    def of(cls, values: Any) -> "Record":
        if isinstance(values, Record):
            return values
        if not isinstance(values, Mapping):
            raise TypeError(f"row mapper returned {type(values).__name__}, expected a mapping")
        return cls(values)


__all__ = ["Record"]
