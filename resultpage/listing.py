"""Sorting, keyword filtering and page slicing of in-memory table listings."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .meta import SimpleTable

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 500

__all__ = [
    "PagingData",
    "PagingQuery",
    "find_by_keyword",
    "paging_tables",
    "resolve_paging",
    "sort_by_table_name",
    "sort_items",
    "table_name_key",
]


def table_name_key(table: SimpleTable) -> str:
    return table.name


def sort_items(items: Iterable[T], key: Callable[[T], Any]) -> List[T]:
    """Return a new list ordered by *key*; the input is left untouched."""

    return sorted(items, key=key)


def sort_by_table_name(tables: Iterable[SimpleTable]) -> List[SimpleTable]:
    return sort_items(tables, table_name_key)


def find_by_keyword(
    items: Iterable[T],
    keyword: Optional[str],
    values: Callable[[T], Sequence[Optional[str]]] = lambda item: [getattr(item, "name", None)],
) -> List[T]:
    """Keep items where any of ``values(item)`` contains *keyword*, ignoring case.

    A blank keyword keeps everything.
    """

    token = (keyword or "").strip().casefold()
    if not token:
        return list(items)
    matched: List[T] = []
    for item in items:
        for value in values(item):
            if value and token in str(value).casefold():
                matched.append(item)
                break
    return matched


@dataclass(slots=True)
class PagingQuery:
    """Resolved listing request after clamping user input."""

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    keyword: Optional[str] = None


def resolve_paging(
    page: Optional[int],
    page_size: Optional[int],
    keyword: Optional[str] = None,
    *,
    settings: Optional[Dict[str, Any]] = None,
) -> PagingQuery:
    paging = (settings or {}).get("paging")
    if not isinstance(paging, dict):
        paging = {}
    default_size = int(paging.get("default_page_size") or DEFAULT_PAGE_SIZE)
    max_size = int(paging.get("max_page_size") or MAX_PAGE_SIZE)
    if max_size <= 0:
        max_size = MAX_PAGE_SIZE
    if default_size <= 0:
        default_size = DEFAULT_PAGE_SIZE
    default_size = min(default_size, max_size)
    try:
        size = int(page_size) if page_size is not None else default_size
    except (TypeError, ValueError):
        size = default_size
    try:
        number = int(page or 1)
    except (TypeError, ValueError):
        number = 1
    return PagingQuery(
        page=max(1, number),
        page_size=max(1, min(size, max_size)),
        keyword=(keyword or "").strip() or None,
    )


@dataclass(slots=True)
class PagingData:
    """One page of an in-memory listing.

    A page past the end is clamped to the last page so callers always get
    a valid slice.
    """

    page: int
    total: int
    page_size: int
    items: List[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.page_size = max(1, int(self.page_size))
        self.total = max(0, int(self.total))
        self.page = min(max(1, int(self.page)), self.pages)

    @property
    def pages(self) -> int:
        if self.total == 0:
            return 1
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def end_index(self) -> int:
        return min(self.start_index + self.page_size, self.total)


def paging_tables(tables: Iterable[SimpleTable], query: PagingQuery) -> PagingData:
    """Sort by name, filter by keyword and slice out the requested page."""

    matched = find_by_keyword(sort_by_table_name(tables), query.keyword)
    data = PagingData(page=query.page, total=len(matched), page_size=query.page_size)
    data.items = matched[data.start_index : data.end_index]
    return data
