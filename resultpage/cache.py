"""In-process cache of discovered table metadata keyed by schema."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

from .meta import Table

LOGGER = logging.getLogger("resultpage.cache")

__all__ = ["TableCache"]


class TableCache:
    """Thread-safe ``(schema_id, table_name) -> Table`` cache.

    Entries are immutable :class:`Table` snapshots, so readers never need
    to copy them. Callers invalidate a whole schema when its connectivity
    or identity changes, or a single table when it is reloaded.
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self.enabled = enabled
        self._lock = threading.Lock()
        self._entries: Dict[str, Dict[str, Table]] = {}

    @classmethod
    def from_settings(cls, settings: Optional[Dict[str, Any]]) -> "TableCache":
        block = (settings or {}).get("metadata_cache")
        if not isinstance(block, dict):
            block = {}
        return cls(enabled=bool(block.get("enable", True)))

    def peek(self, schema_id: str, table_name: str) -> Optional[Table]:
        with self._lock:
            return self._entries.get(schema_id, {}).get(table_name)

    def put(self, schema_id: str, table: Table) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries.setdefault(schema_id, {})[table.name] = table

    def get(
        self,
        schema_id: str,
        table_name: str,
        loader: Callable[[], Table],
    ) -> Table:
        """Return the cached table, calling *loader* on a miss."""

        cached = self.peek(schema_id, table_name)
        if cached is not None:
            return cached
        table = loader()
        if self.enabled:
            with self._lock:
                # keep the first snapshot stored by a concurrent loader
                table = self._entries.setdefault(schema_id, {}).setdefault(table_name, table)
        return table

    def invalidate(self, schema_id: str, table_name: Optional[str] = None) -> None:
        with self._lock:
            if table_name is None:
                removed = self._entries.pop(schema_id, None)
                count = len(removed or {})
            else:
                tables = self._entries.get(schema_id)
                count = 0
                if tables is not None and tables.pop(table_name, None) is not None:
                    count = 1
                if tables is not None and not tables:
                    self._entries.pop(schema_id, None)
        LOGGER.debug(
            "invalidated table metadata",
            extra={"schema_id": schema_id, "table_name": table_name, "removed": count},
        )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(tables) for tables in self._entries.values())
