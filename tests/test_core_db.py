from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

import pytest

from core.db import connect, schema_connection
from core.logging_utils import configure_json_logging


def test_connect_read_only_rejects_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        connect(tmp_path / "missing.db", read_only=True)


def test_schema_connection_is_read_only(tmp_path: Path) -> None:
    db_path = tmp_path / "data" / "main.db"
    conn = connect(db_path)
    conn.execute("CREATE TABLE t (id INTEGER)")
    conn.execute("INSERT INTO t VALUES (1)")
    conn.commit()
    conn.close()

    with schema_connection(db_path) as ro:
        assert ro.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 1
        with pytest.raises(sqlite3.DatabaseError):
            ro.execute("INSERT INTO t VALUES (2)")


def test_json_logging_writes_extra_fields(tmp_path: Path) -> None:
    logger = configure_json_logging("resultpage.test_json", working_dir=tmp_path, level="DEBUG")
    logger.info("released", extra={"schema_id": "main", "rows": 3})
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "logs" / "resultpage.log.jsonl").read_text(encoding="utf-8").splitlines()
    payload = json.loads(lines[-1])
    assert payload["message"] == "released"
    assert payload["level"] == "INFO"
    assert payload["schema_id"] == "main"
    assert payload["rows"] == 3
    assert "lineno" not in payload

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logging.getLogger("resultpage.test_json").propagate = True
