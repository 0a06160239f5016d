from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api.db import SchemaAccess
from api.server import APIServerConfig, create_app
from core.settings import merge_defaults


def _create_schema(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT NOT NULL, avatar BLOB)")
        conn.execute("CREATE TABLE pets (id INTEGER, owner_id INTEGER)")
        conn.execute("CREATE VIEW people_view AS SELECT id, name FROM people")
        conn.executemany(
            "INSERT INTO people (id, name, avatar) VALUES (?, ?, ?)",
            [(i, f"person-{i}", b"\x00\x01" if i == 1 else None) for i in range(1, 6)],
        )
        conn.commit()
    finally:
        conn.close()


@pytest.fixture()
def schema_db(tmp_path: Path) -> Path:
    db_path = tmp_path / "data" / "main.db"
    _create_schema(db_path)
    return db_path


@pytest.fixture()
def client(tmp_path: Path, schema_db: Path) -> TestClient:
    settings = merge_defaults(
        {"schemas": {"main": "main.db", "gone": str(tmp_path / "missing.db")}}
    )
    access = SchemaAccess(working_dir=tmp_path, settings=settings)
    app = create_app(APIServerConfig(data_access=access, cors_origins=[], app_version="test"))
    return TestClient(app)


def test_health_and_schemas(client: TestClient) -> None:
    health = client.get("/v1/health")
    assert health.status_code == 200
    assert health.json()["ok"] is True
    assert health.json()["version"] == "test"

    schemas = client.get("/v1/schemas")
    assert schemas.json() == {"schemas": ["gone", "main"]}


def test_tables_listing_sorted_filtered_and_paged(client: TestClient) -> None:
    response = client.get("/v1/schemas/main/tables")
    assert response.status_code == 200
    payload = response.json()
    assert [item["name"] for item in payload["items"]] == ["people", "people_view", "pets"]
    assert payload["items"][1]["type"] == "view"

    response = client.get("/v1/schemas/main/tables", params={"keyword": "PEOPLE", "page": 2, "page_size": 1})
    payload = response.json()
    assert payload["total"] == 2
    assert payload["pages"] == 2
    assert payload["page"] == 2
    assert [item["name"] for item in payload["items"]] == ["people_view"]


def test_table_metadata_is_cached_until_reload(client: TestClient, schema_db: Path) -> None:
    first = client.get("/v1/schemas/main/tables/people").json()
    assert [c["name"] for c in first["columns"]] == ["id", "name", "avatar"]
    assert first["columns"][0]["type"] == "integer"
    assert first["columns"][1]["nullable"] is False
    assert first["columns"][2]["type"] == "binary"

    conn = sqlite3.connect(schema_db)
    conn.execute("ALTER TABLE people ADD COLUMN email TEXT")
    conn.commit()
    conn.close()

    cached = client.get("/v1/schemas/main/tables/people").json()
    assert [c["name"] for c in cached["columns"]] == ["id", "name", "avatar"]

    reloaded = client.get("/v1/schemas/main/tables/people", params={"reload": "true"}).json()
    assert [c["name"] for c in reloaded["columns"]][-1] == "email"


def test_rows_window(client: TestClient) -> None:
    response = client.get("/v1/schemas/main/tables/people/rows", params={"start_row": 2, "count": 2})
    assert response.status_code == 200
    payload = response.json()
    assert payload["columns"] == ["id", "name", "avatar"]
    assert [row["id"] for row in payload["rows"]] == [2, 3]

    everything = client.get("/v1/schemas/main/tables/people/rows").json()
    assert len(everything["rows"]) == 5
    assert everything["count"] is None
    assert everything["rows"][0]["avatar"] == "AAE="
    assert everything["rows"][1]["avatar"] is None

    empty = client.get("/v1/schemas/main/tables/people/rows", params={"count": 0}).json()
    assert empty["rows"] == []

    past_end = client.get("/v1/schemas/main/tables/people/rows", params={"start_row": 10, "count": 5}).json()
    assert past_end["rows"] == []


def test_rows_rejects_invalid_window(client: TestClient) -> None:
    response = client.get("/v1/schemas/main/tables/people/rows", params={"start_row": 0})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid request"

    unbounded = client.get("/v1/schemas/main/tables/people/rows", params={"start_row": 3})
    assert unbounded.status_code == 400
    assert unbounded.json() == {"error": "count is required when start_row > 1"}


def test_count(client: TestClient) -> None:
    response = client.get("/v1/schemas/main/tables/people/count")
    assert response.json() == {"schema_id": "main", "table": "people", "count": 5}


def test_invalidate(client: TestClient) -> None:
    client.get("/v1/schemas/main/tables/people")
    response = client.post("/v1/schemas/main/invalidate")
    assert response.status_code == 200
    assert response.json() == {"schema_id": "main", "invalidated": True}

    assert client.post("/v1/schemas/nope/invalidate").status_code == 404


def test_not_found_errors(client: TestClient) -> None:
    unknown_schema = client.get("/v1/schemas/nope/tables")
    assert unknown_schema.status_code == 404
    assert unknown_schema.json() == {"error": "unknown schema_id"}

    unknown_table = client.get("/v1/schemas/main/tables/nope/rows")
    assert unknown_table.status_code == 404
    assert "nope" in unknown_table.json()["error"]

    missing_file = client.get("/v1/schemas/gone/tables")
    assert missing_file.status_code == 404
    assert missing_file.json() == {"error": "schema database not found"}


def test_rows_with_epoch_dates_and_non_finite_reals(client: TestClient, schema_db: Path) -> None:
    conn = sqlite3.connect(schema_db)
    conn.execute("CREATE TABLE events (id INTEGER, day DATE, at TIMESTAMP, reading REAL)")
    conn.executemany(
        "INSERT INTO events VALUES (?, ?, ?, ?)",
        [
            (1, 1700000000, 1700000000, float("inf")),
            (2, "2023-11-15", "2023-11-15T08:00:00Z", float("-inf")),
        ],
    )
    conn.commit()
    conn.close()

    response = client.get("/v1/schemas/main/tables/events/rows", params={"count": 2})
    assert response.status_code == 200
    rows = response.json()["rows"]
    assert rows[0]["day"] == "2023-11-14"
    assert rows[0]["at"] == "2023-11-14T22:13:20+00:00"
    assert rows[0]["reading"] == "inf"
    assert rows[1]["day"] == "2023-11-15"
    assert rows[1]["at"] == "2023-11-15T08:00:00+00:00"
    assert rows[1]["reading"] == "-inf"
