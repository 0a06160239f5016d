"""FastAPI application exposing read-only paging over configured schemas."""
from __future__ import annotations

import base64
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resultpage import ExecutionError, PersistenceError, Record, RowMappingError

from .db import SchemaAccess
from .models import (
    ColumnInfo,
    CountResponse,
    HealthResponse,
    InvalidateResponse,
    RowsResponse,
    SchemasResponse,
    TableInfo,
    TableResponse,
    TablesResponse,
)

LOGGER = logging.getLogger("resultpage.api")


@dataclass(slots=True)
class APIServerConfig:
    """Runtime configuration for the FastAPI application."""

    data_access: SchemaAccess
    cors_origins: Sequence[str]
    app_version: str = "dev"


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, float) and not math.isfinite(value):
        # JSON has no inf/nan literals
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def _record_payload(record: Record) -> Dict[str, Any]:
    return {key: _jsonable(value) for key, value in record.items()}


def create_app(config: APIServerConfig) -> FastAPI:
    app = FastAPI(title="resultpage", version=config.app_version)
    data = config.data_access

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(config.cors_origins),
            allow_credentials=False,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "invalid request", "details": exc.errors()})

    @app.exception_handler(PersistenceError)
    async def persistence_exception_handler(_request: Request, exc: PersistenceError):
        if isinstance(exc, RowMappingError):
            LOGGER.warning("row mapping failed: %s", exc, extra={"row_index": exc.row_index})
            return JSONResponse(status_code=422, content={"error": str(exc)})
        LOGGER.error("query failed: %s", exc)
        status_code = 502 if isinstance(exc, ExecutionError) else 500
        return JSONResponse(status_code=status_code, content={"error": "query failed"})

    def _not_found(exc: LookupError) -> HTTPException:
        message = exc.args[0] if exc.args else "not found"
        return HTTPException(status_code=404, detail=str(message))

    @app.get("/v1/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(
            ok=True,
            version=config.app_version,
            time_utc=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        )

    @app.get("/v1/schemas", response_model=SchemasResponse)
    def schemas() -> SchemasResponse:
        return SchemasResponse(schemas=data.schema_ids())

    @app.get("/v1/schemas/{schema_id}/tables", response_model=TablesResponse)
    def tables(
        schema_id: str,
        keyword: Optional[str] = Query(None),
        page: Optional[int] = Query(None, ge=1),
        page_size: Optional[int] = Query(None, ge=1),
    ) -> TablesResponse:
        try:
            paging = data.tables_page(schema_id, keyword=keyword, page=page, page_size=page_size)
        except LookupError as exc:
            raise _not_found(exc) from exc
        except FileNotFoundError as exc:
            raise HTTPException(status_code=404, detail="schema database not found") from exc
        return TablesResponse(
            page=paging.page,
            page_size=paging.page_size,
            pages=paging.pages,
            total=paging.total,
            items=[TableInfo(name=item.name, type=item.type) for item in paging.items],
        )

    @app.get("/v1/schemas/{schema_id}/tables/{table_name}", response_model=TableResponse)
    def table(schema_id: str, table_name: str, reload: bool = Query(False)) -> TableResponse:
        try:
            meta = data.table(schema_id, table_name, reload=reload)
        except LookupError as exc:
            raise _not_found(exc) from exc
        except FileNotFoundError as exc:
            raise HTTPException(status_code=404, detail="schema database not found") from exc
        return TableResponse(
            schema_id=schema_id,
            name=meta.name,
            columns=[
                ColumnInfo(
                    name=column.name,
                    type=column.type.value,
                    declared_type=column.declared_type,
                    nullable=column.nullable,
                )
                for column in meta.columns
            ],
        )

    @app.get("/v1/schemas/{schema_id}/tables/{table_name}/rows", response_model=RowsResponse)
    def rows(
        schema_id: str,
        table_name: str,
        start_row: int = Query(1, ge=1),
        count: Optional[int] = Query(None, ge=0),
    ) -> RowsResponse:
        if count is None and start_row > 1:
            # unbounded windows always start at the first row
            raise HTTPException(status_code=400, detail="count is required when start_row > 1")
        try:
            meta = data.table(schema_id, table_name)
            records = data.rows(schema_id, table_name, start_row=start_row, count=count)
        except LookupError as exc:
            raise _not_found(exc) from exc
        except FileNotFoundError as exc:
            raise HTTPException(status_code=404, detail="schema database not found") from exc
        return RowsResponse(
            start_row=start_row,
            count=count,
            columns=meta.column_names,
            rows=[_record_payload(record) for record in records],
        )

    @app.get("/v1/schemas/{schema_id}/tables/{table_name}/count", response_model=CountResponse)
    def count(schema_id: str, table_name: str) -> CountResponse:
        try:
            total = data.count(schema_id, table_name)
        except LookupError as exc:
            raise _not_found(exc) from exc
        except FileNotFoundError as exc:
            raise HTTPException(status_code=404, detail="schema database not found") from exc
        return CountResponse(schema_id=schema_id, table=table_name, count=total)

    @app.post("/v1/schemas/{schema_id}/invalidate", response_model=InvalidateResponse)
    def invalidate(schema_id: str) -> InvalidateResponse:
        try:
            data.invalidate(schema_id)
        except LookupError as exc:
            raise _not_found(exc) from exc
        return InvalidateResponse(schema_id=schema_id)

    return app


__all__ = ["APIServerConfig", "create_app"]
