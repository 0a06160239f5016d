"""Pydantic schemas for the resultpage HTTP API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    ok: bool = Field(True, description="Indicates the API server is reachable.")
    version: str = Field(..., description="Application version string.")
    time_utc: str = Field(..., description="Current UTC timestamp in ISO8601 format.")


class SchemasResponse(BaseModel):
    schemas: List[str] = Field(default_factory=list, description="Configured schema ids, sorted.")


class TableInfo(BaseModel):
    name: str
    type: str = Field("table", description="SQLite object type: table or view.")


class TablesResponse(BaseModel):
    """One page of the table listing of a schema."""

    page: int = Field(..., ge=1, description="1-based page number actually served.")
    page_size: int = Field(..., ge=1)
    pages: int = Field(..., ge=1, description="Number of pages for the current keyword.")
    total: int = Field(..., ge=0, description="Tables matching the keyword.")
    items: List[TableInfo] = Field(default_factory=list)


class ColumnInfo(BaseModel):
    name: str
    type: str = Field(..., description="Semantic column type.")
    declared_type: Optional[str] = Field(None, description="Type name declared in the schema.")
    nullable: bool = True


class TableResponse(BaseModel):
    schema_id: str
    name: str
    columns: List[ColumnInfo] = Field(default_factory=list)


class RowsResponse(BaseModel):
    """Rows of a table window. Binary values are base64 encoded."""

    start_row: int = Field(..., ge=1)
    count: Optional[int] = Field(None, ge=0, description="Requested row count; null means all rows.")
    columns: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class CountResponse(BaseModel):
    schema_id: str
    table: str
    count: int = Field(..., ge=0)


class InvalidateResponse(BaseModel):
    schema_id: str
    invalidated: bool = True
