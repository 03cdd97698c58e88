# File: /gridbase/schemas/rows.py | Version: 1.2 | Title: Row fetch / mutation payloads
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from gridbase.core.config import settings
from gridbase.schemas.cells import Cell
from gridbase.schemas.filters import FilterCondition, SortCriterion


class RowView(BaseModel):
    id: str
    created_at: Optional[datetime] = None
    # keyed by column id; a missing key means the row has no value for that column yet
    cells: Dict[str, Cell] = Field(default_factory=dict)


class RowQuery(BaseModel):
    limit: int = Field(default=50, ge=1, le=settings.ROW_PAGE_MAX)
    cursor: Optional[str] = None
    filters: List[FilterCondition] = Field(default_factory=list)
    sorts: List[SortCriterion] = Field(default_factory=list)
    search: str = ""


class RowPage(BaseModel):
    rows: List[RowView] = Field(default_factory=list)
    next_cursor: Optional[str] = None


class RowCount(BaseModel):
    total: int


class RowCreate(BaseModel):
    cells: Dict[str, Cell] = Field(default_factory=dict)


class RowsDelete(BaseModel):
    ids: List[str] = Field(default_factory=list)


class RowsDeleted(BaseModel):
    deleted: int


class GenerateRowsRequest(BaseModel):
    count: int = Field(ge=1, le=settings.GENERATE_MAX_ROWS)
    batch_size: int = Field(default=5000, ge=100, le=50_000)


class GenerateRowsResult(BaseModel):
    rows_created: int
    operation_batch_id: str
    batch_ids: List[str]
    batch_count: int


class DeleteAllRowsResult(BaseModel):
    deleted_rows: int
    deleted_cells: int
