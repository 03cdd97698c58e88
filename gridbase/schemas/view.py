# File: /gridbase/schemas/view.py | Version: 2.0 | Title: Pydantic v2 schema for Saved Views
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from gridbase.schemas._base import BaseSchema
from gridbase.schemas.filters import FilterCondition, SortCriterion


class ViewData(BaseModel):
    filters: List[FilterCondition] = Field(default_factory=list)
    sort_criteria: List[SortCriterion] = Field(default_factory=list)
    hidden_columns: List[str] = Field(default_factory=list)


class ViewCreate(ViewData):
    name: str = Field(min_length=1, max_length=200)


class ViewUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    filters: Optional[List[FilterCondition]] = None
    sort_criteria: Optional[List[SortCriterion]] = None
    hidden_columns: Optional[List[str]] = None


class ViewOut(ViewData, BaseSchema):
    id: str
    table_id: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
