# File: /gridbase/schemas/filters.py | Version: 2.0 | Title: Filter & Sort descriptors
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class FilterOperator(str, Enum):
    is_ = "is"
    is_not = "is not"
    contains = "contains"
    not_contains = "does not contain"
    is_empty = "is empty"
    is_not_empty = "is not empty"
    eq = "="
    ne = "!="
    gt = ">"
    lt = "<"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class FilterCondition(BaseModel):
    id: Optional[str] = None
    column_id: str
    operator: FilterOperator
    value: str = ""


class SortCriterion(BaseModel):
    id: Optional[str] = None
    column_id: str
    direction: SortDirection = SortDirection.asc
