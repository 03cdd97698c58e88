# File: /gridbase/schemas/core_entities.py | Version: 3.0
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from gridbase.models.core_entities import ColumnType
from gridbase.schemas._base import BaseSchema


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("name must not be blank")
    return value


Name = Annotated[str, Field(max_length=255), AfterValidator(_clean_name)]


# -------------------- Base --------------------

class BaseCreate(BaseModel):
    name: Name


class BaseUpdate(BaseModel):
    name: Optional[Name] = None


class BaseOut(BaseSchema):
    id: str
    name: str
    owner_id: str
    last_opened_table_id: Optional[str] = None
    created_at: Optional[datetime] = None


class LastOpenedTableIn(BaseModel):
    table_id: str


# -------------------- Table --------------------

class TableCreate(BaseModel):
    base_id: str
    name: Name


class TableUpdate(BaseModel):
    name: Optional[Name] = None


class TableOut(BaseSchema):
    id: str
    base_id: str
    name: str
    created_at: Optional[datetime] = None


# -------------------- Column --------------------

class ColumnCreate(BaseModel):
    name: Name
    type: ColumnType = ColumnType.TEXT
    position: Optional[int] = Field(default=None, ge=0)


class ColumnUpdate(BaseModel):
    name: Optional[Name] = None
    type: Optional[ColumnType] = None
    position: Optional[int] = Field(default=None, ge=0)


class ColumnOut(BaseSchema):
    id: str
    table_id: str
    name: str
    type: ColumnType
    position: int
    created_at: Optional[datetime] = None
