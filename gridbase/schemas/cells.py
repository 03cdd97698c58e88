# File: /gridbase/schemas/cells.py | Version: 1.0 | Title: Tagged cell values (TEXT | NUMBER)
from __future__ import annotations

import math
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from gridbase.models.core_entities import ColumnType
from gridbase.schemas._base import BaseSchema


class TextCell(BaseModel):
    type: Literal["TEXT"] = "TEXT"
    value: str = ""


class NumberCell(BaseModel):
    type: Literal["NUMBER"] = "NUMBER"
    value: Optional[float] = Field(default=None, allow_inf_nan=False)


Cell = Annotated[Union[TextCell, NumberCell], Field(discriminator="type")]


class CellValueUpsert(BaseModel):
    row_id: str
    column_id: str
    cell: Cell


class CellValueOut(BaseSchema):
    id: str
    row_id: str
    column_id: str
    cell: Cell
    updated_at: Optional[datetime] = None


def parse_number(raw: object) -> Optional[float]:
    """Lenient numeric parse: blank, unparseable or non-finite input yields None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if not math.isfinite(value):
        return None
    return value


def format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def cell_from_slots(
    column_type: str, text_value: Optional[str], number_value: Optional[float]
) -> Union[TextCell, NumberCell]:
    if column_type == ColumnType.NUMBER.value:
        return NumberCell(value=number_value)
    return TextCell(value=text_value or "")


def slots_for(cell: Union[TextCell, NumberCell]) -> tuple[Optional[str], Optional[float]]:
    """(text_value, number_value) storage pair for a tagged cell."""
    if isinstance(cell, NumberCell):
        return None, cell.value
    return cell.value, None


def empty_cell(column_type: str) -> Union[TextCell, NumberCell]:
    return NumberCell() if column_type == ColumnType.NUMBER.value else TextCell()
