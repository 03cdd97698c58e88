# File: /gridbase/crud/cells.py | Version: 1.2 | Title: Cell value upsert (one value per row/column)
from __future__ import annotations

from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gridbase.models import CellValue, Row, TableColumn
from gridbase.schemas.cells import CellValueOut, NumberCell, TextCell, cell_from_slots, slots_for


def get_cell(db: Session, *, row_id: str, column_id: str) -> Optional[CellValue]:
    stmt = select(CellValue).where(CellValue.row_id == row_id, CellValue.column_id == column_id)
    return db.execute(stmt).scalars().first()


def upsert_cell(
    db: Session, *, row: Row, column: TableColumn, cell: Union[TextCell, NumberCell]
) -> CellValue:
    """
    Insert or update the single CellValue of (row, column).
    The slot not matching the column type is always cleared.
    """
    text_value, number_value = slots_for(cell)

    existing = get_cell(db, row_id=row.id, column_id=column.id)
    if existing is None:
        existing = CellValue(row_id=row.id, column_id=column.id)
        db.add(existing)
    existing.text_value = text_value
    existing.number_value = number_value
    try:
        db.commit()
    except IntegrityError:
        # a concurrent writer inserted the pair first; update theirs instead
        db.rollback()
        existing = get_cell(db, row_id=row.id, column_id=column.id)
        if existing is None:
            raise
        existing.text_value = text_value
        existing.number_value = number_value
        db.commit()
    db.refresh(existing)
    return existing


def to_out(cell: CellValue, column_type: str) -> CellValueOut:
    return CellValueOut(
        id=cell.id,
        row_id=cell.row_id,
        column_id=cell.column_id,
        cell=cell_from_slots(column_type, cell.text_value, cell.number_value),
        updated_at=cell.updated_at,
    )
