# File: /gridbase/crud/columns.py | Version: 1.3 | Title: Column CRUD (append position + type conversion)
from __future__ import annotations

import logging
from typing import List, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from gridbase.models import CellValue, TableColumn
from gridbase.models.core_entities import ColumnType
from gridbase.schemas import core_entities as schema
from gridbase.schemas.cells import format_number, parse_number

log = logging.getLogger(__name__)


def list_columns(db: Session, table_id: str) -> List[TableColumn]:
    stmt = (
        select(TableColumn)
        .where(TableColumn.table_id == table_id)
        .order_by(TableColumn.position.asc(), TableColumn.created_at.asc(), TableColumn.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def column_types(db: Session, table_id: str) -> dict[str, str]:
    """column id -> declared type for every column of the table"""
    rows = db.execute(
        select(TableColumn.id, TableColumn.type).where(TableColumn.table_id == table_id)
    ).all()
    return {cid: ctype for cid, ctype in rows}


def _column_count(db: Session, table_id: str) -> int:
    return db.execute(
        select(func.count(TableColumn.id)).where(TableColumn.table_id == table_id)
    ).scalar_one()


def create_column(db: Session, *, table_id: str, data: schema.ColumnCreate) -> TableColumn:
    position = data.position if data.position is not None else _column_count(db, table_id)
    col = TableColumn(table_id=table_id, name=data.name, type=data.type.value, position=position)
    db.add(col)
    db.commit()
    db.refresh(col)
    return col


def create_columns(
    db: Session, *, table_id: str, items: Sequence[schema.ColumnCreate]
) -> List[TableColumn]:
    """All-or-nothing: one transaction for the whole batch."""
    base_position = _column_count(db, table_id)
    created: List[TableColumn] = []
    try:
        for offset, data in enumerate(items):
            position = data.position if data.position is not None else base_position + offset
            col = TableColumn(table_id=table_id, name=data.name, type=data.type.value, position=position)
            db.add(col)
            # flush per column so created_at breaks position ties in request order
            db.flush()
            created.append(col)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for col in created:
        db.refresh(col)
    return created


def _convert_cells(db: Session, column: TableColumn, new_type: str) -> int:
    cells = db.execute(select(CellValue).where(CellValue.column_id == column.id)).scalars().all()
    for cell in cells:
        if new_type == ColumnType.NUMBER.value:
            cell.number_value = parse_number(cell.text_value)
            cell.text_value = None
        else:
            cell.text_value = format_number(cell.number_value)
            cell.number_value = None
    return len(cells)


def update_column(db: Session, column: TableColumn, data: schema.ColumnUpdate) -> TableColumn:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    new_type = changes.pop("type", None)
    try:
        if new_type is not None:
            new_type = ColumnType(new_type).value
            if new_type != column.type:
                converted = _convert_cells(db, column, new_type)
                log.info("Column %s %s -> %s (%d cells converted)", column.id, column.type, new_type, converted)
                column.type = new_type
        for field, value in changes.items():
            setattr(column, field, value)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(column)
    return column


def delete_column(db: Session, column: TableColumn) -> None:
    # cells go with the column through the relationship cascade
    db.delete(column)
    db.commit()
