# File: /gridbase/crud/core_entities.py | Version: 2.0 | Path: /gridbase/crud/core_entities.py
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from gridbase.core.config import settings
from gridbase.crud.sample_data import DEFAULT_COLUMNS, SampleValues
from gridbase.models import CellValue, DataTable, Row, TableColumn, View, Workbase
from gridbase.models.core_entities import utcnow
from gridbase.schemas import core_entities as schema

log = logging.getLogger(__name__)

DEFAULT_VIEW_NAME = "Default View"

# ----- BASE CRUD -----


def create_base(
    db: Session, data: schema.BaseCreate, owner_id: str, *, sample_rows: Optional[int] = None
) -> Workbase:
    """
    Create the base AND its first table (default columns, sample rows, default view).
    The first table is recorded as the last opened one.
    """
    try:
        base = Workbase(name=data.name, owner_id=owner_id)
        db.add(base)
        db.flush()
        table = _build_table(db, base_id=base.id, name=SampleValues().table_name(), sample_rows=sample_rows)
        base.last_opened_table_id = table.id
        db.commit()
        db.refresh(base)
        log.info("Created base %s with first table %s", base.id, table.id)
        return base
    except Exception:
        db.rollback()
        raise


def get_bases_for_user(db: Session, owner_id: str) -> List[Workbase]:
    stmt = (
        select(Workbase)
        .where(Workbase.owner_id == owner_id)
        .order_by(Workbase.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def update_base(db: Session, base: Workbase, data: schema.BaseUpdate) -> Workbase:
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(base, field, value)
    db.commit()
    db.refresh(base)
    return base


def set_last_opened_table(db: Session, base: Workbase, table_id: str) -> Workbase:
    base.last_opened_table_id = table_id
    db.commit()
    db.refresh(base)
    return base


def delete_base(db: Session, base: Workbase) -> None:
    table_ids = [t.id for t in base.tables]
    try:
        for table_id in table_ids:
            _purge_table_contents(db, table_id)
        db.expire_all()
        db.delete(base)
        db.commit()
    except Exception:
        db.rollback()
        raise


# ----- TABLE CRUD -----


def _build_table(db: Session, *, base_id: str, name: str, sample_rows: Optional[int]) -> DataTable:
    table = DataTable(base_id=base_id, name=name)
    db.add(table)
    db.flush()

    now = utcnow()
    columns = []
    for position, (col_name, col_type) in enumerate(DEFAULT_COLUMNS):
        col = TableColumn(
            table_id=table.id,
            name=col_name,
            type=col_type.value,
            position=position,
            created_at=now + timedelta(microseconds=position),
        )
        db.add(col)
        columns.append(col)
    db.flush()

    count = settings.SAMPLE_ROW_COUNT if sample_rows is None else sample_rows
    values = SampleValues()
    for i in range(count):
        # distinct timestamps keep creation order stable for pagination
        row = Row(table_id=table.id, created_at=now + timedelta(microseconds=i))
        db.add(row)
        db.flush()
        for col in columns:
            text_value, number_value = values.slots(col.type)
            db.add(
                CellValue(
                    row_id=row.id,
                    column_id=col.id,
                    text_value=text_value,
                    number_value=number_value,
                )
            )

    db.add(View(table_id=table.id, name=DEFAULT_VIEW_NAME, filters_json=[], sorts_json=[], hidden_columns_json=[]))
    db.flush()
    return table


def create_table(
    db: Session, data: schema.TableCreate, *, sample_rows: Optional[int] = None
) -> DataTable:
    try:
        table = _build_table(db, base_id=data.base_id, name=data.name, sample_rows=sample_rows)
        db.commit()
        db.refresh(table)
        return table
    except Exception:
        db.rollback()
        raise


def get_tables_for_base(db: Session, base_id: str) -> List[DataTable]:
    stmt = (
        select(DataTable)
        .where(DataTable.base_id == base_id)
        .order_by(DataTable.created_at.asc(), DataTable.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def update_table(db: Session, table: DataTable, data: schema.TableUpdate) -> DataTable:
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(table, field, value)
    db.commit()
    db.refresh(table)
    return table


def _purge_table_contents(db: Session, table_id: str) -> None:
    column_ids = select(TableColumn.id).where(TableColumn.table_id == table_id)
    row_ids = select(Row.id).where(Row.table_id == table_id)
    db.execute(
        delete(CellValue)
        .where((CellValue.column_id.in_(column_ids)) | (CellValue.row_id.in_(row_ids)))
        .execution_options(synchronize_session=False)
    )
    db.execute(delete(Row).where(Row.table_id == table_id).execution_options(synchronize_session=False))
    db.execute(
        delete(TableColumn).where(TableColumn.table_id == table_id).execution_options(synchronize_session=False)
    )
    db.execute(delete(View).where(View.table_id == table_id).execution_options(synchronize_session=False))


def delete_table(db: Session, table: DataTable) -> None:
    """Cascade: cells, rows, columns and views go before the table itself."""
    try:
        _purge_table_contents(db, table.id)
        base = db.get(Workbase, table.base_id)
        if base is not None and base.last_opened_table_id == table.id:
            base.last_opened_table_id = None
        db.flush()
        db.expire_all()
        db.delete(table)
        db.commit()
    except Exception:
        db.rollback()
        raise
