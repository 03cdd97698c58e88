# File: /gridbase/crud/rows.py | Version: 2.3 | Title: Row fetch (cursor pages, filters, sorts) + row mutations
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union
from uuid import uuid4

from sqlalchemy import and_, delete, func, insert, or_, select
from sqlalchemy.orm import Session, selectinload

from gridbase.crud.columns import column_types, list_columns
from gridbase.crud.filtering import filters_expr, search_expr, sort_rows
from gridbase.crud.sample_data import SampleValues
from gridbase.models import CellValue, DataTable, Row
from gridbase.models.core_entities import gen_uuid, utcnow
from gridbase.schemas.cells import NumberCell, TextCell, cell_from_slots, slots_for
from gridbase.schemas.rows import (
    DeleteAllRowsResult,
    GenerateRowsResult,
    RowPage,
    RowQuery,
    RowView,
)

log = logging.getLogger(__name__)

CELL_INSERT_CHUNK = 5000


class CellTypeMismatch(ValueError):
    """A tagged cell does not match its column's declared type."""


# -----------------------------
# Shaping
# -----------------------------
def row_to_view(row: Row, types: Mapping[str, str]) -> RowView:
    cells = {}
    for cv in row.cells:
        ctype = types.get(cv.column_id)
        if ctype is None:
            continue
        cells[cv.column_id] = cell_from_slots(ctype, cv.text_value, cv.number_value)
    return RowView(id=row.id, created_at=row.created_at, cells=cells)


# -----------------------------
# Fetch procedure
# -----------------------------
def _filtered_rows_stmt(table_id: str, query: RowQuery, types: Mapping[str, str]):
    stmt = select(Row).where(Row.table_id == table_id)
    f = filters_expr(query.filters, types)
    if f is not None:
        stmt = stmt.where(f)
    s = search_expr(query.search)
    if s is not None:
        stmt = stmt.where(s)
    return stmt.options(selectinload(Row.cells))


def _creation_order(stmt):
    return stmt.order_by(Row.created_at.asc(), Row.id.asc())


def _fetch_unsorted(db: Session, table_id: str, query: RowQuery, types: Mapping[str, str]) -> RowPage:
    stmt = _filtered_rows_stmt(table_id, query, types)
    if query.cursor:
        anchor = db.get(Row, query.cursor)
        if anchor is None or anchor.table_id != table_id:
            log.warning("Unknown cursor %s for table %s; ending pagination", query.cursor, table_id)
            return RowPage()
        # inclusive anchor: the cursor row opens the page
        stmt = stmt.where(
            or_(
                Row.created_at > anchor.created_at,
                and_(Row.created_at == anchor.created_at, Row.id >= anchor.id),
            )
        )
    rows = list(db.execute(_creation_order(stmt).limit(query.limit + 1)).scalars().all())

    next_cursor = None
    if len(rows) > query.limit:
        next_cursor = rows.pop().id
    return RowPage(rows=[row_to_view(r, types) for r in rows], next_cursor=next_cursor)


def _fetch_sorted(db: Session, table_id: str, query: RowQuery, types: Mapping[str, str]) -> RowPage:
    # Full scan of every matching row; ordering happens in memory.
    stmt = _creation_order(_filtered_rows_stmt(table_id, query, types))
    views = [row_to_view(r, types) for r in db.execute(stmt).scalars().all()]
    ordered = sort_rows(views, query.sorts)

    start = 0
    if query.cursor:
        start = next((i for i, v in enumerate(ordered) if v.id == query.cursor), -1)
        if start < 0:
            log.warning("Unknown cursor %s for table %s; ending pagination", query.cursor, table_id)
            return RowPage()
    end = start + query.limit
    next_cursor = ordered[end].id if end < len(ordered) else None
    return RowPage(rows=ordered[start:end], next_cursor=next_cursor)


def fetch_rows(db: Session, *, table_id: str, query: RowQuery) -> RowPage:
    """
    One page of rows for the table.

    Without sorts rows come in creation order via keyset pagination.
    With sorts every matching row is loaded and ordered in memory, then the
    page is located by scanning for the cursor id. In both cases the cursor
    is the id of the first row of the next page.
    """
    types = column_types(db, table_id)
    sorts = [s for s in query.sorts if s.column_id in types]
    if sorts:
        return _fetch_sorted(db, table_id, query.model_copy(update={"sorts": sorts}), types)
    return _fetch_unsorted(db, table_id, query, types)


def count_rows(db: Session, table_id: str) -> int:
    return db.execute(select(func.count(Row.id)).where(Row.table_id == table_id)).scalar_one()


# -----------------------------
# Mutations
# -----------------------------
Cell = Union[TextCell, NumberCell]


def _check_cells(cells: Mapping[str, Cell], types: Mapping[str, str]) -> None:
    for column_id, cell in cells.items():
        ctype = types.get(column_id)
        if ctype is None:
            raise CellTypeMismatch(f"Column {column_id} does not belong to this table")
        if cell.type != ctype:
            raise CellTypeMismatch(f"Column {column_id} holds {ctype} values, got {cell.type}")


def create_rows(
    db: Session, *, table_id: str, cells_per_row: Sequence[Mapping[str, Cell]]
) -> List[RowView]:
    types = column_types(db, table_id)
    for cells in cells_per_row:
        _check_cells(cells, types)

    now = utcnow()
    created: List[Row] = []
    try:
        for i, cells in enumerate(cells_per_row):
            row = Row(table_id=table_id, created_at=now + timedelta(microseconds=i))
            db.add(row)
            db.flush()
            for column_id, cell in cells.items():
                text_value, number_value = slots_for(cell)
                db.add(CellValue(row_id=row.id, column_id=column_id, text_value=text_value, number_value=number_value))
            created.append(row)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for row in created:
        db.refresh(row)
    return [row_to_view(r, types) for r in created]


def create_row(db: Session, *, table_id: str, cells: Optional[Mapping[str, Cell]] = None) -> RowView:
    return create_rows(db, table_id=table_id, cells_per_row=[cells or {}])[0]


def delete_row(db: Session, row: Row) -> None:
    db.delete(row)
    db.commit()


def delete_rows(db: Session, row_ids: Iterable[str]) -> int:
    ids = list(row_ids)
    if not ids:
        return 0
    try:
        db.execute(delete(CellValue).where(CellValue.row_id.in_(ids)).execution_options(synchronize_session=False))
        result = db.execute(delete(Row).where(Row.id.in_(ids)).execution_options(synchronize_session=False))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.expire_all()
    return result.rowcount or 0


def delete_all_rows(db: Session, table_id: str) -> DeleteAllRowsResult:
    row_ids = select(Row.id).where(Row.table_id == table_id)
    try:
        cells = db.execute(
            delete(CellValue).where(CellValue.row_id.in_(row_ids)).execution_options(synchronize_session=False)
        )
        rows = db.execute(delete(Row).where(Row.table_id == table_id).execution_options(synchronize_session=False))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.expire_all()
    return DeleteAllRowsResult(deleted_rows=rows.rowcount or 0, deleted_cells=cells.rowcount or 0)


def generate_rows(
    db: Session,
    *,
    table: DataTable,
    count: int,
    batch_size: int,
    seed: Optional[int] = None,
) -> GenerateRowsResult:
    """
    Bulk-insert `count` rows with generated values, `batch_size` rows per
    transaction. Every batch is stamped with "<operation id>-batch-<n>".
    """
    columns = list_columns(db, table.id)
    if not columns:
        raise ValueError("No columns found for this table")

    operation_id = str(uuid4())
    values = SampleValues(seed)
    batch_ids: List[str] = []
    created = 0
    start = utcnow()

    while created < count:
        size = min(batch_size, count - created)
        batch_id = f"{operation_id}-batch-{len(batch_ids) + 1}"
        row_payload: List[Dict] = []
        cell_payload: List[Dict] = []
        for i in range(size):
            row_id = gen_uuid()
            row_payload.append(
                {
                    "id": row_id,
                    "table_id": table.id,
                    "batch_id": batch_id,
                    "created_at": start + timedelta(microseconds=created + i),
                }
            )
            for col in columns:
                text_value, number_value = values.slots(col.type)
                cell_payload.append(
                    {
                        "id": gen_uuid(),
                        "row_id": row_id,
                        "column_id": col.id,
                        "text_value": text_value,
                        "number_value": number_value,
                        "updated_at": start,
                    }
                )
        try:
            db.execute(insert(Row), row_payload)
            for i in range(0, len(cell_payload), CELL_INSERT_CHUNK):
                db.execute(insert(CellValue), cell_payload[i : i + CELL_INSERT_CHUNK])
            db.commit()
        except Exception:
            db.rollback()
            raise
        batch_ids.append(batch_id)
        created += size
        log.info("Generated batch %s (%d rows) for table %s", batch_id, size, table.id)

    return GenerateRowsResult(
        rows_created=created,
        operation_batch_id=operation_id,
        batch_ids=batch_ids,
        batch_count=len(batch_ids),
    )
