# File: /gridbase/core/permissions.py | Version: 2.0
"""
Ownership guards.

A user reaches a table, column, row, cell or view only through a base they own.
Every guard answers 404 (not 403) so that ids of other users' objects are not
confirmed to exist.
"""
from __future__ import annotations

from typing import Any, Iterable, List

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from gridbase.models import DataTable, Row, TableColumn, View, Workbase


def _not_found(kind: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{kind} not found")


def owns_base(db: Session, *, user_id: Any, base_id: Any) -> bool:
    owner = db.execute(select(Workbase.owner_id).where(Workbase.id == str(base_id))).scalar()
    return owner is not None and str(owner) == str(user_id)


def require_base(db: Session, *, user_id: Any, base_id: Any) -> Workbase:
    base = db.get(Workbase, str(base_id))
    if base is None or str(base.owner_id) != str(user_id):
        raise _not_found("Base")
    return base


def require_table(db: Session, *, user_id: Any, table_id: Any) -> DataTable:
    table = db.get(DataTable, str(table_id))
    if table is None or not owns_base(db, user_id=user_id, base_id=table.base_id):
        raise _not_found("Table")
    return table


def require_column(db: Session, *, user_id: Any, column_id: Any) -> TableColumn:
    column = db.get(TableColumn, str(column_id))
    if column is None:
        raise _not_found("Column")
    require_table(db, user_id=user_id, table_id=column.table_id)
    return column


def require_row(db: Session, *, user_id: Any, row_id: Any) -> Row:
    row = db.get(Row, str(row_id))
    if row is None:
        raise _not_found("Row")
    try:
        require_table(db, user_id=user_id, table_id=row.table_id)
    except HTTPException:
        raise _not_found("Row")
    return row


def require_view(db: Session, *, user_id: Any, view_id: Any) -> View:
    view = db.get(View, str(view_id))
    if view is None:
        raise _not_found("View")
    try:
        require_table(db, user_id=user_id, table_id=view.table_id)
    except HTTPException:
        raise _not_found("View")
    return view


def owned_row_ids(db: Session, *, user_id: Any, row_ids: Iterable[str]) -> List[str]:
    """Filter `row_ids` down to rows living in tables of bases owned by the user."""
    ids = [str(r) for r in row_ids]
    if not ids:
        return []
    stmt = (
        select(Row.id)
        .join(DataTable, DataTable.id == Row.table_id)
        .join(Workbase, Workbase.id == DataTable.base_id)
        .where(Row.id.in_(ids), Workbase.owner_id == str(user_id))
    )
    return list(db.execute(stmt).scalars().all())
