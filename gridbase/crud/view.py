# File: /gridbase/crud/view.py | Version: 2.0 | Title: CRUD helpers for Saved Views
from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from gridbase.models.view import View
from gridbase.schemas.view import ViewCreate, ViewOut, ViewUpdate


def _dump(items) -> list:
    return [i.model_dump(mode="json") for i in items]


def create_view(db: Session, table_id: str, data: ViewCreate) -> View:
    v = View(
        table_id=table_id,
        name=data.name,
        filters_json=_dump(data.filters),
        sorts_json=_dump(data.sort_criteria),
        hidden_columns_json=list(data.hidden_columns),
    )
    db.add(v)
    db.commit()
    db.refresh(v)
    return v


def list_views(db: Session, table_id: str) -> List[View]:
    stmt = (
        select(View)
        .where(View.table_id == table_id)
        .order_by(View.created_at.asc(), View.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def update_view(db: Session, v: View, data: ViewUpdate) -> View:
    if data.name is not None:
        v.name = data.name
    if data.filters is not None:
        v.filters_json = _dump(data.filters)
    if data.sort_criteria is not None:
        v.sorts_json = _dump(data.sort_criteria)
    if data.hidden_columns is not None:
        v.hidden_columns_json = list(data.hidden_columns)
    db.commit()
    db.refresh(v)
    return v


def delete_view(db: Session, v: View) -> bool:
    db.delete(v)
    db.commit()
    return True


def to_out(v: View) -> ViewOut:
    return ViewOut(
        id=v.id,
        table_id=v.table_id,
        name=v.name,
        filters=v.filters_json or [],
        sort_criteria=v.sorts_json or [],
        hidden_columns=v.hidden_columns_json or [],
        created_at=v.created_at,
        updated_at=v.updated_at,
    )
