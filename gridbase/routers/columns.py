# File: /gridbase/routers/columns.py | Version: 1.2 | Title: Column routes (list/create/bulk/edit/delete)
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gridbase.core.permissions import require_column, require_table
from gridbase.crud import columns as crud_columns
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas import core_entities as schema
from gridbase.security import get_current_user

router = APIRouter(tags=["Columns"])


@router.get("/tables/{table_id}/columns", response_model=List[schema.ColumnOut])
def list_columns(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    return crud_columns.list_columns(db, table_id)


@router.post("/tables/{table_id}/columns", response_model=schema.ColumnOut)
def create_column(
    table_id: str,
    data: schema.ColumnCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    return crud_columns.create_column(db, table_id=table_id, data=data)


@router.post("/tables/{table_id}/columns/bulk", response_model=List[schema.ColumnOut])
def create_columns(
    table_id: str,
    items: List[schema.ColumnCreate],
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    return crud_columns.create_columns(db, table_id=table_id, items=items)


@router.patch("/columns/{column_id}", response_model=schema.ColumnOut)
def edit_column(
    column_id: str,
    data: schema.ColumnUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    column = require_column(db, user_id=current_user.id, column_id=column_id)
    return crud_columns.update_column(db, column, data)


@router.delete("/columns/{column_id}")
def delete_column(
    column_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    column = require_column(db, user_id=current_user.id, column_id=column_id)
    crud_columns.delete_column(db, column)
    return {"detail": "Column deleted"}
