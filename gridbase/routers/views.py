# File: /gridbase/routers/views.py | Version: 2.0 | Title: Saved Views CRUD (table-scoped, shared)
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gridbase.core.permissions import require_table, require_view
from gridbase.crud import view as crud_view
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas.view import ViewCreate, ViewOut, ViewUpdate
from gridbase.security import get_current_user

router = APIRouter(tags=["Views"])


@router.get("/tables/{table_id}/views", response_model=List[ViewOut], summary="List saved views of a table")
def list_views(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    return [crud_view.to_out(v) for v in crud_view.list_views(db, table_id)]


@router.post("/tables/{table_id}/views", response_model=ViewOut, summary="Create a saved view")
def create_view(
    table_id: str,
    data: ViewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    return crud_view.to_out(crud_view.create_view(db, table_id, data))


@router.get("/views/{view_id}", response_model=ViewOut, summary="Get a saved view")
def get_view(
    view_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud_view.to_out(require_view(db, user_id=current_user.id, view_id=view_id))


@router.patch("/views/{view_id}", response_model=ViewOut, summary="Update a saved view")
def update_view(
    view_id: str,
    data: ViewUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    v = require_view(db, user_id=current_user.id, view_id=view_id)
    return crud_view.to_out(crud_view.update_view(db, v, data))


@router.delete("/views/{view_id}", summary="Delete a saved view")
def delete_view(
    view_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    v = require_view(db, user_id=current_user.id, view_id=view_id)
    crud_view.delete_view(db, v)
    return {"detail": "View deleted"}
