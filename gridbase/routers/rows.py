# File: /gridbase/routers/rows.py | Version: 2.1 | Title: Row fetch/count + row mutations + bulk generation
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gridbase.core.permissions import owned_row_ids, require_row, require_table
from gridbase.crud import rows as crud_rows
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas.rows import (
    DeleteAllRowsResult,
    GenerateRowsRequest,
    GenerateRowsResult,
    RowCount,
    RowCreate,
    RowPage,
    RowQuery,
    RowsDelete,
    RowsDeleted,
    RowView,
)
from gridbase.security import get_current_user

router = APIRouter(tags=["Rows"])
log = logging.getLogger(__name__)


# ----- READ ROUTES -----


@router.post("/tables/{table_id}/rows/query", response_model=RowPage)
def query_rows(
    table_id: str,
    query: RowQuery,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    return crud_rows.fetch_rows(db, table_id=table_id, query=query)


@router.get("/tables/{table_id}/rows/count", response_model=RowCount)
def count_rows(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    return RowCount(total=crud_rows.count_rows(db, table_id))


# ----- WRITE ROUTES -----


@router.post("/tables/{table_id}/rows", response_model=RowView)
def create_row(
    table_id: str,
    data: Optional[RowCreate] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    try:
        return crud_rows.create_row(db, table_id=table_id, cells=data.cells if data else None)
    except crud_rows.CellTypeMismatch as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post("/tables/{table_id}/rows/bulk", response_model=List[RowView])
def create_rows(
    table_id: str,
    items: List[RowCreate],
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    try:
        return crud_rows.create_rows(db, table_id=table_id, cells_per_row=[i.cells for i in items])
    except crud_rows.CellTypeMismatch as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.delete("/rows/{row_id}")
def delete_row(
    row_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = require_row(db, user_id=current_user.id, row_id=row_id)
    crud_rows.delete_row(db, row)
    return {"detail": "Row deleted"}


@router.post("/rows/delete", response_model=RowsDeleted)
def delete_rows(
    data: RowsDelete,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # ids outside the caller's bases are skipped, not reported
    ids = owned_row_ids(db, user_id=current_user.id, row_ids=data.ids)
    return RowsDeleted(deleted=crud_rows.delete_rows(db, ids))


# ----- BULK ROUTES -----


@router.post("/tables/{table_id}/rows/generate", response_model=GenerateRowsResult)
def generate_rows(
    table_id: str,
    data: GenerateRowsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    table = require_table(db, user_id=current_user.id, table_id=table_id)
    try:
        result = crud_rows.generate_rows(db, table=table, count=data.count, batch_size=data.batch_size)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    log.info("Generated %d rows in %d batches for table %s", result.rows_created, result.batch_count, table_id)
    return result


@router.delete("/tables/{table_id}/rows", response_model=DeleteAllRowsResult)
def delete_all_rows(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table(db, user_id=current_user.id, table_id=table_id)
    return crud_rows.delete_all_rows(db, table_id)
