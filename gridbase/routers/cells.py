# File: /gridbase/routers/cells.py | Version: 1.1 | Title: Cell value upsert
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gridbase.core.permissions import require_column, require_row
from gridbase.crud import cells as crud_cells
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas.cells import CellValueOut, CellValueUpsert
from gridbase.security import get_current_user

router = APIRouter(tags=["Cells"])
log = logging.getLogger(__name__)


@router.put("/cells", response_model=CellValueOut)
def upsert_cell_value(
    data: CellValueUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = require_row(db, user_id=current_user.id, row_id=data.row_id)
    column = require_column(db, user_id=current_user.id, column_id=data.column_id)
    if row.table_id != column.table_id:
        raise HTTPException(status_code=400, detail="Row and column belong to different tables")
    if data.cell.type != column.type:
        raise HTTPException(
            status_code=422,
            detail=f"Column '{column.name}' holds {column.type} values, got {data.cell.type}",
        )
    cell = crud_cells.upsert_cell(db, row=row, column=column, cell=data.cell)
    log.debug("Upserted cell %s (row=%s column=%s)", cell.id, row.id, column.id)
    return crud_cells.to_out(cell, column.type)
