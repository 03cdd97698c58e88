# File: /gridbase/routers/bases.py | Version: 1.4 | Path: /gridbase/routers/bases.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gridbase.core.permissions import require_base, require_table
from gridbase.crud import core_entities as crud_core
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas import core_entities as schema
from gridbase.security import get_current_user

router = APIRouter(tags=["Bases & Tables"])

# ----- BASE ROUTES -----


@router.post("/bases", response_model=schema.BaseOut)
def create_base(
    data: schema.BaseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # A new base always opens on a ready-to-use first table
    return crud_core.create_base(db, data, owner_id=str(current_user.id))


@router.get("/bases", response_model=List[schema.BaseOut])
def list_bases(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud_core.get_bases_for_user(db, owner_id=str(current_user.id))


@router.get("/bases/{base_id}", response_model=schema.BaseOut)
def get_base(
    base_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return require_base(db, user_id=current_user.id, base_id=base_id)


@router.patch("/bases/{base_id}", response_model=schema.BaseOut)
def update_base(
    base_id: str,
    data: schema.BaseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    base = require_base(db, user_id=current_user.id, base_id=base_id)
    return crud_core.update_base(db, base, data)


@router.delete("/bases/{base_id}")
def delete_base(
    base_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    base = require_base(db, user_id=current_user.id, base_id=base_id)
    crud_core.delete_base(db, base)
    return {"detail": "Base deleted"}


@router.post("/bases/{base_id}/last-opened-table", response_model=schema.BaseOut)
def set_last_opened_table(
    base_id: str,
    data: schema.LastOpenedTableIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    base = require_base(db, user_id=current_user.id, base_id=base_id)
    table = require_table(db, user_id=current_user.id, table_id=data.table_id)
    if table.base_id != base.id:
        raise HTTPException(status_code=400, detail="Table does not belong to this base")
    return crud_core.set_last_opened_table(db, base, table.id)


# ----- TABLE ROUTES -----


@router.post("/tables", response_model=schema.TableOut)
def create_table(
    data: schema.TableCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_base(db, user_id=current_user.id, base_id=data.base_id)
    return crud_core.create_table(db, data)


@router.get("/bases/{base_id}/tables", response_model=List[schema.TableOut])
def list_tables(
    base_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_base(db, user_id=current_user.id, base_id=base_id)
    return crud_core.get_tables_for_base(db, base_id)


@router.get("/tables/{table_id}", response_model=schema.TableOut)
def get_table(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return require_table(db, user_id=current_user.id, table_id=table_id)


@router.patch("/tables/{table_id}", response_model=schema.TableOut)
def update_table(
    table_id: str,
    data: schema.TableUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    table = require_table(db, user_id=current_user.id, table_id=table_id)
    return crud_core.update_table(db, table, data)


@router.delete("/tables/{table_id}")
def delete_table(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    table = require_table(db, user_id=current_user.id, table_id=table_id)
    crud_core.delete_table(db, table)
    return {"detail": "Table deleted"}
