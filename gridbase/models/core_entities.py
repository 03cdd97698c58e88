# File: /gridbase/models/core_entities.py | Version: 2.0 | Path: /gridbase/models/core_entities.py
from __future__ import annotations

from datetime import datetime, UTC
from enum import Enum
from typing import List as TList, Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gridbase.db.base_class import Base


def gen_uuid() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


class ColumnType(str, Enum):
    TEXT = "TEXT"
    NUMBER = "NUMBER"


class User(Base):
    __tablename__ = "user"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    bases: Mapped[TList["Workbase"]] = relationship(back_populates="owner", cascade="all, delete-orphan")


class Workbase(Base):
    """A base: top-level container of tables, owned by one user."""

    __tablename__ = "base"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[str] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    last_opened_table_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    owner: Mapped["User"] = relationship(back_populates="bases")
    tables: Mapped[TList["DataTable"]] = relationship(back_populates="base", cascade="all, delete-orphan")


class DataTable(Base):
    __tablename__ = "data_table"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    base_id: Mapped[str] = mapped_column(ForeignKey("base.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    base: Mapped["Workbase"] = relationship(back_populates="tables")
    columns: Mapped[TList["TableColumn"]] = relationship(
        back_populates="table",
        cascade="all, delete-orphan",
        order_by=lambda: [TableColumn.position, TableColumn.created_at],
    )
    rows: Mapped[TList["Row"]] = relationship(back_populates="table", cascade="all, delete-orphan")
    views: Mapped[TList["View"]] = relationship(back_populates="table", cascade="all, delete-orphan")


class TableColumn(Base):
    __tablename__ = "table_column"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("data_table.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=ColumnType.TEXT.value)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    table: Mapped["DataTable"] = relationship(back_populates="columns")
    cells: Mapped[TList["CellValue"]] = relationship(back_populates="column", cascade="all, delete-orphan")


class Row(Base):
    __tablename__ = "row"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("data_table.id", ondelete="CASCADE"), index=True, nullable=False)
    # Only set for rows produced by bulk generation
    batch_id: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    table: Mapped["DataTable"] = relationship(back_populates="rows")
    cells: Mapped[TList["CellValue"]] = relationship(back_populates="row", cascade="all, delete-orphan")


class CellValue(Base):
    __tablename__ = "cell_value"
    __table_args__ = (UniqueConstraint("row_id", "column_id", name="uq_cell_value_row_column"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    row_id: Mapped[str] = mapped_column(ForeignKey("row.id", ondelete="CASCADE"), index=True, nullable=False)
    column_id: Mapped[str] = mapped_column(ForeignKey("table_column.id", ondelete="CASCADE"), index=True, nullable=False)
    # Exactly one slot is populated, chosen by the owning column's type
    text_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    number_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    row: Mapped["Row"] = relationship(back_populates="cells")
    column: Mapped["TableColumn"] = relationship(back_populates="cells")


# Keyset pagination walks rows of one table in creation order
Index("ix_row_table_id_created_at_id", Row.table_id, Row.created_at, Row.id)
