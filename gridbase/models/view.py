# File: /gridbase/models/view.py | Version: 2.0 | Title: SQLAlchemy model for Saved Views
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gridbase.db.base_class import Base
from gridbase.models.core_entities import DataTable, gen_uuid, utcnow


class View(Base):
    """Named {filters, sort criteria, hidden columns} bundle shared by everyone on a table."""

    __tablename__ = "view"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("data_table.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    filters_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    sorts_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    hidden_columns_json: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    table: Mapped["DataTable"] = relationship(back_populates="views")
