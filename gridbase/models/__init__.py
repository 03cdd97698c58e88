# File: /gridbase/models/__init__.py | Version: 2.0 | Title: Models Package Exports
from .core_entities import (
    CellValue,
    ColumnType,
    DataTable,
    Row,
    TableColumn,
    User,
    Workbase,
)
from .view import View

__all__ = [
    "User",
    "Workbase",
    "DataTable",
    "TableColumn",
    "ColumnType",
    "Row",
    "CellValue",
    "View",
]
