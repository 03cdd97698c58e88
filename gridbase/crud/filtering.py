# File: /gridbase/crud/filtering.py | Version: 2.0 | Title: Row filter predicates, search and multi-key sort
from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import and_, exists, not_, or_, select
from sqlalchemy.sql.elements import ColumnElement

from gridbase.models import CellValue, Row
from gridbase.models.core_entities import ColumnType
from gridbase.schemas.cells import format_number, parse_number
from gridbase.schemas.filters import FilterCondition, FilterOperator, SortCriterion, SortDirection
from gridbase.schemas.rows import RowView

log = logging.getLogger(__name__)


def _cell_exists(column_id: str, *conds) -> ColumnElement:
    return exists(
        select(CellValue.id).where(
            CellValue.row_id == Row.id,
            CellValue.column_id == column_id,
            *conds,
        )
    )


def _has_content():
    return or_(
        and_(CellValue.text_value.is_not(None), CellValue.text_value != ""),
        CellValue.number_value.is_not(None),
    )


def _equals(column_type: str, raw: str) -> Optional[ColumnElement]:
    if column_type == ColumnType.NUMBER.value:
        num = parse_number(raw)
        if num is None:
            return None
        return CellValue.number_value == num
    return CellValue.text_value == raw


def _contains(raw: str) -> ColumnElement:
    return CellValue.text_value.icontains(raw, autoescape=True)


def condition_expr(cond: FilterCondition, column_type: str) -> Optional[ColumnElement]:
    """
    SQL predicate on Row for one condition, or None when the condition
    cannot apply (e.g. a numeric operand that does not parse).
    A row without a cell for the column behaves like an empty cell.
    """
    op = cond.operator
    col_id = cond.column_id
    raw = cond.value or ""

    if op in (FilterOperator.is_, FilterOperator.eq):
        eq = _equals(column_type, raw)
        return None if eq is None else _cell_exists(col_id, eq)
    if op in (FilterOperator.is_not, FilterOperator.ne):
        eq = _equals(column_type, raw)
        return None if eq is None else not_(_cell_exists(col_id, eq))
    if op == FilterOperator.contains:
        return _cell_exists(col_id, _contains(raw))
    if op == FilterOperator.not_contains:
        return not_(_cell_exists(col_id, _contains(raw)))
    if op == FilterOperator.is_empty:
        return not_(_cell_exists(col_id, _has_content()))
    if op == FilterOperator.is_not_empty:
        return _cell_exists(col_id, _has_content())
    if op in (FilterOperator.gt, FilterOperator.lt):
        num = parse_number(raw)
        if num is None:
            return None
        cmp = CellValue.number_value > num if op == FilterOperator.gt else CellValue.number_value < num
        return _cell_exists(col_id, cmp)
    return None


def filters_expr(
    filters: Sequence[FilterCondition], column_types: Dict[str, str]
) -> Optional[ColumnElement]:
    exprs = []
    for cond in filters:
        column_type = column_types.get(cond.column_id)
        if column_type is None:
            log.debug("Ignoring filter on unknown column %s", cond.column_id)
            continue
        e = condition_expr(cond, column_type)
        if e is not None:
            exprs.append(e)
    if not exprs:
        return None
    return and_(*exprs)


def search_expr(search: str) -> Optional[ColumnElement]:
    """Any text cell containing the term, or any number cell equal to it."""
    term = (search or "").strip()
    if not term:
        return None
    matches = [CellValue.text_value.icontains(term, autoescape=True)]
    num = parse_number(term)
    if num is not None:
        matches.append(CellValue.number_value == num)
    return exists(select(CellValue.id).where(CellValue.row_id == Row.id, or_(*matches)))


# ----------------------
# In-memory sort
# ----------------------

def sort_value(row: RowView, column_id: str) -> Any:
    cell = row.cells.get(column_id)
    if cell is None:
        return None
    return cell.value


def _as_sort_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return format_number(value)
    return str(value).lower()


def compare_values(a: Any, b: Any) -> int:
    """Numbers compare numerically; anything else (missing included) as case-insensitive text."""
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return (a > b) - (a < b)
    sa, sb = _as_sort_text(a), _as_sort_text(b)
    return (sa > sb) - (sa < sb)


def sort_rows(rows: Sequence[RowView], sorts: Sequence[SortCriterion]) -> List[RowView]:
    """Stable lexicographic sort; the first criterion is primary, ties keep input order."""

    def _cmp(left: RowView, right: RowView) -> int:
        for crit in sorts:
            c = compare_values(sort_value(left, crit.column_id), sort_value(right, crit.column_id))
            if crit.direction == SortDirection.desc:
                c = -c
            if c:
                return c
        return 0

    return sorted(rows, key=cmp_to_key(_cmp))
