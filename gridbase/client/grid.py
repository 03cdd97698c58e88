# File: /gridbase/client/grid.py | Version: 1.4 | Title: Table grid (row window + virtualizer + cell editors + saved views)
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import uuid4

from gridbase.client.api import GridApiClient
from gridbase.client.cache import FETCH_ERRORS, GridQuery, WindowedRowCache
from gridbase.client.cell_editor import CellEditController, CommitStyle, PendingWrite
from gridbase.client.views import LocalViewStore, ViewBinding
from gridbase.client.virtualizer import RowVirtualizer
from gridbase.core.config import settings
from gridbase.crud.sample_data import DEFAULT_COLUMNS
from gridbase.schemas.core_entities import ColumnOut
from gridbase.schemas.filters import FilterCondition, SortCriterion
from gridbase.schemas.rows import RowView
from gridbase.schemas.view import ViewOut

log = logging.getLogger(__name__)

CellKey = Tuple[str, str]


class TableGrid:
    """
    Headless model of the table screen.

    Owns the row window, the virtualizer and one CellEditController per
    touched cell, and routes keyboard/mouse events to them. Enter and blur
    commit with a refetch afterwards; Tab commits silently so the focus
    move to the next cell is not followed by a re-render.
    """

    def __init__(
        self,
        api: GridApiClient,
        table_id: str,
        *,
        page_size: int = 100,
        viewport_height: int = 600,
        view_store: Optional[LocalViewStore] = None,
    ):
        self.api = api
        self.table_id = table_id
        self.viewport_height = viewport_height
        self.scroll_top = 0
        self.columns: List[ColumnOut] = []
        self.hidden_columns: List[str] = []
        self.cache = WindowedRowCache(api, GridQuery(table_id=table_id, page_size=page_size))
        self.virtualizer = RowVirtualizer()
        self.binding = ViewBinding()
        self.view_store = view_store
        self.focus: Optional[CellKey] = None
        self.selected: Set[str] = set()
        self.mounted: List[int] = []
        self.last_error: Optional[Exception] = None
        self._editors: Dict[CellKey, CellEditController] = {}

    # ----- lifecycle -----

    def open(self) -> None:
        self.reload_columns()
        if not self.columns:
            self._seed_sample_data()

        stored = self.view_store.get(self.table_id) if self.view_store else None
        if stored:
            view = next((v for v in self.api.list_views(self.table_id) if v.id == stored), None)
            if view is not None:
                self.apply_view(view)
                return
            self.view_store.clear(self.table_id)

        self.cache.load_first_page()
        self.cache.refresh_count()
        self._after_refetch()

    def _seed_sample_data(self) -> None:
        items = [{"name": name, "type": ctype.value} for name, ctype in DEFAULT_COLUMNS]
        self.columns = self.api.create_columns(self.table_id, items)
        self.api.generate_rows(self.table_id, settings.SAMPLE_ROW_COUNT)
        log.info("Seeded empty table %s with sample columns and rows", self.table_id)

    def refresh(self) -> None:
        self.cache.invalidate()
        self.cache.refresh_count()
        self._after_refetch()

    # ----- derived state -----

    @property
    def rows(self) -> List[RowView]:
        return self.cache.rows

    @property
    def visible_columns(self) -> List[ColumnOut]:
        hidden = set(self.hidden_columns)
        return [c for c in self.columns if c.id not in hidden]

    @property
    def error(self) -> Optional[Exception]:
        return self.cache.error

    def _column(self, column_id: str) -> ColumnOut:
        for c in self.columns:
            if c.id == column_id:
                return c
        raise KeyError(f"Unknown column {column_id}")

    # ----- rendering -----

    def _layout(self) -> None:
        self.virtualizer.set_count(len(self.cache.rows))
        items = self.virtualizer.get_virtual_items(self.scroll_top, self.viewport_height)
        self.mounted = [i.index for i in items]

    def _after_refetch(self) -> None:
        by_id = {r.id: r for r in self.cache.rows}
        for key, ed in list(self._editors.items()):
            row = by_id.get(key[0])
            if row is None:
                del self._editors[key]
                continue
            cell = row.cells.get(key[1])
            ed.sync_server_value(cell.value if cell is not None else None)
        if self.focus and self.focus[0] not in by_id:
            self.focus = None
        self._layout()

    def scroll(self, scroll_top: int) -> None:
        self.scroll_top = max(0, scroll_top)
        self._layout()
        if self.virtualizer.should_fetch_more(self.scroll_top, self.viewport_height) and self.cache.has_more:
            if self.cache.fetch_next_page():
                self._after_refetch()

    # ----- cells & keyboard -----

    def editor(self, row_id: str, column_id: str) -> CellEditController:
        key = (row_id, column_id)
        ed = self._editors.get(key)
        if ed is None:
            column = self._column(column_id)
            row = self.cache.find_row(row_id)
            cell = row.cells.get(column_id) if row is not None else None
            ed = CellEditController(row_id, column_id, column.type, cell.value if cell is not None else None)
            self._editors[key] = ed
        return ed

    def _focused(self) -> Optional[CellEditController]:
        return self.editor(*self.focus) if self.focus else None

    def click_cell(self, row_id: str, column_id: str) -> None:
        if self.focus and self.focus != (row_id, column_id):
            if not self.blur():
                return
        self.focus = (row_id, column_id)
        self.editor(row_id, column_id).begin_edit()

    def type_text(self, text: str) -> None:
        ed = self._focused()
        if ed is not None:
            ed.type_text(text)

    def press_enter(self) -> bool:
        ed = self._focused()
        if ed is None:
            return False
        write = ed.commit(CommitStyle.RECONCILING)
        return self._dispatch(write) if write else True

    def blur(self) -> bool:
        """Commit and release focus. On a failed write the cell keeps focus, reopened."""
        if not self.press_enter():
            return False
        self.focus = None
        return True

    def press_tab(self) -> bool:
        ed = self._focused()
        if ed is None:
            return False
        write = ed.commit(CommitStyle.SILENT)
        if write and not self._dispatch(write):
            return False
        nxt = self._next_cell()
        if nxt is not None:
            self.focus = nxt
            self.editor(*nxt).begin_edit()
        return True

    def press_escape(self) -> None:
        ed = self._focused()
        if ed is not None:
            was_optimistic = ed.is_optimistic
            ed.cancel()
            if was_optimistic:
                self._show_restored(ed)

    def _next_cell(self) -> Optional[CellKey]:
        col_ids = [c.id for c in self.visible_columns]
        row_ids = [r.id for r in self.cache.rows]
        row_id, column_id = self.focus
        if column_id not in col_ids or row_id not in row_ids:
            return None
        ci = col_ids.index(column_id)
        if ci + 1 < len(col_ids):
            return (row_id, col_ids[ci + 1])
        ri = row_ids.index(row_id)
        if ri + 1 < len(row_ids):
            return (row_ids[ri + 1], col_ids[0])
        return None

    def _dispatch(self, write: PendingWrite) -> bool:
        ed = self._editors[(write.row_id, write.column_id)]
        self.cache.apply_cell(write.row_id, write.column_id, write.cell)
        try:
            out = self.api.upsert_cell(write.row_id, write.column_id, write.cell)
        except FETCH_ERRORS as e:
            log.error("Cell write failed (row=%s column=%s): %s", write.row_id, write.column_id, e)
            self.last_error = e
            ed.resolve_failure(write.token)
            self._show_restored(ed)
            self.focus = (write.row_id, write.column_id)
            return False
        ed.resolve_success(write.token, out.cell)
        if write.style == CommitStyle.RECONCILING:
            self.refresh()
        return True

    def _show_restored(self, ed: CellEditController) -> None:
        # the controller holds the pre-edit value; server_rows can lag behind silent commits
        self.cache.apply_cell(ed.row_id, ed.column_id, ed.to_cell(ed.displayed_value))

    # ----- rows -----

    def add_row(self) -> Optional[RowView]:
        self.cache.insert_row(RowView(id=f"temp-{uuid4().hex}"))
        self._layout()
        try:
            row = self.api.create_row(self.table_id)
        except FETCH_ERRORS as e:
            self._rollback_rows("Row create failed", e)
            return None
        self.refresh()
        return row

    def toggle_select(self, row_id: str) -> None:
        if row_id in self.selected:
            self.selected.discard(row_id)
        else:
            self.selected.add(row_id)

    def delete_selected(self) -> int:
        ids = sorted(self.selected)
        if not ids:
            return 0
        self.cache.remove_rows(ids)
        self._layout()
        try:
            deleted = self.api.delete_rows(ids)
        except FETCH_ERRORS as e:
            self._rollback_rows("Bulk row delete failed", e)
            return 0
        self.selected.clear()
        self.refresh()
        return deleted

    def delete_row(self, row_id: str) -> bool:
        self.cache.remove_rows([row_id])
        self._layout()
        try:
            self.api.delete_row(row_id)
        except FETCH_ERRORS as e:
            self._rollback_rows("Row delete failed", e)
            return False
        self.selected.discard(row_id)
        self.refresh()
        return True

    def generate_rows(self, count: int) -> None:
        self.api.generate_rows(self.table_id, count)
        self.refresh()

    def delete_all_rows(self) -> None:
        self.api.delete_all_rows(self.table_id)
        self.selected.clear()
        self.refresh()

    def _rollback_rows(self, what: str, exc: Exception) -> None:
        log.error("%s for table %s: %s", what, self.table_id, exc)
        self.last_error = exc
        self.cache.restore_server_rows()
        self._layout()

    # ----- columns -----

    def reload_columns(self) -> None:
        self.columns = self.api.list_columns(self.table_id)

    def _forget_column(self, column_id: str) -> None:
        for key in [k for k in self._editors if k[1] == column_id]:
            del self._editors[key]
        if self.focus and self.focus[1] == column_id:
            self.focus = None

    def add_column(self, name: str, type: str = "TEXT") -> Optional[ColumnOut]:
        try:
            column = self.api.create_column(self.table_id, name, type)
        except FETCH_ERRORS as e:
            log.error("Column create failed for table %s: %s", self.table_id, e)
            self.last_error = e
            return None
        self.reload_columns()
        self.refresh()
        return column

    def edit_column(self, column_id: str, *, name: Optional[str] = None, type: Optional[str] = None) -> Optional[ColumnOut]:
        try:
            column = self.api.edit_column(column_id, name=name, type=type)
        except FETCH_ERRORS as e:
            log.error("Column edit failed for %s: %s", column_id, e)
            self.last_error = e
            return None
        self._forget_column(column_id)
        self.reload_columns()
        self.refresh()
        return column

    def delete_column(self, column_id: str) -> bool:
        try:
            self.api.delete_column(column_id)
        except FETCH_ERRORS as e:
            log.error("Column delete failed for %s: %s", column_id, e)
            self.last_error = e
            return False
        self._forget_column(column_id)
        if column_id in self.hidden_columns:
            self.set_hidden_columns([c for c in self.hidden_columns if c != column_id])
        self.reload_columns()
        self.refresh()
        return True

    # ----- descriptors & saved views -----

    def _requery(self, **changes) -> None:
        self.cache.set_query(self.cache.query.model_copy(update=changes))
        self.scroll_top = 0
        self.cache.load_first_page()
        self.cache.refresh_count()
        self._after_refetch()

    def _write_back(self, **fields) -> None:
        if not self.binding.should_write_back():
            return
        try:
            self.api.update_view(self.binding.view_id, **fields)
        except FETCH_ERRORS as e:
            log.error("Saving view %s failed: %s", self.binding.view_id, e)
            self.last_error = e

    def set_filters(self, filters: Iterable[FilterCondition]) -> None:
        filters = list(filters)
        self._requery(filters=filters)
        self._write_back(filters=filters)

    def set_sorts(self, sorts: Iterable[SortCriterion]) -> None:
        sorts = list(sorts)
        self._requery(sorts=sorts)
        self._write_back(sort_criteria=sorts)

    def set_search(self, search: str) -> None:
        self._requery(search=search)

    def set_hidden_columns(self, column_ids: Iterable[str]) -> None:
        self.hidden_columns = list(column_ids)
        if self.focus and self.focus[1] in self.hidden_columns:
            self.focus = None
        self._write_back(hidden_columns=self.hidden_columns)

    def apply_view(self, view: ViewOut) -> None:
        with self.binding.applying(view.id):
            self.set_hidden_columns(view.hidden_columns)
            self._requery(filters=list(view.filters), sorts=list(view.sort_criteria))
        if self.view_store:
            self.view_store.set(self.table_id, view.id)

    def save_view(self, name: str) -> ViewOut:
        q = self.cache.query
        view = self.api.create_view(
            self.table_id,
            name,
            filters=q.filters,
            sort_criteria=q.sorts,
            hidden_columns=self.hidden_columns,
        )
        self.apply_view(view)
        return view

    def detach_view(self) -> None:
        self.binding.detach()
        if self.view_store:
            self.view_store.clear(self.table_id)
