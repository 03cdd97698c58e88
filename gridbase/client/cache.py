# File: /gridbase/client/cache.py | Version: 1.3 | Title: Windowed row cache (paged fetch + optimistic edits)
from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Sequence, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field

from gridbase.client.api import ApiError, GridApiClient
from gridbase.core.config import settings
from gridbase.schemas.cells import NumberCell, TextCell
from gridbase.schemas.filters import FilterCondition, SortCriterion
from gridbase.schemas.rows import RowPage, RowView

log = logging.getLogger(__name__)

FETCH_ERRORS = (ApiError, httpx.HTTPError)


class GridQuery(BaseModel):
    """Descriptors identifying one row window."""

    model_config = ConfigDict(frozen=True)

    table_id: str
    page_size: int = Field(default=100, ge=1, le=settings.ROW_PAGE_MAX)
    filters: List[FilterCondition] = Field(default_factory=list)
    sorts: List[SortCriterion] = Field(default_factory=list)
    search: str = ""


class FetchTicket(NamedTuple):
    seq: int
    generation: int
    cursor: Optional[str]
    replace: bool


class WindowedRowCache:
    """
    Accumulates pages for one GridQuery into a flat client-visible row list.

    `server_rows` is always the flattening of the fetched pages. `rows` starts
    out equal to it and diverges only through optimistic edits; every
    accepted server response overwrites it wholesale.

    Each fetch is issued a ticket. A response is applied only if its ticket
    belongs to the current query generation and is newer than the last
    applied response; anything else is dropped.
    """

    def __init__(self, api: GridApiClient, query: GridQuery):
        self.api = api
        self.query = query
        self.pages: List[RowPage] = []
        self.rows: List[RowView] = []
        self.total: Optional[int] = None
        self.error: Optional[Exception] = None
        self.generation = 0
        self.revision = 0  # bumps on every server reconciliation
        self._seq = 0
        self._applied_seq = 0
        self._inflight: set[int] = set()

    # ----- derived state -----

    @property
    def server_rows(self) -> List[RowView]:
        return [row for page in self.pages for row in page.rows]

    @property
    def next_cursor(self) -> Optional[str]:
        return self.pages[-1].next_cursor if self.pages else None

    @property
    def loaded(self) -> int:
        return sum(len(p.rows) for p in self.pages)

    @property
    def is_fetching(self) -> bool:
        return bool(self._inflight)

    @property
    def has_more(self) -> bool:
        if self.next_cursor is None:
            return False
        return self.total is None or self.loaded < self.total

    # ----- ticketed fetch protocol -----

    def begin_fetch(self, cursor: Optional[str] = None, *, replace: bool = False) -> FetchTicket:
        self._seq += 1
        self._inflight.add(self._seq)
        return FetchTicket(self._seq, self.generation, cursor, replace)

    def _accepts(self, ticket: FetchTicket) -> bool:
        self._inflight.discard(ticket.seq)
        if ticket.generation != self.generation:
            log.debug("Dropping response %s from query generation %s", ticket.seq, ticket.generation)
            return False
        if ticket.seq < self._applied_seq:
            log.debug("Dropping stale response %s (applied %s)", ticket.seq, self._applied_seq)
            return False
        return True

    def complete(self, ticket: FetchTicket, pages: Sequence[RowPage]) -> bool:
        if not self._accepts(ticket):
            return False
        self._applied_seq = ticket.seq
        self.pages = list(pages) if ticket.replace else self.pages + list(pages)
        self.error = None
        self._reconcile()
        return True

    def fail(self, ticket: FetchTicket, exc: Exception) -> bool:
        if not self._accepts(ticket):
            return False
        self.error = exc
        log.warning("Row fetch failed for table %s: %s", self.query.table_id, exc)
        return True

    def _fetch_page(self, cursor: Optional[str]) -> RowPage:
        q = self.query
        return self.api.fetch_rows(
            q.table_id,
            limit=q.page_size,
            cursor=cursor,
            filters=q.filters,
            sorts=q.sorts,
            search=q.search,
        )

    def _reconcile(self) -> None:
        self.rows = self.server_rows
        self.revision += 1

    # ----- loading -----

    def load_first_page(self) -> bool:
        ticket = self.begin_fetch(None, replace=True)
        try:
            page = self._fetch_page(None)
        except FETCH_ERRORS as e:
            self.fail(ticket, e)
            return False
        return self.complete(ticket, [page])

    def fetch_next_page(self) -> bool:
        if self.is_fetching or self.next_cursor is None:
            return False
        ticket = self.begin_fetch(self.next_cursor)
        try:
            page = self._fetch_page(ticket.cursor)
        except FETCH_ERRORS as e:
            self.fail(ticket, e)
            return False
        return self.complete(ticket, [page])

    def invalidate(self) -> bool:
        """Refetch from the top as many pages as are currently loaded."""
        wanted = max(1, len(self.pages))
        ticket = self.begin_fetch(None, replace=True)
        pages: List[RowPage] = []
        cursor: Optional[str] = None
        try:
            for _ in range(wanted):
                page = self._fetch_page(cursor)
                pages.append(page)
                cursor = page.next_cursor
                if cursor is None:
                    break
        except FETCH_ERRORS as e:
            self.fail(ticket, e)
            return False
        return self.complete(ticket, pages)

    def refresh_count(self) -> Optional[int]:
        try:
            self.total = self.api.count_rows(self.query.table_id)
        except FETCH_ERRORS as e:
            self.error = e
            log.warning("Row count failed for table %s: %s", self.query.table_id, e)
        return self.total

    def set_query(self, query: GridQuery) -> None:
        """New descriptors: forget every page and start a new generation."""
        self.query = query
        self.generation += 1
        self._inflight.clear()
        self.pages = []
        self.rows = []
        self.error = None

    # ----- optimistic updates -----

    def apply_cell(self, row_id: str, column_id: str, cell: Union[TextCell, NumberCell]) -> None:
        self.rows = [
            r.model_copy(update={"cells": {**r.cells, column_id: cell}}) if r.id == row_id else r
            for r in self.rows
        ]

    def insert_row(self, row: RowView) -> None:
        self.rows = self.rows + [row]

    def remove_rows(self, row_ids) -> None:
        doomed = set(row_ids)
        self.rows = [r for r in self.rows if r.id not in doomed]

    def restore_server_rows(self) -> None:
        self.rows = self.server_rows

    def find_row(self, row_id: str) -> Optional[RowView]:
        return next((r for r in self.rows if r.id == row_id), None)

