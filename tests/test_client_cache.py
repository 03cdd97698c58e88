# File: /tests/test_client_cache.py | Version: 1.0 | Title: Windowed row cache against the live API
from __future__ import annotations

from typing import List

import pytest

from gridbase.client import ApiError, GridApiClient, GridQuery, WindowedRowCache
from gridbase.schemas.cells import TextCell
from gridbase.schemas.filters import FilterCondition


@pytest.fixture()
def seeded(api: GridApiClient, empty_table):
    tid = empty_table["table_id"]
    col = api.create_column(tid, "Name")
    rows = api.create_rows(tid, [{col.id: TextCell(value=f"row {i:02d}")} for i in range(12)])
    return tid, col.id, [r.id for r in rows]


def _ids(rows) -> List[str]:
    return [r.id for r in rows]


def test_pages_accumulate_in_order(api, seeded):
    tid, _, ids = seeded
    cache = WindowedRowCache(api, GridQuery(table_id=tid, page_size=5))
    assert cache.load_first_page()
    cache.refresh_count()
    assert cache.total == 12 and cache.has_more

    assert cache.fetch_next_page()
    assert cache.fetch_next_page()
    assert _ids(cache.rows) == ids
    assert cache.next_cursor is None and not cache.has_more
    assert cache.fetch_next_page() is False


def test_fetch_next_page_waits_for_inflight_fetch(api, seeded):
    tid, _, _ = seeded
    cache = WindowedRowCache(api, GridQuery(table_id=tid, page_size=5))
    cache.load_first_page()
    cache.begin_fetch(cache.next_cursor)
    assert cache.is_fetching
    assert cache.fetch_next_page() is False
    assert cache.loaded == 5


def test_stale_response_is_discarded(api, seeded):
    tid, col, ids = seeded
    cache = WindowedRowCache(api, GridQuery(table_id=tid, page_size=5))
    cache.load_first_page()

    slow = cache.begin_fetch(None, replace=True)
    slow_page = api.fetch_rows(tid, limit=5)

    api.upsert_cell(ids[0], col, TextCell(value="fresh"))
    assert cache.invalidate()
    assert cache.rows[0].cells[col].value == "fresh"

    # the older response lands last and must not clobber the newer one
    assert cache.complete(slow, [slow_page]) is False
    assert cache.rows[0].cells[col].value == "fresh"


def test_response_from_previous_query_is_discarded(api, seeded):
    tid, col, ids = seeded
    cache = WindowedRowCache(api, GridQuery(table_id=tid, page_size=5))
    cache.load_first_page()
    old = cache.begin_fetch(cache.next_cursor)
    old_page = api.fetch_rows(tid, limit=5, cursor=old.cursor)

    narrowed = cache.query.model_copy(
        update={"filters": [FilterCondition(column_id=col, operator="contains", value="row 1")]}
    )
    cache.set_query(narrowed)
    cache.load_first_page()
    assert _ids(cache.rows) == ids[10:12]

    assert cache.complete(old, [old_page]) is False
    assert _ids(cache.rows) == ids[10:12]


def test_refetch_overwrites_local_edits(api, seeded):
    tid, col, ids = seeded
    cache = WindowedRowCache(api, GridQuery(table_id=tid, page_size=5))
    cache.load_first_page()
    revision = cache.revision

    cache.apply_cell(ids[1], col, TextCell(value="local only"))
    assert cache.rows[1].cells[col].value == "local only"
    assert cache.server_rows[1].cells[col].value == "row 01"
    assert cache.revision == revision

    cache.invalidate()
    assert cache.rows[1].cells[col].value == "row 01"
    assert cache.revision == revision + 1


def test_invalidate_reloads_every_loaded_page(api, seeded):
    tid, _, ids = seeded
    cache = WindowedRowCache(api, GridQuery(table_id=tid, page_size=5))
    cache.load_first_page()
    cache.fetch_next_page()
    cache.invalidate()
    assert len(cache.pages) == 2
    assert _ids(cache.rows) == ids[:10]


def test_optimistic_row_changes_and_restore(api, seeded):
    tid, _, ids = seeded
    cache = WindowedRowCache(api, GridQuery(table_id=tid, page_size=5))
    cache.load_first_page()
    before = cache.rows

    cache.remove_rows(ids[:2])
    assert _ids(cache.rows) == ids[2:5]
    assert _ids(before) == ids[:5]  # previous list untouched

    cache.restore_server_rows()
    assert _ids(cache.rows) == ids[:5]


def test_read_failure_sets_error(api):
    cache = WindowedRowCache(api, GridQuery(table_id="no-such-table"))
    assert cache.load_first_page() is False
    assert isinstance(cache.error, ApiError)
    assert cache.error.status_code == 404
    assert cache.rows == []
    cache.refresh_count()
    assert cache.total is None
