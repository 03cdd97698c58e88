# File: /tests/test_rows_query.py | Version: 1.0 | Title: Row fetch: cursor pages, filters, search, multi-key sort
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

MISSING = object()


def _seed(client, headers, table_id: str, records: Sequence[Tuple[Any, Any]]):
    """Name (TEXT) + Value (NUMBER) columns; MISSING leaves the cell out entirely."""
    name_col = client.post(
        f"/tables/{table_id}/columns", json={"name": "Name", "type": "TEXT"}, headers=headers
    ).json()["id"]
    value_col = client.post(
        f"/tables/{table_id}/columns", json={"name": "Value", "type": "NUMBER"}, headers=headers
    ).json()["id"]
    payload = []
    for name, value in records:
        cells: Dict[str, Any] = {}
        if name is not MISSING:
            cells[name_col] = {"type": "TEXT", "value": name}
        if value is not MISSING:
            cells[value_col] = {"type": "NUMBER", "value": value}
        payload.append({"cells": cells})
    r = client.post(f"/tables/{table_id}/rows/bulk", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    return name_col, value_col, [row["id"] for row in r.json()]


def _query(client, headers, table_id: str, **body) -> Dict[str, Any]:
    r = client.post(f"/tables/{table_id}/rows/query", json=body, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def _all_pages(client, headers, table_id: str, **body) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    cursor: Optional[str] = None
    for _ in range(100):
        page = _query(client, headers, table_id, cursor=cursor, **body)
        rows.extend(page["rows"])
        cursor = page["next_cursor"]
        if cursor is None:
            return rows
    raise AssertionError("pagination did not terminate")


def _cell(row, column_id):
    cell = row["cells"].get(column_id)
    return None if cell is None else cell["value"]


# ---------- pagination ----------


def test_unsorted_pages_concatenate_to_creation_order(client, headers, empty_table):
    tid = empty_table["table_id"]
    _, _, ids = _seed(client, headers, tid, [(f"r{i}", i) for i in range(23)])

    first = _query(client, headers, tid, limit=5)
    assert len(first["rows"]) == 5 and first["next_cursor"] == ids[5]

    rows = _all_pages(client, headers, tid, limit=5)
    assert [r["id"] for r in rows] == ids
    assert len({r["id"] for r in rows}) == 23


def test_exact_multiple_of_limit_has_no_trailing_cursor(client, headers, empty_table):
    tid = empty_table["table_id"]
    _seed(client, headers, tid, [(f"r{i}", i) for i in range(10)])
    second = _query(client, headers, tid, limit=5, cursor=_query(client, headers, tid, limit=5)["next_cursor"])
    assert len(second["rows"]) == 5
    assert second["next_cursor"] is None


def test_sorted_pages_concatenate_to_full_sort(client, headers, empty_table):
    tid = empty_table["table_id"]
    values = [7, 3, 7, None, 1, 3, 9, 7, 2, 3, 5, 8, 1]
    _, vcol, ids = _seed(client, headers, tid, [(f"r{i}", v) for i, v in enumerate(values)])
    sorts = [{"column_id": vcol, "direction": "desc"}]

    full = _query(client, headers, tid, limit=100, sorts=sorts)["rows"]
    paged = _all_pages(client, headers, tid, limit=4, sorts=sorts)
    assert [r["id"] for r in paged] == [r["id"] for r in full]
    assert sorted(r["id"] for r in paged) == sorted(ids)

    # ties keep creation order
    sevens = [r["id"] for r in full if _cell(r, vcol) == 7]
    assert sevens == [ids[0], ids[2], ids[7]]


def test_unknown_cursor_returns_empty_page(client, headers, empty_table):
    tid = empty_table["table_id"]
    _seed(client, headers, tid, [("a", 1)])
    page = _query(client, headers, tid, cursor="no-such-row")
    assert page == {"rows": [], "next_cursor": None}


def test_limit_bounds(client, headers, empty_table):
    tid = empty_table["table_id"]
    for bad in (0, 101):
        r = client.post(f"/tables/{tid}/rows/query", json={"limit": bad}, headers=headers)
        assert r.status_code == 422


# ---------- sorting ----------


def test_number_sort_puts_empty_first(client, headers, empty_table):
    tid = empty_table["table_id"]
    _, vcol, ids = _seed(client, headers, tid, [("a", 30), ("b", 5), ("c", None)])

    asc = _query(client, headers, tid, sorts=[{"column_id": vcol, "direction": "asc"}])["rows"]
    assert [_cell(r, vcol) for r in asc] == [None, 5, 30]

    desc = _query(client, headers, tid, sorts=[{"column_id": vcol, "direction": "desc"}])["rows"]
    assert [_cell(r, vcol) for r in desc] == [30, 5, None]


def test_text_sort_is_case_insensitive_and_stable(client, headers, empty_table):
    tid = empty_table["table_id"]
    ncol, _, ids = _seed(
        client, headers, tid, [("Anna", 1), ("anna", 2), ("Bob", 3), ("", 4), (MISSING, 5)]
    )
    rows = _query(client, headers, tid, sorts=[{"column_id": ncol, "direction": "asc"}])["rows"]
    assert [r["id"] for r in rows] == [ids[3], ids[4], ids[0], ids[1], ids[2]]


def test_multi_key_sort(client, headers, empty_table):
    tid = empty_table["table_id"]
    ncol, vcol, ids = _seed(client, headers, tid, [("b", 1), ("a", 2), ("b", 0), ("a", 1)])
    sorts = [{"column_id": ncol, "direction": "asc"}, {"column_id": vcol, "direction": "desc"}]
    rows = _query(client, headers, tid, sorts=sorts)["rows"]
    assert [r["id"] for r in rows] == [ids[1], ids[3], ids[0], ids[2]]


def test_sort_on_unknown_column_is_dropped(client, headers, empty_table):
    tid = empty_table["table_id"]
    _, _, ids = _seed(client, headers, tid, [("x", 3), ("y", 1)])
    rows = _query(client, headers, tid, sorts=[{"column_id": "ghost", "direction": "desc"}])["rows"]
    assert [r["id"] for r in rows] == ids


# ---------- filters ----------


def test_contains_an_matches_anna_only(client, headers, empty_table):
    tid = empty_table["table_id"]
    ncol, _, ids = _seed(client, headers, tid, [("Anna", MISSING), ("Bob", MISSING)])
    rows = _query(
        client, headers, tid, filters=[{"column_id": ncol, "operator": "contains", "value": "an"}]
    )["rows"]
    assert [r["id"] for r in rows] == [ids[0]]
    assert _cell(rows[0], ncol) == "Anna"


@pytest.fixture()
def operator_table(client, headers, empty_table):
    tid = empty_table["table_id"]
    ncol, vcol, ids = _seed(
        client,
        headers,
        tid,
        [("Anna", 10), ("anna", 20), ("Bob", None), ("", 5), (MISSING, 30)],
    )
    return tid, ncol, vcol, ids


@pytest.mark.parametrize(
    "column, operator, value, expected",
    [
        ("name", "is", "Anna", [0]),
        ("name", "is not", "Anna", [1, 2, 3, 4]),
        ("name", "contains", "AN", [0, 1]),
        ("name", "does not contain", "an", [2, 3, 4]),
        ("name", "is empty", "", [3, 4]),
        ("name", "is not empty", "", [0, 1, 2]),
        ("value", ">", "9", [0, 1, 4]),
        ("value", "<", "10", [3]),
        ("value", "=", "20", [1]),
        ("value", "!=", "20", [0, 2, 3, 4]),
        ("value", "is empty", "", [2]),
        ("value", "=", "abc", [0, 1, 2, 3, 4]),
    ],
)
def test_filter_operators(client, headers, operator_table, column, operator, value, expected):
    tid, ncol, vcol, ids = operator_table
    col = ncol if column == "name" else vcol
    rows = _query(
        client, headers, tid, filters=[{"column_id": col, "operator": operator, "value": value}]
    )["rows"]
    assert [r["id"] for r in rows] == [ids[i] for i in expected]


def test_filters_combine_with_and(client, headers, operator_table):
    tid, ncol, vcol, ids = operator_table
    filters = [
        {"column_id": ncol, "operator": "contains", "value": "an"},
        {"column_id": vcol, "operator": ">", "value": "15"},
        {"column_id": "ghost", "operator": "is", "value": "ignored"},
    ]
    rows = _query(client, headers, tid, filters=filters)["rows"]
    assert [r["id"] for r in rows] == [ids[1]]


def test_filter_with_pagination_and_sort(client, headers, empty_table):
    tid = empty_table["table_id"]
    ncol, vcol, ids = _seed(client, headers, tid, [(f"item {i}", i % 4) for i in range(20)])
    body = {
        "filters": [{"column_id": vcol, "operator": ">", "value": "1"}],
        "sorts": [{"column_id": vcol, "direction": "asc"}],
    }
    rows = _all_pages(client, headers, tid, limit=3, **body)
    assert len(rows) == 10
    assert [_cell(r, vcol) for r in rows] == [2] * 5 + [3] * 5


# ---------- search ----------


def test_search_matches_text_and_exact_numbers(client, headers, operator_table):
    tid, ncol, vcol, ids = operator_table
    assert [r["id"] for r in _query(client, headers, tid, search="bob")["rows"]] == [ids[2]]
    assert [r["id"] for r in _query(client, headers, tid, search="30")["rows"]] == [ids[4]]
    assert len(_query(client, headers, tid, search="   ")["rows"]) == 5


def test_search_treats_wildcards_literally(client, headers, empty_table):
    tid = empty_table["table_id"]
    _, _, ids = _seed(client, headers, tid, [("100%", 1), ("1000", 2)])
    assert [r["id"] for r in _query(client, headers, tid, search="0%")["rows"]] == [ids[0]]


def test_count_is_per_table(client, headers, empty_table):
    tid = empty_table["table_id"]
    _seed(client, headers, tid, [("a", 1), ("b", 2), ("c", 3)])
    assert client.get(f"/tables/{tid}/rows/count", headers=headers).json() == {"total": 3}
