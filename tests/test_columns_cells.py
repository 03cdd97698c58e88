# File: /tests/test_columns_cells.py | Version: 1.0 | Title: Column CRUD + typed cell upsert
from __future__ import annotations


def _row(client, headers, table_id: str) -> str:
    return client.post(f"/tables/{table_id}/rows", headers=headers).json()["id"]


def _put(client, headers, row_id, column_id, cell):
    return client.put("/cells", json={"row_id": row_id, "column_id": column_id, "cell": cell}, headers=headers)


def test_column_positions_and_bulk(client, headers, empty_table):
    tid = empty_table["table_id"]
    a = client.post(f"/tables/{tid}/columns", json={"name": "A"}, headers=headers).json()
    assert a["position"] == 0 and a["type"] == "TEXT"

    r = client.post(
        f"/tables/{tid}/columns/bulk",
        json=[{"name": "B", "type": "NUMBER"}, {"name": "C"}],
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert [(c["name"], c["position"]) for c in r.json()] == [("B", 1), ("C", 2)]

    listed = client.get(f"/tables/{tid}/columns", headers=headers).json()
    assert [c["name"] for c in listed] == ["A", "B", "C"]

    assert client.post(f"/tables/{tid}/columns", json={"name": " "}, headers=headers).status_code == 422
    assert client.post(f"/tables/{tid}/columns", json={"name": "X", "type": "DATE"}, headers=headers).status_code == 422


def test_edit_column_converts_cells(client, headers, empty_table):
    tid = empty_table["table_id"]
    col = client.post(f"/tables/{tid}/columns", json={"name": "Qty"}, headers=headers).json()
    r1, r2 = _row(client, headers, tid), _row(client, headers, tid)
    _put(client, headers, r1, col["id"], {"type": "TEXT", "value": " 42 "})
    _put(client, headers, r2, col["id"], {"type": "TEXT", "value": "many"})

    r = client.patch(f"/columns/{col['id']}", json={"name": "Quantity", "type": "NUMBER"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "Quantity" and r.json()["type"] == "NUMBER"

    rows = client.post(f"/tables/{tid}/rows/query", json={}, headers=headers).json()["rows"]
    values = {row["id"]: row["cells"][col["id"]] for row in rows}
    assert values[r1] == {"type": "NUMBER", "value": 42.0}
    assert values[r2] == {"type": "NUMBER", "value": None}

    # and back: numbers print without a trailing .0
    client.patch(f"/columns/{col['id']}", json={"type": "TEXT"}, headers=headers)
    rows = client.post(f"/tables/{tid}/rows/query", json={}, headers=headers).json()["rows"]
    values = {row["id"]: row["cells"][col["id"]] for row in rows}
    assert values[r1] == {"type": "TEXT", "value": "42"}
    assert values[r2] == {"type": "TEXT", "value": ""}


def test_delete_column_drops_its_cells(client, headers, empty_table):
    tid = empty_table["table_id"]
    keep = client.post(f"/tables/{tid}/columns", json={"name": "Keep"}, headers=headers).json()
    gone = client.post(f"/tables/{tid}/columns", json={"name": "Gone"}, headers=headers).json()
    row = _row(client, headers, tid)
    _put(client, headers, row, keep["id"], {"type": "TEXT", "value": "k"})
    _put(client, headers, row, gone["id"], {"type": "TEXT", "value": "g"})

    r = client.delete(f"/columns/{gone['id']}", headers=headers)
    assert r.status_code == 200 and r.json()["detail"] == "Column deleted"
    cells = client.post(f"/tables/{tid}/rows/query", json={}, headers=headers).json()["rows"][0]["cells"]
    assert list(cells) == [keep["id"]]
    assert client.patch(f"/columns/{gone['id']}", json={"name": "x"}, headers=headers).status_code == 404


def test_upsert_cell_insert_then_update(client, headers, empty_table):
    tid = empty_table["table_id"]
    num = client.post(f"/tables/{tid}/columns", json={"name": "N", "type": "NUMBER"}, headers=headers).json()
    row = _row(client, headers, tid)

    first = _put(client, headers, row, num["id"], {"type": "NUMBER", "value": 3})
    assert first.status_code == 200, first.text
    second = _put(client, headers, row, num["id"], {"type": "NUMBER", "value": None})
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["cell"] == {"type": "NUMBER", "value": None}


def test_upsert_cell_rejections(client, headers, empty_table, api):
    tid = empty_table["table_id"]
    text = client.post(f"/tables/{tid}/columns", json={"name": "T"}, headers=headers).json()
    row = _row(client, headers, tid)

    assert _put(client, headers, row, text["id"], {"type": "NUMBER", "value": 1}).status_code == 422
    assert _put(client, headers, row, text["id"], {"type": "DATE", "value": "x"}).status_code == 422
    assert _put(client, headers, "missing", text["id"], {"type": "TEXT", "value": "x"}).status_code == 404

    other = api.create_table(empty_table["base_id"], "Other")
    other_col = api.list_columns(other.id)[0]
    assert other_col.type.value == "TEXT"
    r = _put(client, headers, row, other_col.id, {"type": "TEXT", "value": "x"})
    assert r.status_code == 400
