# File: /gridbase/client/api.py | Version: 1.1 | Title: Typed HTTP client for the grid API
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import httpx

from gridbase.schemas.cells import CellValueOut, NumberCell, TextCell
from gridbase.schemas.core_entities import BaseOut, ColumnOut, TableOut
from gridbase.schemas.filters import FilterCondition, SortCriterion
from gridbase.schemas.rows import (
    DeleteAllRowsResult,
    GenerateRowsResult,
    RowPage,
    RowQuery,
    RowView,
)
from gridbase.schemas.view import ViewOut

log = logging.getLogger(__name__)

CellPayload = Union[TextCell, NumberCell]


class ApiError(Exception):
    """Non-2xx answer from the API."""

    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


def _require_name(name: str, what: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError(f"{what} name must not be empty")
    return cleaned


class GridApiClient:
    """
    Thin wrapper over an httpx client (FastAPI's TestClient works too).
    Every method maps to one remote procedure and returns pydantic models.
    """

    def __init__(self, http: httpx.Client, token: Optional[str] = None):
        self.http = http
        self.token = token

    # ----- plumbing -----

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, url: str, **kwargs) -> Any:
        resp = self.http.request(method, url, headers=self._headers(), **kwargs)
        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = None
            detail = body.get("detail", resp.text) if isinstance(body, dict) else resp.text
            log.debug("%s %s failed with %s: %s", method, url, resp.status_code, detail)
            raise ApiError(resp.status_code, detail)
        if not resp.content:
            return None
        return resp.json()

    # ----- auth -----

    def login(self, email: str, password: str) -> str:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return self.token

    # ----- bases & tables -----

    def create_base(self, name: str) -> BaseOut:
        body = {"name": _require_name(name, "Base")}
        return BaseOut.model_validate(self._request("POST", "/bases", json=body))

    def list_tables(self, base_id: str) -> List[TableOut]:
        return [TableOut.model_validate(t) for t in self._request("GET", f"/bases/{base_id}/tables")]

    def create_table(self, base_id: str, name: str) -> TableOut:
        body = {"base_id": base_id, "name": _require_name(name, "Table")}
        return TableOut.model_validate(self._request("POST", "/tables", json=body))

    def delete_table(self, table_id: str) -> None:
        self._request("DELETE", f"/tables/{table_id}")

    # ----- columns -----

    def list_columns(self, table_id: str) -> List[ColumnOut]:
        return [ColumnOut.model_validate(c) for c in self._request("GET", f"/tables/{table_id}/columns")]

    def create_column(self, table_id: str, name: str, type: str = "TEXT") -> ColumnOut:
        body = {"name": _require_name(name, "Column"), "type": type}
        return ColumnOut.model_validate(self._request("POST", f"/tables/{table_id}/columns", json=body))

    def create_columns(self, table_id: str, items: Iterable[Mapping[str, Any]]) -> List[ColumnOut]:
        body = [{**i, "name": _require_name(i.get("name", ""), "Column")} for i in items]
        data = self._request("POST", f"/tables/{table_id}/columns/bulk", json=body)
        return [ColumnOut.model_validate(c) for c in data]

    def edit_column(self, column_id: str, *, name: Optional[str] = None, type: Optional[str] = None) -> ColumnOut:
        body: Dict[str, Any] = {}
        if name is not None:
            body["name"] = _require_name(name, "Column")
        if type is not None:
            body["type"] = type
        return ColumnOut.model_validate(self._request("PATCH", f"/columns/{column_id}", json=body))

    def delete_column(self, column_id: str) -> None:
        self._request("DELETE", f"/columns/{column_id}")

    # ----- rows -----

    def fetch_rows(
        self,
        table_id: str,
        *,
        limit: int = 50,
        cursor: Optional[str] = None,
        filters: Iterable[FilterCondition] = (),
        sorts: Iterable[SortCriterion] = (),
        search: str = "",
    ) -> RowPage:
        query = RowQuery(limit=limit, cursor=cursor, filters=list(filters), sorts=list(sorts), search=search)
        data = self._request("POST", f"/tables/{table_id}/rows/query", json=query.model_dump(mode="json"))
        return RowPage.model_validate(data)

    def count_rows(self, table_id: str) -> int:
        return int(self._request("GET", f"/tables/{table_id}/rows/count")["total"])

    def create_row(self, table_id: str, cells: Optional[Mapping[str, CellPayload]] = None) -> RowView:
        body = {"cells": {k: v.model_dump() for k, v in (cells or {}).items()}}
        return RowView.model_validate(self._request("POST", f"/tables/{table_id}/rows", json=body))

    def create_rows(self, table_id: str, cells_per_row: Iterable[Mapping[str, CellPayload]]) -> List[RowView]:
        body = [{"cells": {k: v.model_dump() for k, v in cells.items()}} for cells in cells_per_row]
        return [RowView.model_validate(r) for r in self._request("POST", f"/tables/{table_id}/rows/bulk", json=body)]

    def delete_row(self, row_id: str) -> None:
        self._request("DELETE", f"/rows/{row_id}")

    def delete_rows(self, ids: Iterable[str]) -> int:
        return int(self._request("POST", "/rows/delete", json={"ids": list(ids)})["deleted"])

    def generate_rows(self, table_id: str, count: int, batch_size: int = 5000) -> GenerateRowsResult:
        body = {"count": count, "batch_size": batch_size}
        return GenerateRowsResult.model_validate(self._request("POST", f"/tables/{table_id}/rows/generate", json=body))

    def delete_all_rows(self, table_id: str) -> DeleteAllRowsResult:
        return DeleteAllRowsResult.model_validate(self._request("DELETE", f"/tables/{table_id}/rows"))

    # ----- cells -----

    def upsert_cell(self, row_id: str, column_id: str, cell: CellPayload) -> CellValueOut:
        body = {"row_id": row_id, "column_id": column_id, "cell": cell.model_dump()}
        return CellValueOut.model_validate(self._request("PUT", "/cells", json=body))

    # ----- views -----

    def list_views(self, table_id: str) -> List[ViewOut]:
        return [ViewOut.model_validate(v) for v in self._request("GET", f"/tables/{table_id}/views")]

    def create_view(self, table_id: str, name: str, **data: Any) -> ViewOut:
        body = {"name": _require_name(name, "View"), **_view_body(data)}
        return ViewOut.model_validate(self._request("POST", f"/tables/{table_id}/views", json=body))

    def update_view(self, view_id: str, **data: Any) -> ViewOut:
        body = _view_body(data)
        if "name" in data:
            body["name"] = _require_name(data["name"], "View")
        return ViewOut.model_validate(self._request("PATCH", f"/views/{view_id}", json=body))

    def delete_view(self, view_id: str) -> None:
        self._request("DELETE", f"/views/{view_id}")


def _view_body(data: Mapping[str, Any]) -> Dict[str, Any]:
    body: Dict[str, Any] = {}
    for key in ("filters", "sort_criteria"):
        if key in data:
            body[key] = [i.model_dump(mode="json") if hasattr(i, "model_dump") else i for i in data[key]]
    if "hidden_columns" in data:
        body["hidden_columns"] = list(data["hidden_columns"])
    return body
