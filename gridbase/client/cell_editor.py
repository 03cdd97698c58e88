# File: /gridbase/client/cell_editor.py | Version: 1.2 | Title: Per-cell edit state machine (optimistic write + rollback)
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from uuid import uuid4

from gridbase.models.core_entities import ColumnType
from gridbase.schemas.cells import NumberCell, TextCell, format_number, parse_number

log = logging.getLogger(__name__)

CellScalar = Union[str, float, None]


class CellState(str, Enum):
    viewing = "viewing"
    editing = "editing"
    saving = "saving"
    reconciled = "reconciled"
    reverting = "reverting"


class CommitStyle(str, Enum):
    RECONCILING = "reconciling"  # Enter / blur: refetch afterwards
    SILENT = "silent"  # Tab: write only, leave shared row state alone


@dataclass(frozen=True)
class PendingWrite:
    token: str
    row_id: str
    column_id: str
    cell: Union[TextCell, NumberCell]
    style: CommitStyle
    raw_input: str


class CellEditController:
    """
    Edit lifecycle of one grid cell.

    viewing -> editing -> saving -> reconciled | reverting -> editing

    The controller never talks to the network itself: `commit()` hands back a
    PendingWrite and the owner reports the outcome through
    `resolve_success()` / `resolve_failure()` with the write's token.
    """

    def __init__(self, row_id: str, column_id: str, column_type: str, server_value: CellScalar = None):
        self.row_id = row_id
        self.column_id = column_id
        self.column_type = ColumnType(column_type).value
        self.server_value = self._normalize(server_value)
        self.state = CellState.viewing
        self.buffer: Optional[str] = None
        self.pending: Optional[PendingWrite] = None
        self._optimistic: CellScalar = None
        self._has_optimistic = False
        self._pre_edit: CellScalar = self.server_value

    # ----- value helpers -----

    @property
    def is_number(self) -> bool:
        return self.column_type == ColumnType.NUMBER.value

    def _normalize(self, value: CellScalar) -> CellScalar:
        if self.is_number:
            return parse_number(value)
        return "" if value is None else str(value)

    def parse(self, raw: str) -> CellScalar:
        return parse_number(raw) if self.is_number else raw

    def to_text(self, value: CellScalar) -> str:
        if self.is_number:
            return format_number(value)
        return value or ""

    def to_cell(self, value: CellScalar) -> Union[TextCell, NumberCell]:
        return NumberCell(value=value) if self.is_number else TextCell(value=value or "")

    @property
    def displayed_value(self) -> CellScalar:
        return self._optimistic if self._has_optimistic else self.server_value

    @property
    def displayed_text(self) -> str:
        return self.to_text(self.displayed_value)

    @property
    def is_optimistic(self) -> bool:
        return self._has_optimistic

    def _clear_optimistic(self) -> None:
        self._optimistic = None
        self._has_optimistic = False

    # ----- transitions -----

    def begin_edit(self) -> None:
        if self.state == CellState.editing:
            return
        self.buffer = self.displayed_text
        self.state = CellState.editing

    def type_text(self, text: str) -> None:
        if self.state != CellState.editing:
            self.begin_edit()
        self.buffer = text

    def commit(self, style: CommitStyle = CommitStyle.RECONCILING) -> Optional[PendingWrite]:
        if self.state != CellState.editing:
            return None
        raw = self.buffer or ""
        value = self.parse(raw)
        self.buffer = None
        if value == self.displayed_value:
            self.state = CellState.viewing
            return None

        if not self._has_optimistic:
            self._pre_edit = self.server_value
        self._optimistic = value
        self._has_optimistic = True
        self.state = CellState.saving
        self.pending = PendingWrite(
            token=uuid4().hex,
            row_id=self.row_id,
            column_id=self.column_id,
            cell=self.to_cell(value),
            style=style,
            raw_input=raw,
        )
        return self.pending

    def _owns(self, token: str) -> bool:
        if self.pending is None or self.pending.token != token:
            log.debug("Ignoring result for disowned write %s on cell %s/%s", token, self.row_id, self.column_id)
            return False
        return True

    def resolve_success(self, token: str, confirmed: Union[TextCell, NumberCell, None] = None) -> bool:
        if not self._owns(token):
            return False
        value = self._optimistic if confirmed is None else self._normalize(confirmed.value)
        self.pending = None
        self.server_value = value
        self._pre_edit = value
        self._clear_optimistic()
        if self.state == CellState.saving:
            self.state = CellState.reconciled
        return True

    def resolve_failure(self, token: str) -> bool:
        if not self._owns(token):
            return False
        failed = self.pending.raw_input
        self.pending = None
        self.state = CellState.reverting
        self.server_value = self._pre_edit
        self._clear_optimistic()
        # reopen with what the user typed so the retry is one keystroke away
        self.buffer = failed
        self.state = CellState.editing
        return True

    def cancel(self) -> None:
        self.buffer = None
        if self._has_optimistic:
            self.pending = None
            self.server_value = self._pre_edit
            self._clear_optimistic()
        self.state = CellState.viewing

    def sync_server_value(self, value: CellScalar) -> None:
        self.server_value = self._normalize(value)
        if self._has_optimistic and self._optimistic == self.server_value:
            self._clear_optimistic()
            self.pending = None
            if self.state == CellState.saving:
                self.state = CellState.viewing
        if not self._has_optimistic:
            self._pre_edit = self.server_value
        if self.state == CellState.reconciled:
            self.state = CellState.viewing
