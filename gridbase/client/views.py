# File: /gridbase/client/views.py | Version: 1.0 | Title: Saved-view binding state + client-local applied-view store
from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Optional, Union
from uuid import uuid4

log = logging.getLogger(__name__)


class BindingState(str, Enum):
    idle = "idle"
    applying = "applying"


class ViewBinding:
    """
    Tracks which saved view drives the grid descriptors.

    While a view is being applied the binding is `applying` and holds a
    token; descriptor changes made under that token come from the view
    itself and must not be written back to it.
    """

    def __init__(self, view_id: Optional[str] = None):
        self.view_id = view_id
        self.state = BindingState.idle
        self.token: Optional[str] = None

    def begin_apply(self, view_id: str) -> str:
        self.view_id = view_id
        self.state = BindingState.applying
        self.token = uuid4().hex
        return self.token

    def finish_apply(self, token: str) -> bool:
        if token != self.token:
            return False
        self.state = BindingState.idle
        self.token = None
        return True

    @contextmanager
    def applying(self, view_id: str) -> Iterator[str]:
        token = self.begin_apply(view_id)
        try:
            yield token
        finally:
            self.finish_apply(token)

    def should_write_back(self) -> bool:
        return self.view_id is not None and self.state == BindingState.idle

    def detach(self) -> None:
        self.view_id = None
        self.state = BindingState.idle
        self.token = None


class LocalViewStore:
    """Applied view id per table id, kept in a JSON file on this machine."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable view store %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def get(self, table_id: str) -> Optional[str]:
        return self._load().get(table_id)

    def set(self, table_id: str, view_id: str) -> None:
        data = self._load()
        data[table_id] = view_id
        self._save(data)

    def clear(self, table_id: str) -> None:
        data = self._load()
        if data.pop(table_id, None) is not None:
            self._save(data)
