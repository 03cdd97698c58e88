# File: /gridbase/client/__init__.py | Version: 1.0
"""
Headless client for the grid API: typed HTTP calls, the windowed row cache,
row virtualization, per-cell edit state and the table grid that ties them
together.
"""
from gridbase.client.api import ApiError, GridApiClient
from gridbase.client.cache import FetchTicket, GridQuery, WindowedRowCache
from gridbase.client.cell_editor import CellEditController, CellState, CommitStyle, PendingWrite
from gridbase.client.grid import TableGrid
from gridbase.client.views import BindingState, LocalViewStore, ViewBinding
from gridbase.client.virtualizer import RowVirtualizer, VirtualItem

__all__ = [
    "ApiError",
    "BindingState",
    "CellEditController",
    "CellState",
    "CommitStyle",
    "FetchTicket",
    "GridApiClient",
    "GridQuery",
    "LocalViewStore",
    "PendingWrite",
    "RowVirtualizer",
    "TableGrid",
    "ViewBinding",
    "VirtualItem",
    "WindowedRowCache",
]
