# File: /gridbase/client/virtualizer.py | Version: 1.0 | Title: Row virtualization (estimate, measure, overscan)
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

ESTIMATED_ROW_HEIGHT = 33
OVERSCAN = 10
FETCH_THRESHOLD_PX = 1000


@dataclass(frozen=True)
class VirtualItem:
    index: int
    start: int
    size: int

    @property
    def end(self) -> int:
        return self.start + self.size


class RowVirtualizer:
    """
    Computes which row indices are mounted for a scroll position.

    Rows start at `estimate_size`; `measure()` replaces the estimate with the
    rendered height. With `measure_rows=False` measurements are ignored and
    every row keeps the estimate.
    """

    def __init__(
        self,
        count: int = 0,
        *,
        estimate_size: int = ESTIMATED_ROW_HEIGHT,
        overscan: int = OVERSCAN,
        measure_rows: bool = True,
        fetch_threshold: int = FETCH_THRESHOLD_PX,
    ):
        self.count = count
        self.estimate_size = estimate_size
        self.overscan = overscan
        self.measure_rows = measure_rows
        self.fetch_threshold = fetch_threshold
        self._measured: Dict[int, int] = {}

    def set_count(self, count: int) -> None:
        self.count = max(0, count)
        self._measured = {i: h for i, h in self._measured.items() if i < self.count}

    def measure(self, index: int, height: int) -> None:
        if not self.measure_rows or not 0 <= index < self.count or height <= 0:
            return
        self._measured[index] = height

    def reset_measurements(self) -> None:
        self._measured.clear()

    def size_of(self, index: int) -> int:
        return self._measured.get(index, self.estimate_size)

    def offset_of(self, index: int) -> int:
        delta = sum(h - self.estimate_size for i, h in self._measured.items() if i < index)
        return index * self.estimate_size + delta

    @property
    def total_size(self) -> int:
        return self.offset_of(self.count)

    def _index_at(self, offset: int) -> int:
        # last index whose start is <= offset
        lo, hi = 0, self.count
        while lo < hi:
            mid = (lo + hi) // 2
            if self.offset_of(mid) <= offset:
                lo = mid + 1
            else:
                hi = mid
        return max(0, lo - 1)

    def get_virtual_items(self, scroll_top: int, viewport_height: int) -> List[VirtualItem]:
        if self.count == 0:
            return []
        scroll_top = max(0, scroll_top)
        first = self._index_at(scroll_top)
        last = self._index_at(scroll_top + max(0, viewport_height - 1))
        start = max(0, first - self.overscan)
        end = min(self.count - 1, last + self.overscan)
        return [VirtualItem(i, self.offset_of(i), self.size_of(i)) for i in range(start, end + 1)]

    def should_fetch_more(self, scroll_top: int, viewport_height: int) -> bool:
        return self.total_size - scroll_top - viewport_height < self.fetch_threshold
