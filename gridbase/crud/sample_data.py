# File: /gridbase/crud/sample_data.py | Version: 1.0 | Title: Sample values for new tables and bulk generation
from __future__ import annotations

import random
from typing import Optional, Tuple

from gridbase.models.core_entities import ColumnType

DEFAULT_COLUMNS: Tuple[Tuple[str, ColumnType], ...] = (
    ("Name", ColumnType.TEXT),
    ("Notes", ColumnType.TEXT),
    ("Value", ColumnType.NUMBER),
)

TABLE_NAMES = (
    "Books", "Clothing", "Electronics", "Garden", "Grocery",
    "Health", "Home", "Jewelery", "Music", "Outdoors", "Sports", "Toys",
)

FIRST_NAMES = (
    "Ada", "Alan", "Anna", "Barbara", "Bob", "Carmen", "Chen", "Dmitri",
    "Edsger", "Fatima", "Grace", "Hedy", "Ines", "Jamal", "Katherine",
    "Linus", "Margaret", "Noor", "Olga", "Priya", "Radia", "Sofia", "Tim", "Yusuf",
)


class SampleValues:
    """Deterministic when seeded; one instance per generation run."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def table_name(self) -> str:
        return self._rng.choice(TABLE_NAMES)

    def text(self) -> str:
        return self._rng.choice(FIRST_NAMES)

    def number(self) -> float:
        return round(self._rng.uniform(1, 1000), 2)

    def slots(self, column_type: str) -> Tuple[Optional[str], Optional[float]]:
        if column_type == ColumnType.NUMBER.value:
            return None, self.number()
        return self.text(), None
