# File: /gridbase/schemas/__init__.py | Version: 2.0 | Path: /gridbase/schemas/__init__.py
from . import auth, cells, core_entities, filters, rows, view

__all__ = ["auth", "cells", "core_entities", "filters", "rows", "view"]
