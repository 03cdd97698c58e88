# File: /gridbase/routers/__init__.py | Version: 2.0 | Path: /gridbase/routers/__init__.py
"""
Router package exports.

Keeping these explicit helps static analyzers and avoids surprises
when importing submodules like: `from gridbase.routers import rows as rows_router`.
"""
from . import auth, bases, cells, columns, health, rows, views

__all__ = ["auth", "bases", "cells", "columns", "health", "rows", "views"]
