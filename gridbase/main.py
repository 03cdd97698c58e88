# File: /gridbase/main.py | Version: 2.0 | Title: FastAPI App (router includes + optional std errors)
from __future__ import annotations

import importlib
import importlib.util
import logging

from fastapi import FastAPI

from gridbase import __version__
from gridbase.core.config import settings
from gridbase.core.logging import configure_logging
from gridbase.observability.sentry import init_sentry_if_configured

# Initialize logging & observability
configure_logging()
logging.getLogger("python_multipart.multipart").setLevel(logging.WARNING)
init_sentry_if_configured()

# App
app = FastAPI(title="Gridbase API", version=__version__)


def include_if_exists(module_path: str, attr_name: str = "router") -> bool:
    spec = importlib.util.find_spec(module_path)
    if not spec:
        return False
    mod = importlib.import_module(module_path)
    router = getattr(mod, attr_name, None)
    if router is not None:
        app.include_router(router)
        return True
    return False


# Required routers
include_if_exists("gridbase.routers.auth")
include_if_exists("gridbase.routers.bases")
include_if_exists("gridbase.routers.columns")
include_if_exists("gridbase.routers.rows")
include_if_exists("gridbase.routers.cells")
include_if_exists("gridbase.routers.views")

# Optional routers
include_if_exists("gridbase.routers.health")

# Optional standardized error responses
if getattr(settings, "ENABLE_STD_ERRORS", False):
    from gridbase.core.error_handlers import register_exception_handlers

    register_exception_handlers(app)
