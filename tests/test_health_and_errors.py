# File: tests/test_health_and_errors.py | Version: 1.0 | Title: Health probes, logging config, sentry toggle, error envelope
import logging
import sys
import types

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from gridbase.core import config
from gridbase.core.error_handlers import register_exception_handlers
from gridbase.core.logging import configure_logging
from gridbase.observability.sentry import init_sentry_if_configured


def test_health_endpoints(client):
    assert client.get("/healthz").json()["status"] == "ok"
    r = client.get("/readyz")
    assert r.status_code == 200, r.text


def test_configure_logging_plain_and_json(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_JSON", "false")
    configure_logging()
    logging.getLogger(__name__).debug("plain-log")
    monkeypatch.setenv("LOG_JSON", "true")
    configure_logging()
    logging.getLogger(__name__).info("json-log")
    assert logging.getLogger("httpx").level == logging.WARNING


def test_sentry_init_disabled_then_enabled(monkeypatch):
    monkeypatch.setattr(config.settings, "SENTRY_DSN", "")
    assert init_sentry_if_configured() is False

    calls = {}
    fake = types.SimpleNamespace(init=lambda **kw: calls.update(kw))
    monkeypatch.setitem(sys.modules, "sentry_sdk", fake)
    monkeypatch.setattr(config.settings, "SENTRY_DSN", "https://key@example.ingest.sentry.io/1")
    assert init_sentry_if_configured() is True
    assert calls["dsn"].startswith("https://")


def test_standard_error_envelope():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise HTTPException(status_code=404, detail="Row not found")

    r = TestClient(app).get("/boom")
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "Row not found"
