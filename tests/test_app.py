"""Tests for the application composition root."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from aql_filter.app import App, create_app
from aql_filter.aql.fields import USERS
from aql_filter.config.settings import Settings


def _capture_basic_config(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    captured: dict[str, Any] = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
    return captured


def test_create_app_configures_logging_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    captured = _capture_basic_config(monkeypatch)

    app = create_app(Settings(_env_file=None, log_level="debug"))  # type: ignore[call-arg]

    assert isinstance(app, App)
    assert captured["level"] == "DEBUG"


def test_create_app_loads_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("FILTER_DOC_VAR", "user")
    captured = _capture_basic_config(monkeypatch)

    app = create_app()

    assert captured["level"] == "WARNING"
    assert app.settings.doc_var == "user"


def test_app_search_uses_its_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture_basic_config(monkeypatch)
    app = create_app(Settings(_env_file=None, doc_var="user", bind_prefix="p"))  # type: ignore[call-arg]

    result = app.search(USERS, [{"key": "status", "op": "=", "value": "active"}], page_size=5)

    assert result.filter.expression == "user.status == @p0"
    assert result.pagination.page_size == 5
