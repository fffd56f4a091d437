"""Tests for the route-facing search boundary and its logging."""

from __future__ import annotations

import logging

import pytest

from aql_filter.aql.fields import USERS
from aql_filter.aql.pagination import Pagination, SortSpec
from aql_filter.config.settings import Settings
from aql_filter.filters.errors import InvalidField, InvalidOperator
from aql_filter.search import build_search


def _settings(**overrides: object) -> Settings:
    return Settings(_env_file=None, **overrides)  # type: ignore[arg-type]


def test_build_search_free_text_over_user_fields() -> None:
    result = build_search(
        USERS,
        {"query": '"John Doe" !spam'},
        skip="20",
        page_size="500",
        settings=_settings(),
    )

    assert result.pagination == Pagination(skip=20, page_size=100)
    assert result.sort == SortSpec("createdOn", "DESC")
    assert len(result.filter.bindings) == 8
    assert result.query.aql.count(result.filter.as_clause()) == 2
    assert result.query.bind_vars["@collection"] == "users"
    assert "John Doe" not in result.query.aql


def test_build_search_uses_settings() -> None:
    result = build_search(
        USERS,
        [{"key": "status", "op": "=", "value": "active"}],
        sort_by="username",
        sort_order="asc",
        settings=_settings(doc_var="user", bind_prefix="p", default_page_size=10, max_page_size=0),
    )

    assert result.filter.expression == "user.status == @p0"
    assert result.pagination == Pagination(skip=0, page_size=10)
    assert "FOR user IN @@collection" in result.query.aql
    assert "SORT user.username ASC" in result.query.aql


def test_build_search_logs_success_without_values(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="aql_filter.search"):
        build_search(USERS, "secret-term", settings=_settings())

    messages = [r.getMessage() for r in caplog.records]
    assert any("built collection=users kind=free_text" in m for m in messages)
    assert not any("secret-term" in m for m in messages)


def test_build_search_logs_and_reraises_rejections(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="aql_filter.search"):
        with pytest.raises(InvalidOperator):
            build_search(
                USERS,
                [{"key": "email", "op": "DROP", "value": "x"}],
                settings=_settings(),
            )

    messages = [r.getMessage() for r in caplog.records]
    assert any("rejected collection=users kind=structured error=InvalidOperator" in m for m in messages)


def test_build_search_rejects_unknown_sort_field() -> None:
    with pytest.raises(InvalidField):
        build_search(USERS, None, sort_by="password", settings=_settings())


def test_build_search_filters_by_role_membership() -> None:
    result = build_search(
        USERS,
        [{"key": "roles", "op": "has", "value": "admin"}],
        settings=_settings(),
    )

    assert result.filter.expression == "@bv0 IN doc.roles"
    assert result.filter.bindings == {"bv0": "admin"}
    assert "admin" not in result.query.aql


def test_build_search_non_string_key_is_a_field_error(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="aql_filter.search"):
        with pytest.raises(InvalidField):
            build_search(USERS, [{"key": 5, "op": "=", "value": 1}], settings=_settings())

    messages = [r.getMessage() for r in caplog.records]
    assert any("rejected collection=users kind=structured error=InvalidField" in m for m in messages)
