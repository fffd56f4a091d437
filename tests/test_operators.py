"""Tests for the operator whitelist and comparison templates."""

from __future__ import annotations

import pytest

from aql_filter.filters.errors import InvalidOperator
from aql_filter.filters.operators import OperatorKind, render_comparison, resolve_operator


@pytest.mark.parametrize(
    ("symbol", "kind"),
    [
        ("=", OperatorKind.equals),
        ("==", OperatorKind.equals),
        ("!=", OperatorKind.not_equals),
        ("~", OperatorKind.not_equals),
        (">", OperatorKind.greater_than),
        ("<", OperatorKind.less_than),
        (">=", OperatorKind.greater_or_equal),
        ("<=", OperatorKind.less_or_equal),
        ("%", OperatorKind.contains),
        ("?", OperatorKind.contains),
        ("LIKE", OperatorKind.contains),
        ("NOT  LIKE", OperatorKind.not_contains),
        (" in ", OperatorKind.in_list),
        ("HAS", OperatorKind.has_member),
    ],
)
def test_resolve_operator_symbols(symbol: str, kind: OperatorKind) -> None:
    assert resolve_operator(symbol) == kind


@pytest.mark.parametrize("symbol", ["DROP", "", "===", "=~", "LIKE%", None, 1])
def test_unknown_operator_never_falls_back_to_equals(symbol: object) -> None:
    with pytest.raises(InvalidOperator):
        resolve_operator(symbol)  # type: ignore[arg-type]


def test_render_comparison_uses_placeholder_only() -> None:
    assert render_comparison(OperatorKind.equals, "doc.email", "bv0") == "doc.email == @bv0"
    assert render_comparison(OperatorKind.contains, "doc.name", "bv1") == "LIKE(doc.name, @bv1, true)"
    assert (
            render_comparison(OperatorKind.not_contains, "doc.name", "bv2")
            == "NOT LIKE(doc.name, @bv2, true)"
    )
    assert render_comparison(OperatorKind.in_list, "doc.roles", "bv3") == "doc.roles IN @bv3"
    assert render_comparison(OperatorKind.has_member, "doc.roles", "bv4") == "@bv4 IN doc.roles"


def test_negated_kinds() -> None:
    assert OperatorKind.not_equals.negated
    assert OperatorKind.not_contains.negated
    assert not OperatorKind.contains.negated
    assert not OperatorKind.equals.negated
