"""Operator whitelist.

Every comparison is rendered from a fixed template that only receives an allowlisted field
reference and a bind-variable name. No operator ever falls back to equality.
"""

from __future__ import annotations

from enum import StrEnum

from aql_filter.filters.errors import InvalidOperator


class OperatorKind(StrEnum):
    """Supported comparison operators."""

    equals = "equals"
    not_equals = "not_equals"
    greater_than = "greater_than"
    less_than = "less_than"
    greater_or_equal = "greater_or_equal"
    less_or_equal = "less_or_equal"
    contains = "contains"
    not_contains = "not_contains"
    in_list = "in_list"
    has_member = "has_member"

    @property
    def negated(self) -> bool:
        return self in _NEGATED

    @property
    def is_like(self) -> bool:
        return self in (OperatorKind.contains, OperatorKind.not_contains)


_NEGATED = frozenset({OperatorKind.not_equals, OperatorKind.not_contains})

OPERATOR_SYMBOLS: dict[OperatorKind, tuple[str, ...]] = {
    OperatorKind.equals: ("=", "==", "eq"),
    OperatorKind.not_equals: ("!=", "~", "ne"),
    OperatorKind.greater_than: (">", "gt"),
    OperatorKind.less_than: ("<", "lt"),
    OperatorKind.greater_or_equal: (">=", "gte"),
    OperatorKind.less_or_equal: ("<=", "lte"),
    OperatorKind.contains: ("%", "?", "like"),
    OperatorKind.not_contains: ("!%", "not like"),
    OperatorKind.in_list: ("in",),
    OperatorKind.has_member: ("has",),
}

SYMBOL_TO_OPERATOR: dict[str, OperatorKind] = {
    symbol: kind for kind, symbols in OPERATOR_SYMBOLS.items() for symbol in symbols
}

_TEMPLATES: dict[OperatorKind, str] = {
    OperatorKind.equals: "{field} == @{name}",
    OperatorKind.not_equals: "{field} != @{name}",
    OperatorKind.greater_than: "{field} > @{name}",
    OperatorKind.less_than: "{field} < @{name}",
    OperatorKind.greater_or_equal: "{field} >= @{name}",
    OperatorKind.less_or_equal: "{field} <= @{name}",
    OperatorKind.contains: "LIKE({field}, @{name}, true)",
    OperatorKind.not_contains: "NOT LIKE({field}, @{name}, true)",
    OperatorKind.in_list: "{field} IN @{name}",
    # Array fields: the bound scalar must be one of the stored elements.
    OperatorKind.has_member: "@{name} IN {field}",
}


def resolve_operator(symbol: str | None) -> OperatorKind:
    """Map an operator symbol (`=`, `%`, `in`, ...) to its `OperatorKind`.

    Raises:
        InvalidOperator: If the symbol is not whitelisted.
    """

    if isinstance(symbol, OperatorKind):
        return symbol
    if not isinstance(symbol, str):
        raise InvalidOperator(f"Unsupported operator: {symbol!r}")

    key = " ".join(symbol.split()).lower()
    try:
        return SYMBOL_TO_OPERATOR[key]
    except KeyError as exc:
        raise InvalidOperator(f"Unsupported operator: {symbol!r}") from exc


def render_comparison(kind: OperatorKind, field_ref: str, bind_name: str) -> str:
    """Render one comparison fragment, e.g. `doc.email == @bv0`."""

    return _TEMPLATES[kind].format(field=field_ref, name=bind_name)
