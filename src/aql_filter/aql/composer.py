"""Deterministic AQL filter composer.

The composer folds normalized criteria into one boolean expression plus a bind-variable map. Only
allowlisted field references and bind placeholders reach the expression text; values live
exclusively in the bindings.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from itertools import groupby
from typing import Any

from aql_filter.aql.fields import is_identifier
from aql_filter.filters.errors import FilterError, InvalidField
from aql_filter.filters.normalize import (
    BindNames,
    NormalizedCriterion,
    normalize_criteria,
    normalize_tokens,
)
from aql_filter.filters.operators import render_comparison
from aql_filter.filters.schema import FreeText, Structured, resolve_payload
from aql_filter.filters.tokenize import STOP_WORDS, tokenize

TRUE_EXPRESSION = "true"


@dataclass(frozen=True)
class BuiltFilter:
    """A filter expression and the bind variables it references."""

    expression: str = TRUE_EXPRESSION
    bindings: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.bindings and self.expression == TRUE_EXPRESSION

    def as_clause(self) -> str:
        """Render the expression as an AQL `FILTER` clause."""

        return f"FILTER {self.expression}"


def _render_group(members: list[NormalizedCriterion], doc_var: str) -> str:
    fragments = [
        render_comparison(c.operator, f"{doc_var}.{c.field}", c.bound_name) for c in members
    ]
    if len(fragments) == 1:
        return fragments[0]

    # A negated group (exclusion token) must fail on every field; a positive one may match any.
    joiner = " AND " if members[0].operator.negated else " OR "
    return "(" + joiner.join(fragments) + ")"


def compose(criteria: Sequence[NormalizedCriterion], *, doc_var: str = "doc") -> BuiltFilter:
    """Fold normalized criteria into a `BuiltFilter`.

    Consecutive criteria with the same `group` are combined inside parentheses; groups are combined
    with logical AND. An empty sequence yields the trivially true expression.

    Raises:
        InvalidField: If `doc_var` is not a plain identifier.
        FilterError: If two criteria share a bind-variable name.
    """

    if not is_identifier(doc_var):
        raise InvalidField(f"Malformed document variable: {doc_var!r}")

    if not criteria:
        return BuiltFilter()

    bindings: dict[str, Any] = {}
    for c in criteria:
        if c.bound_name in bindings:
            raise FilterError(f"Duplicate bind variable: {c.bound_name}")
        bindings[c.bound_name] = c.bound_value

    parts = [
        _render_group(list(members), doc_var)
        for _, members in groupby(criteria, key=lambda c: c.group)
    ]
    return BuiltFilter(expression=" AND ".join(parts), bindings=bindings)


def build_filter(
        payload: Any,
        *,
        allowed_fields: Iterable[str],
        default_fields: Sequence[str] | None = None,
        doc_var: str = "doc",
        stop_words: Iterable[str] = STOP_WORDS,
        bind_prefix: str = "bv",
) -> BuiltFilter:
    """Build a safe filter from an untrusted payload.

    Strategy:
        1) Resolve the payload once into `Structured` or `FreeText`.
        2) Normalize criteria (or tokens) with a fresh, call-scoped `BindNames`.
        3) Compose the expression and bindings.

    Either the whole payload is valid and a complete `BuiltFilter` is returned, or a `FilterError`
    subclass is raised.
    """

    resolved = resolve_payload(payload)
    allowed = frozenset(allowed_fields)
    names = BindNames(bind_prefix)

    if isinstance(resolved, Structured):
        criteria = normalize_criteria(resolved.criteria, allowed_fields=allowed, names=names)
    elif isinstance(resolved, FreeText):
        fields = resolved.fields if resolved.fields is not None else list(default_fields or ())
        criteria = normalize_tokens(
            tokenize(resolved.text, stop_words),
            fields=fields,
            allowed_fields=allowed,
            names=names,
        )
    else:
        raise FilterError(f"Unsupported payload variant: {type(resolved).__name__}")

    return compose(criteria, doc_var=doc_var)
