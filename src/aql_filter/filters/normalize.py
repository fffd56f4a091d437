"""Criterion normalization.

Turns raw criteria and search tokens into `NormalizedCriterion` records: field allowlisted, operator
whitelisted, value checked against the operator and assigned a call-scoped bind-variable name.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from aql_filter.aql.fields import is_field_path, is_identifier, require_field
from aql_filter.filters.errors import EmptyCriterion, InvalidField, InvalidValue
from aql_filter.filters.operators import OperatorKind, resolve_operator
from aql_filter.filters.schema import RawCriterion
from aql_filter.filters.tokenize import coerce_value, remove_special_marks

_SCALAR_TYPES = (str, int, float, bool)


class BindNames:
    """Generates unique bind-variable names for a single composition call."""

    def __init__(self, prefix: str = "bv") -> None:
        if not is_identifier(prefix):
            raise ValueError(f"bind prefix must be an identifier: {prefix!r}")
        self.prefix = prefix
        self._count = 0

    def next(self) -> str:
        name = f"{self.prefix}{self._count}"
        self._count += 1
        return name

    @property
    def issued(self) -> int:
        return self._count


@dataclass(frozen=True)
class NormalizedCriterion:
    """A validated comparison ready for composition.

    Criteria sharing a `group` come from the same structured entry or search token.
    """

    field: str
    operator: OperatorKind
    bound_name: str
    bound_value: Any
    group: int


def like_pattern(value: Any) -> str:
    return f"%{value}%"


def _check_value(kind: OperatorKind, value: Any) -> Any:
    if kind == OperatorKind.in_list:
        if not isinstance(value, list | tuple):
            raise InvalidValue("in_list requires a list of values")
        if not all(v is None or isinstance(v, _SCALAR_TYPES) for v in value):
            raise InvalidValue("in_list values must be scalars")
        return list(value)

    if value is None:
        if kind in (OperatorKind.equals, OperatorKind.not_equals):
            return None
        raise InvalidValue(f"{kind} does not accept null")

    if not isinstance(value, _SCALAR_TYPES):
        raise InvalidValue(f"{kind} requires a scalar value")

    if kind.is_like:
        if isinstance(value, bool) or (isinstance(value, str) and not value):
            raise InvalidValue(f"{kind} requires a non-empty string or number")
        return like_pattern(value)

    return value


def _is_blank(member: Any) -> bool:
    return member is None or (isinstance(member, str) and not member)


def normalize_criterion(
        raw: RawCriterion,
        *,
        allowed_fields: Iterable[str],
        names: BindNames,
        group: int,
) -> NormalizedCriterion:
    """Validate one structured criterion and assign it a bind-variable name.

    Raises:
        EmptyCriterion: If key, op or value is missing.
        InvalidField: If the key is malformed or not allowlisted.
        InvalidOperator: If the operator is not whitelisted.
        InvalidValue: If the value does not fit the operator.
    """

    if _is_blank(raw.key):
        raise EmptyCriterion("criterion key is required")
    if _is_blank(raw.op):
        raise EmptyCriterion(f"criterion op is required for key {raw.key!r}")
    if not raw.has_value:
        raise EmptyCriterion(f"criterion value is required for key {raw.key!r}")

    field = require_field(raw.key, allowed_fields)
    kind = resolve_operator(raw.op)
    value = _check_value(kind, raw.value)

    return NormalizedCriterion(
        field=field,
        operator=kind,
        bound_name=names.next(),
        bound_value=value,
        group=group,
    )


def normalize_criteria(
        criteria: Iterable[RawCriterion],
        *,
        allowed_fields: Iterable[str],
        names: BindNames,
) -> list[NormalizedCriterion]:
    """Normalize structured criteria; every entry becomes its own AND-combined group."""

    allowed = frozenset(allowed_fields)
    return [
        normalize_criterion(raw, allowed_fields=allowed, names=names, group=i)
        for i, raw in enumerate(criteria)
    ]


def _split_meta(token: str) -> tuple[str, str] | None:
    if ":" not in token:
        return None
    key, _, value = token.partition(":")
    # `10:30`, `:)` and similar can never name a field; search them as plain terms.
    if not is_field_path(key):
        return None
    return key, value


def normalize_tokens(
        tokens: Sequence[str],
        *,
        fields: Sequence[str],
        allowed_fields: Iterable[str],
        names: BindNames,
) -> list[NormalizedCriterion]:
    """Normalize free-text tokens into grouped criteria.

    Token forms:
        - `term` -> `contains` on every field in `fields` (OR-combined within the token).
        - `!term` -> `not_contains` on every field (the term must match none of them).
        - `field:value` -> equality on `field`; `field:!value` -> inequality.

    Quoted tokens (`Token.quoted`) are never split on `:` and a leading `!` inside quotes is
    literal. A token whose part before `:` is not a field path is searched as a plain term.
    """

    allowed = frozenset(allowed_fields)
    search_fields = [require_field(f, allowed) for f in fields]

    result: list[NormalizedCriterion] = []
    group = 0
    for token in tokens:
        quoted = getattr(token, "quoted", False)
        meta = None if quoted else _split_meta(token)
        if meta is not None:
            key, raw_value = meta
            cleaned = remove_special_marks(raw_value)
            if not cleaned.strip():
                raise EmptyCriterion(f"search filter needs both field and value: {token!r}")
            field = require_field(key, allowed)
            kind = OperatorKind.not_equals if raw_value.startswith("!") else OperatorKind.equals
            value = coerce_value(cleaned)
            result.append(
                NormalizedCriterion(
                    field=field,
                    operator=kind,
                    bound_name=names.next(),
                    bound_value=value,
                    group=group,
                )
            )
            group += 1
            continue

        excluded = token.startswith("!") and not quoted
        kind = OperatorKind.not_contains if excluded else OperatorKind.contains
        term = remove_special_marks(token)
        if not term.strip():
            continue
        if not search_fields:
            raise InvalidField("free-text search requires at least one search field")

        for field in search_fields:
            result.append(
                NormalizedCriterion(
                    field=field,
                    operator=kind,
                    bound_name=names.next(),
                    bound_value=like_pattern(term),
                    group=group,
                )
            )
        group += 1

    return result
