"""Pagination and sort normalization.

Both are computed independently of the filter expression and bound as parameters (`@skip`,
`@pageSize`); only the allowlisted sort field reaches the query text.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from aql_filter.filters.errors import InvalidField, InvalidValue

DEFAULT_PAGE_SIZE = 25

SortDirection = Literal["ASC", "DESC"]

_DIGITS_RE = re.compile(r"^\+?\d+$")


@dataclass(frozen=True)
class Pagination:
    """Normalized `LIMIT skip, page_size` values."""

    skip: int = 0
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class SortSpec:
    """An allowlisted sort field and direction."""

    field: str
    direction: SortDirection = "DESC"


def _coerce_non_negative(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if value.is_integer() and value >= 0:
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        if _DIGITS_RE.match(text):
            return int(text)
    return None


def normalize_pagination(
        skip: Any = None,
        page_size: Any = None,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int | None = None,
) -> Pagination:
    """Coerce raw skip/pageSize values into a `Pagination`.

    Policy:
        - Integers, integral floats and digit strings are accepted.
        - Missing, malformed or negative `skip` becomes `0`.
        - Missing, malformed, negative or zero `page_size` becomes `default_page_size`.
        - If `max_page_size` is set, `page_size` is clamped to it.
    """

    if default_page_size <= 0:
        raise ValueError("default_page_size must be positive")

    normalized_skip = _coerce_non_negative(skip) or 0

    normalized_size = _coerce_non_negative(page_size) or default_page_size
    if max_page_size is not None and max_page_size > 0:
        normalized_size = min(normalized_size, max_page_size)

    return Pagination(skip=normalized_skip, page_size=normalized_size)


def normalize_sort(
        sort_by: str | None,
        sort_order: str | None = None,
        *,
        allowed: Sequence[str],
        default: str | None = None,
) -> SortSpec | None:
    """Validate a sort request against the allowlisted sort fields.

    Returns `None` when neither `sort_by` nor `default` is given.

    Raises:
        InvalidField: If `sort_by` is not allowlisted.
        InvalidValue: If `sort_order` is not `asc`/`desc`.
    """

    field = sort_by or default
    if field is None:
        return None
    if field not in allowed:
        raise InvalidField(f"Sorting is not allowed on field: {field!r}")

    order = (sort_order or "desc").strip().upper()
    if order not in ("ASC", "DESC"):
        raise InvalidValue(f"Unsupported sort order: {sort_order!r}")

    return SortSpec(field=field, direction=order)  # type: ignore[arg-type]
