"""Page and total-count query rendering.

The same filter expression is spliced verbatim into both the count and the page sub-queries, so the
reported total always matches the filtered page.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from aql_filter.aql.composer import BuiltFilter
from aql_filter.aql.fields import CollectionSpec, is_field_path, is_identifier
from aql_filter.aql.pagination import Pagination, SortSpec
from aql_filter.filters.errors import FilterError, InvalidField

COLLECTION_BIND = "@collection"
SKIP_BIND = "skip"
PAGE_SIZE_BIND = "pageSize"

_RESERVED_BINDS = frozenset({COLLECTION_BIND, SKIP_BIND, PAGE_SIZE_BIND})


@dataclass(frozen=True)
class BuiltQuery:
    """A parameterized AQL query ready for execution."""

    aql: str
    bind_vars: dict[str, Any]


def _merge_bind_vars(built: BuiltFilter, extra: dict[str, Any]) -> dict[str, Any]:
    clash = _RESERVED_BINDS.intersection(built.bindings)
    if clash:
        raise FilterError(f"Filter bind variables clash with query parameters: {sorted(clash)}")
    return {**built.bindings, **extra}


def _return_projection(doc_var: str, hidden_fields: tuple[str, ...]) -> str:
    if not hidden_fields:
        return doc_var
    # Hidden field names come from the CollectionSpec, never from the request.
    names = ", ".join(json.dumps(name) for name in ("_id", "_rev", *hidden_fields))
    return f"UNSET({doc_var}, {names})"


def build_page_query(
        collection: CollectionSpec,
        built: BuiltFilter,
        pagination: Pagination,
        sort: SortSpec | None = None,
        *,
        doc_var: str = "doc",
) -> BuiltQuery:
    """Render a single AQL query returning `{data, total, skip, pageSize}`.

    Raises:
        InvalidField: If `doc_var` or the sort field is malformed.
        FilterError: If filter bindings clash with the query's own parameters.
    """

    if not is_identifier(doc_var):
        raise InvalidField(f"Malformed document variable: {doc_var!r}")
    if sort is not None and not is_field_path(sort.field):
        raise InvalidField(f"Malformed sort field: {sort.field!r}")

    clause = built.as_clause()
    sort_clause = f" SORT {doc_var}.{sort.field} {sort.direction}" if sort is not None else ""
    projection = _return_projection(doc_var, collection.hidden_fields)

    aql = (
        "LET total = ("
        f" FOR {doc_var} IN @@collection"
        f" {clause}"
        " COLLECT WITH COUNT INTO counter"
        " RETURN counter"
        ")[0] "
        "LET ds = ("
        f" FOR {doc_var} IN @@collection"
        f" {clause}"
        f"{sort_clause}"
        " LIMIT @skip, @pageSize"
        f" RETURN {projection}"
        ") "
        "RETURN {data: ds, total: total, skip: @skip, pageSize: @pageSize}"
    )

    bind_vars = _merge_bind_vars(
        built,
        {
            COLLECTION_BIND: collection.name,
            SKIP_BIND: pagination.skip,
            PAGE_SIZE_BIND: pagination.page_size,
        },
    )
    return BuiltQuery(aql=aql, bind_vars=bind_vars)


def build_count_query(
        collection: CollectionSpec,
        built: BuiltFilter,
        *,
        doc_var: str = "doc",
) -> BuiltQuery:
    """Render a scalar total-count query for the filter."""

    if not is_identifier(doc_var):
        raise InvalidField(f"Malformed document variable: {doc_var!r}")

    aql = (
        f"FOR {doc_var} IN @@collection"
        f" {built.as_clause()}"
        " COLLECT WITH COUNT INTO counter"
        " RETURN counter"
    )
    return BuiltQuery(aql=aql, bind_vars=_merge_bind_vars(built, {COLLECTION_BIND: collection.name}))
