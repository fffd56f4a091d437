"""Search request boundary.

Route handlers pass the raw filter payload and query parameters here and receive a ready-to-execute
AQL query. Validation failures propagate as `FilterError` subclasses; the caller decides the
user-visible response.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import monotonic
from typing import Any

from aql_filter.aql.composer import BuiltFilter, build_filter
from aql_filter.aql.fields import CollectionSpec
from aql_filter.aql.pagination import Pagination, SortSpec, normalize_pagination, normalize_sort
from aql_filter.aql.query import BuiltQuery, build_page_query
from aql_filter.config.settings import Settings
from aql_filter.filters.errors import FilterError
from aql_filter.filters.schema import resolve_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchQuery:
    """Everything a route needs to run one filtered, paginated search."""

    filter: BuiltFilter
    pagination: Pagination
    sort: SortSpec | None
    query: BuiltQuery


def build_search(
        collection: CollectionSpec,
        payload: Any,
        *,
        skip: Any = None,
        page_size: Any = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
        settings: Settings | None = None,
) -> SearchQuery:
    """Build the page+count query for a search request against `collection`."""

    settings = settings or Settings()
    started = monotonic()

    kind = "unknown"

    try:
        resolved = resolve_payload(payload)
        kind = resolved.kind
        built = build_filter(
            resolved,
            allowed_fields=collection.fields,
            default_fields=collection.text_fields,
            doc_var=settings.doc_var,
            stop_words=settings.stop_words,
            bind_prefix=settings.bind_prefix,
        )
        pagination = normalize_pagination(
            skip,
            page_size,
            default_page_size=settings.default_page_size,
            max_page_size=settings.page_size_cap,
        )
        sort = normalize_sort(
            sort_by,
            sort_order,
            allowed=collection.sort_fields,
            default=collection.default_sort,
        )
        query = build_page_query(collection, built, pagination, sort, doc_var=settings.doc_var)
    except FilterError as exc:
        latency_ms = int((monotonic() - started) * 1000)
        logger.info(
            "rejected collection=%s kind=%s error=%s latency_ms=%d",
            collection.name,
            kind,
            type(exc).__name__,
            latency_ms,
        )
        raise

    latency_ms = int((monotonic() - started) * 1000)
    logger.info(
        "built collection=%s kind=%s bindings=%d skip=%d page_size=%d latency_ms=%d",
        collection.name,
        kind,
        len(built.bindings),
        pagination.skip,
        pagination.page_size,
        latency_ms,
    )
    return SearchQuery(filter=built, pagination=pagination, sort=sort, query=query)
