"""Application composition root.

Services embedding the filter builder create one `App` at startup: settings are loaded, logging is
configured from them, and route handlers call `App.search`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from aql_filter.aql.fields import CollectionSpec
from aql_filter.config.logging import configure_logging
from aql_filter.config.settings import Settings, load_settings
from aql_filter.search import SearchQuery, build_search


@dataclass(frozen=True)
class App:
    """Shared configuration for route handlers."""

    settings: Settings

    def search(
            self,
            collection: CollectionSpec,
            payload: Any,
            *,
            skip: Any = None,
            page_size: Any = None,
            sort_by: str | None = None,
            sort_order: str | None = None,
    ) -> SearchQuery:
        return build_search(
            collection,
            payload,
            skip=skip,
            page_size=page_size,
            sort_by=sort_by,
            sort_order=sort_order,
            settings=self.settings,
        )


def create_app(settings: Settings | None = None) -> App:
    """Create the application container.

    Raises:
        RuntimeError: If settings are loaded here and the environment is invalid.
    """

    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)
    return App(settings=settings)
