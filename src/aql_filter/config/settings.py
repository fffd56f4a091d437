"""Environment configuration and validation.

This module defines strongly-typed filter-builder settings loaded from environment variables
(optionally via a local `.env` file).

Identifiers that end up in query text (the document variable and the bind-variable prefix) are
validated here, at startup, rather than on every request.
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aql_filter.aql.fields import is_identifier
from aql_filter.aql.pagination import DEFAULT_PAGE_SIZE
from aql_filter.filters.tokenize import STOP_WORDS


class Settings(BaseSettings):
    """Filter-builder settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    doc_var: str = Field(default="doc", alias="FILTER_DOC_VAR")
    bind_prefix: str = Field(default="bv", alias="FILTER_BIND_PREFIX")
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, alias="FILTER_DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="FILTER_MAX_PAGE_SIZE")
    stop_words: list[str] = Field(default_factory=lambda: sorted(STOP_WORDS), alias="FILTER_STOP_WORDS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("doc_var", "bind_prefix")
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        """Validate that values spliced into AQL text are plain identifiers."""

        if not is_identifier(value):
            raise ValueError(f"must be a plain identifier, got {value!r}")
        return value

    @field_validator("default_page_size")
    @classmethod
    def validate_default_page_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("FILTER_DEFAULT_PAGE_SIZE must be positive")
        return value

    @model_validator(mode="after")
    def validate_page_bounds(self) -> Settings:
        """Validate the page-size cap.

        `FILTER_MAX_PAGE_SIZE=0` disables clamping; otherwise it must not be below the default.
        """

        if self.max_page_size < 0:
            raise ValueError("FILTER_MAX_PAGE_SIZE must be >= 0")
        if self.max_page_size and self.max_page_size < self.default_page_size:
            raise ValueError("FILTER_MAX_PAGE_SIZE must be >= FILTER_DEFAULT_PAGE_SIZE")
        return self

    @property
    def page_size_cap(self) -> int | None:
        return self.max_page_size or None


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        # Raising here is fine: caller can decide how to handle startup errors.
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
