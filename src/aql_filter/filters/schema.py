"""Filter payload schema (Pydantic models).

The route layer hands over a dynamically-shaped payload: a list of `{key, op, value}` objects, a raw
search string, or the `{"query": ..., "fields": [...]}` body used by the users routes. It is
resolved exactly once, here, into the tagged variant `Structured | FreeText`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from aql_filter.filters.errors import InvalidPayload


class RawCriterion(BaseModel):
    """One untrusted `{key, op, value}` criterion.

    `key`/`op` are optional and untyped here: a missing member is reported as `EmptyCriterion` and a
    non-string one as `InvalidField`/`InvalidOperator` by the normalizer, not as a schema error. Use
    `has_value` to tell an explicit `null` from an absent value.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    key: Any = None
    op: Any = None
    value: Any = None

    @field_validator("key", "op", mode="before")
    @classmethod
    def _strip_names(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @property
    def has_value(self) -> bool:
        return "value" in self.model_fields_set


class Structured(BaseModel):
    """Structured criteria combined with logical AND."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["structured"] = "structured"
    criteria: list[RawCriterion] = Field(default_factory=list)


class FreeText(BaseModel):
    """A free-text search matched per token against `fields` (or the configured defaults)."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["free_text"] = "free_text"
    text: str = ""
    fields: list[str] | None = None


FilterPayload = Annotated[Structured | FreeText, Field(discriminator="kind")]

_PAYLOAD_ADAPTER: TypeAdapter[Structured | FreeText] = TypeAdapter(FilterPayload)


def resolve_payload(obj: Any) -> Structured | FreeText:
    """Resolve a decoded JSON payload into `Structured` or `FreeText`.

    Accepted shapes:
        - `None` -> empty `Structured`.
        - `str` -> `FreeText`.
        - `list` of criterion objects -> `Structured`.
        - `{"kind": ...}` -> validated directly as the tagged union.
        - `{"query": list | str, "fields": [...]}` -> resolved from `query`.

    Raises:
        InvalidPayload: For any other shape or a schema violation.
    """

    try:
        if isinstance(obj, (Structured, FreeText)):
            return obj
        if obj is None:
            return Structured()
        if isinstance(obj, str):
            return FreeText(text=obj)
        if isinstance(obj, list | tuple):
            return Structured.model_validate({"criteria": list(obj)})
        if isinstance(obj, Mapping):
            if "kind" in obj:
                return _PAYLOAD_ADAPTER.validate_python(dict(obj))
            if "query" in obj:
                return _from_query_body(obj)
    except ValidationError as exc:
        raise InvalidPayload(f"Invalid filter payload: {exc}") from exc

    raise InvalidPayload(f"Unsupported filter payload type: {type(obj).__name__}")


def _from_query_body(body: Mapping[str, Any]) -> Structured | FreeText:
    query = body["query"]
    fields = body.get("fields")

    if isinstance(query, str):
        return FreeText.model_validate({"text": query, "fields": fields})
    if fields is not None:
        raise InvalidPayload("fields are only supported with a free-text query")
    if query is None:
        return Structured()
    if isinstance(query, list | tuple):
        return Structured.model_validate({"criteria": list(query)})
    raise InvalidPayload(f"Unsupported query type: {type(query).__name__}")
