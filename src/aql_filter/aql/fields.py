"""Allowlisted AQL identifiers.

Field names cannot be bound as parameters, so every field referenced in a generated expression must
come from an allowlist and match a plain dotted-identifier pattern.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from aql_filter.filters.errors import InvalidField

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_FIELD_PATH_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*$")


def is_identifier(name: str) -> bool:
    return isinstance(name, str) and _IDENTIFIER_RE.fullmatch(name) is not None


def is_field_path(name: str) -> bool:
    return isinstance(name, str) and _FIELD_PATH_RE.fullmatch(name) is not None


def allowlist(*names: str) -> frozenset[str]:
    """Build a field allowlist, rejecting malformed names up front."""

    for name in names:
        if not is_field_path(name):
            raise InvalidField(f"Malformed field name in allowlist: {name!r}")
    return frozenset(names)


def require_field(name: Any, allowed: Iterable[str]) -> str:
    """Validate a field name against the pattern and the allowlist.

    Raises:
        InvalidField: If the name is malformed or not allowlisted.
    """

    if not is_field_path(name or ""):
        raise InvalidField(f"Malformed field name: {name!r}")
    if name not in allowed:
        raise InvalidField(f"Field is not allowed: {name!r}")
    return name


@dataclass(frozen=True)
class CollectionSpec:
    """What the route layer may filter, search and sort on for one collection."""

    name: str
    fields: frozenset[str]
    text_fields: tuple[str, ...] = ()
    sort_fields: tuple[str, ...] = ()
    default_sort: str | None = None
    hidden_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not is_identifier(self.name):
            raise InvalidField(f"Malformed collection name: {self.name!r}")
        for name in (*self.text_fields, *self.sort_fields, *self.hidden_fields):
            if not is_field_path(name):
                raise InvalidField(f"Malformed field name: {name!r}")
        if self.default_sort is not None and self.default_sort not in self.sort_fields:
            raise InvalidField(f"default_sort must be one of sort_fields: {self.default_sort!r}")


USER_FIELDS: frozenset[str] = allowlist(
    "_key",
    "username",
    "email",
    "firstName",
    "lastName",
    "roles",
    "status",
    "createdOn",
    "updatedOn",
    "lastLogin",
)

USERS = CollectionSpec(
    name="users",
    fields=USER_FIELDS,
    text_fields=("username", "email", "firstName", "lastName"),
    sort_fields=("username", "createdOn", "lastLogin"),
    default_sort="createdOn",
    hidden_fields=("password",),
)
