"""Filter validation errors.

Every error is raised synchronously to the immediate caller; the builder never recovers from a
failed criterion or returns a partial expression.
"""

from __future__ import annotations


class FilterError(ValueError):
    """Raised when a filter payload cannot be converted into a safe AQL expression."""


class InvalidOperator(FilterError):
    """Raised for an operator symbol outside the whitelist."""


class InvalidField(FilterError):
    """Raised for a field that is malformed or not allowlisted."""


class EmptyCriterion(FilterError):
    """Raised when a criterion is missing its key, operator or value."""


class InvalidValue(FilterError):
    """Raised when a value's shape does not fit the operator."""


class InvalidPayload(FilterError):
    """Raised when a payload is neither a criteria list nor a search string."""
