"""Free-text search tokenization.

Quoted phrases survive as a single token; everything else is split on whitespace. Stop-words are
compared lower-cased, but tokens keep their original case for matching.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable

STOP_WORDS: frozenset[str] = frozenset({"of", "the", "it", "and", "und", "a", "-"})

SPECIAL_MARKS: tuple[str, ...] = ("!", '"', "'")


class Token(str):
    """A search token; `quoted` is true when it came from a `"quoted phrase"`."""

    quoted: bool

    def __new__(cls, value: str, quoted: bool = False) -> Token:
        token = super().__new__(cls, value)
        token.quoted = quoted
        return token


_TOKEN_RE = re.compile(r'"(?P<phrase>[^"]+)"|(?P<word>\S+)')
_INT_RE = re.compile(r"^[+-]?[0-9]+$")
# Plain decimal notation only; `float()` alone would also take `1_000`, `nan` or `infinity`.
_FLOAT_RE = re.compile(r"^[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?$")


def tokenize(text: str | None, stop_words: Iterable[str] = STOP_WORDS) -> tuple[Token, ...]:
    """Split search text into tokens.

    Rules:
        - `"quoted phrases"` become one token, without the quotes.
        - Everything else is split on whitespace runs.
        - An unterminated quote is kept as part of a literal word (`'"John'`).
        - Tokens whose lower-cased form is a stop-word are dropped.

    Empty or whitespace-only input yields an empty tuple.
    """

    if not text or not text.strip():
        return ()

    stop = {w.lower() for w in stop_words}
    tokens: list[Token] = []
    for match in _TOKEN_RE.finditer(text):
        phrase = match.group("phrase")
        if phrase is not None:
            phrase = phrase.strip()
            if phrase and phrase.lower() not in stop:
                tokens.append(Token(phrase, quoted=True))
            continue

        word = match.group("word")
        if word.lower() not in stop:
            tokens.append(Token(word))

    return tuple(tokens)


def remove_special_marks(value: str, marks: Iterable[str] = SPECIAL_MARKS) -> str:
    """Strip every occurrence of the given marks from `value`."""

    result = value
    for mark in marks:
        result = result.replace(mark, "")
    return result


def coerce_value(text: str) -> bool | int | float | str:
    """Convert a free-text scalar into the most specific JSON-like value.

    `true`/`false` (any case) become booleans, integers and finite floats become numbers; anything
    else stays a string.
    """

    value = text.strip()
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    if _INT_RE.match(value):
        return int(value)

    if not _FLOAT_RE.match(value):
        return value

    number = float(value)

    # `1e999` overflows to inf.
    if not math.isfinite(number):
        return value
    return number
