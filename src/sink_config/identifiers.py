"""
Identifier parsing for keyspace, table and column names.

This module defines:
- Identifier: a canonical name with a quoted (case-sensitive) or unquoted
  (case-insensitive) origin.
- parse_identifier: the loose parser used for every user-supplied name.
- Helpers to render identifiers back to CQL text.

Conventions:
- Only a leading double quote switches on quoted parsing. Anything else is taken
  literally, so operators can write plain names without knowing the escaping rules.
- Two identifiers are equal iff their internal forms match, whatever their origin.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

_QUOTE = '"'
_PLAIN_IDENTIFIER = re.compile(r"[a-z][a-z0-9_]*")


class IdentifierError(ValueError):
    """Raised when a name cannot be parsed as an identifier."""


class IdentifierKind(StrEnum):
    QUOTED = "quoted"
    UNQUOTED = "unquoted"


# -----------------------------
# Core identifier data structure
# -----------------------------


@dataclass(frozen=True)
class Identifier:
    """Canonical identifier; equality and hashing use `internal` only."""

    internal: str
    kind: IdentifierKind = field(default=IdentifierKind.UNQUOTED, compare=False)

    @classmethod
    def quoted(cls, exact: str) -> Identifier:
        """Case-sensitive identifier, stored verbatim."""
        return cls(exact, IdentifierKind.QUOTED)

    @classmethod
    def unquoted(cls, text: str) -> Identifier:
        """Case-insensitive identifier, folded to its canonical lower-case form."""
        return cls(text.lower(), IdentifierKind.UNQUOTED)

    @property
    def is_quoted(self) -> bool:
        return self.kind is IdentifierKind.QUOTED

    def as_cql(self, pretty: bool = False) -> str:
        """
        Render as CQL text.

        With `pretty`, quotes are omitted when the internal form would survive
        unquoted parsing unchanged (plain lower-case names).
        """
        if pretty and _PLAIN_IDENTIFIER.fullmatch(self.internal):
            return self.internal
        return _QUOTE + self.internal.replace(_QUOTE, _QUOTE * 2) + _QUOTE

    def __str__(self) -> str:
        return self.internal


# -----------------------------
# Parsing
# -----------------------------


def _parse_quoted(raw: str) -> str:
    """Strip the surrounding quotes of a single quoted segment and collapse doubled quotes."""
    if len(raw) < 2 or not raw.endswith(_QUOTE):
        raise IdentifierError(f"Unterminated quoted identifier: {raw!r}")

    body = raw[1:-1]
    if body == "":
        raise IdentifierError("Quoted identifier must not be empty.")

    # Every inner quote must be doubled; a lone one would end the segment early.
    if body.replace(_QUOTE * 2, "").count(_QUOTE):
        raise IdentifierError(f"Unescaped double quote inside quoted identifier: {raw!r}")
    return body.replace(_QUOTE * 2, _QUOTE)


def parse_identifier(raw: str) -> Identifier:
    """
    Parse a user-supplied name into an Identifier.

    Rules:
    - A value starting with '"' must be one quoted segment ('"My""Table"' -> My"Table);
      case is preserved.
    - Anything else is an unquoted name taken as-is and compared case-insensitively.

    Raises:
        IdentifierError: for an empty name or a malformed quoted segment.
    """
    if raw is None or raw == "":
        raise IdentifierError("Identifier must not be empty.")
    if raw.startswith(_QUOTE):
        return Identifier.quoted(_parse_quoted(raw))
    return Identifier.unquoted(raw)


# -----------------------------
# Formatting
# -----------------------------


def format_qualified_name(keyspace: Identifier, table: Identifier) -> str:
    """Render 'keyspace.table' with pretty CQL quoting on each part."""
    return f"{keyspace.as_cql(pretty=True)}.{table.as_cql(pretty=True)}"
