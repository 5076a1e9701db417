"""
Mapping grammar: `column=field` pairs that route record fields to table columns.

Grammar
-------
    mapping  := entry ( ',' entry )*
    entry    := column '=' source          (whitespace around ',' and '=' is ignored)
    column   := identifier                 (see identifiers.parse_identifier)
    source   := part | part '.' path
    part     := 'key' | 'value'
    path     := segment ( '.' segment )* | quoted-name

A bare part ('key', 'value') addresses the whole record part and is stored as
`<part>.__self`.

The parser never raises on malformed text. Every defect becomes one error
string and parsing carries on with the next entry, so a long mapping can be
fixed in one pass. Callers decide whether errors are fatal.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from collections.abc import Mapping as AbstractMapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TypeAlias

from src.constants import WHOLE_RECORD_FIELD
from src.enums import RecordPart
from src.sink_config.errors import single_quote
from src.sink_config.identifiers import Identifier, IdentifierError, parse_identifier

_QUOTE = '"'
_ENTRY_SEPARATOR = ","
_ASSIGNMENT = "="
_PATH_SEPARATOR = "."
_PLAIN_SEGMENT = re.compile(r"[^\s\".=,]+")
_NEEDS_QUOTING = re.compile(r"[\s\".=,]")


# -----------------------------
# Source field paths
# -----------------------------


@dataclass(frozen=True)
class FieldPath:
    """Location of a source field: a record part plus a (possibly nested) field path."""

    part: RecordPart
    segments: tuple[str, ...]

    @classmethod
    def whole(cls, part: RecordPart) -> FieldPath:
        return cls(part, (WHOLE_RECORD_FIELD,))

    @property
    def field(self) -> str:
        """Field name inside the record part; nested segments joined with '.'."""
        return _PATH_SEPARATOR.join(self.segments)

    @property
    def is_whole_record(self) -> bool:
        return self.segments == (WHOLE_RECORD_FIELD,)

    def as_identifier(self) -> Identifier:
        """Case-sensitive identifier of the source, e.g. `value.f1`."""
        return Identifier.quoted(f"{self.part}.{self.field}")

    def __str__(self) -> str:
        rendered = [
            _QUOTE + s.replace(_QUOTE, _QUOTE * 2) + _QUOTE if _NEEDS_QUOTING.search(s) else s
            for s in self.segments
        ]
        return _PATH_SEPARATOR.join([self.part.value, *rendered])


Mapping: TypeAlias = AbstractMapping[Identifier, FieldPath]


@dataclass(frozen=True)
class MappingParseResult:
    """Whatever pairs were recognized, plus every error found on the way."""

    mapping: Mapping
    errors: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not self.errors


# -----------------------------
# Tokenizing helpers
# -----------------------------


def _split_unquoted(text: str, separator: str) -> list[str]:
    """Split on `separator`, ignoring separators inside double-quoted runs."""
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in text:
        if char == _QUOTE:
            # A doubled quote toggles twice, which leaves the state unchanged.
            in_quotes = not in_quotes
        if char == separator and not in_quotes:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    tail = "".join(current)
    if in_quotes:
        # An unclosed quote must not swallow the rest of the text.
        parts.extend(tail.split(separator))
    else:
        parts.append(tail)
    return parts


def _iter_entries(mapping_text: str) -> Iterator[str]:
    for raw_entry in _split_unquoted(mapping_text, _ENTRY_SEPARATOR):
        yield raw_entry.strip()


def _invalid_field_message(source: str) -> str:
    return (
        f"Invalid field name {single_quote(source)}: field names in mapping must be "
        f"'{RecordPart.KEY}', '{RecordPart.VALUE}', or start with "
        f"'{RecordPart.KEY}.' or '{RecordPart.VALUE}.'."
    )


def parse_field_path(source: str) -> FieldPath:
    """
    Parse the source side of a mapping entry.

    Raises:
        ValueError: with a user-facing explanation when the source is malformed.
    """
    for part in RecordPart:
        if source == part.value:
            return FieldPath.whole(part)

        prefix = f"{part.value}{_PATH_SEPARATOR}"
        if not source.startswith(prefix):
            continue

        path = source[len(prefix) :]
        if path.startswith(_QUOTE):
            try:
                return FieldPath(part, (parse_identifier(path).internal,))
            except IdentifierError as e:
                raise ValueError(f"Invalid field name {single_quote(source)}: {e}") from e

        segments = tuple(path.split(_PATH_SEPARATOR))
        if not all(_PLAIN_SEGMENT.fullmatch(s) for s in segments):
            raise ValueError(
                f"Invalid field name {single_quote(source)}: each segment of a nested "
                "field path must be non-empty and must not contain whitespace, quotes, "
                "'=' or ','."
            )
        return FieldPath(part, segments)

    raise ValueError(_invalid_field_message(source))


# -----------------------------
# Mapping parser
# -----------------------------


def _parse_entry(entry: str) -> tuple[Identifier, FieldPath]:
    """Parse one `column=field` entry; raises ValueError describing the defect."""
    if entry == "":
        raise ValueError("Empty mapping entry; remove the extra ','.")

    if entry.count(_QUOTE) % 2:
        raise ValueError(
            f"Mapping entry {single_quote(entry)} has an unterminated double quote."
        )

    sides = _split_unquoted(entry, _ASSIGNMENT)
    if len(sides) == 1:
        raise ValueError(
            f"Mapping entry {single_quote(entry)} is missing '=' between column and field."
        )
    if len(sides) > 2:
        raise ValueError(f"Mapping entry {single_quote(entry)} has more than one '='.")

    column_text, source_text = (side.strip() for side in sides)
    if column_text == "":
        raise ValueError(f"Mapping entry {single_quote(entry)} is missing a column name.")
    if source_text == "":
        raise ValueError(f"Mapping entry {single_quote(entry)} is missing a field name.")

    try:
        column = parse_identifier(column_text)
    except IdentifierError as e:
        raise ValueError(f"Mapping entry {single_quote(entry)} has an invalid column: {e}") from e

    return column, parse_field_path(source_text)


def parse_mapping(mapping_text: str, setting_path: str) -> MappingParseResult:
    """
    Parse a mapping string into column -> field pairs plus a list of errors.

    Each malformed entry and each repeated column contributes exactly one error;
    the first occurrence of a column wins. Insertion order is preserved.
    """
    if mapping_text is None or mapping_text.strip() == "":
        return MappingParseResult(
            mapping=MappingProxyType({}),
            errors=(f"{setting_path} must contain at least one 'column=field' entry.",),
        )

    pairs: dict[Identifier, FieldPath] = {}
    errors: list[str] = []
    for entry in _iter_entries(mapping_text):
        try:
            column, field_path = _parse_entry(entry)
        except ValueError as e:
            errors.append(str(e))
            continue

        if column in pairs:
            errors.append(
                f"Mapping references column {column.as_cql(pretty=True)} more than once."
            )
            continue
        pairs[column] = field_path

    return MappingParseResult(mapping=MappingProxyType(pairs), errors=tuple(errors))


def format_mapping(mapping: Mapping) -> str:
    """Canonical 'col1=value.f1, col2=key.f1' rendering of a mapping."""
    return ", ".join(
        f"{column.as_cql(pretty=True)}={field_path}" for column, field_path in mapping.items()
    )
