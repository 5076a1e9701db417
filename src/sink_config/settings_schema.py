"""
Per-table settings schema.

`build_table_settings_schema(topic, keyspace, table)` synthesizes a fresh schema
for one (topic, keyspace, table) triple. Every setting is registered under its
fully qualified path:

    topic.<topic>.<keyspace>.<table>.<setting>

so a single flat settings bag can configure any number of tables without
collisions. Schemas are immutable and never shared between triples.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Final

from src.constants import (
    DEFAULT_CONSISTENCY_LEVEL,
    DEFAULT_DELETES_ENABLED,
    DEFAULT_NULL_TO_UNSET,
    DEFAULT_TTL,
    NO_TTL,
    TOPIC_SETTING_PREFIX,
)
from src.sink_config.errors import SettingValueError, SettingViolation, single_quote


class TableSetting(StrEnum):
    """Base names of the settings recognized for every table."""

    MAPPING = "mapping"
    DELETES_ENABLED = "deletesEnabled"
    CONSISTENCY_LEVEL = "consistencyLevel"
    TTL = "ttl"
    NULL_TO_UNSET = "nullToUnset"


class SettingType(StrEnum):
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    INT = "INT"


class Importance(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class _NoDefault:
    """Marker for settings that must be supplied."""

    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Final = _NoDefault()

# INT settings are 32-bit signed integers written as plain decimal text.
_DECIMAL_INT = re.compile(r"[+-]?[0-9]+", re.ASCII)
_INT_MIN: Final[int] = -(2**31)
_INT_MAX: Final[int] = 2**31 - 1

Validator = Callable[[Any], None]


# -----------------------------
# Validators
# -----------------------------


@dataclass(frozen=True)
class AtLeast:
    """Range validator: value >= minimum."""

    minimum: int

    def __call__(self, value: Any) -> None:
        if value < self.minimum:
            raise SettingValueError(f"Value must be at least {self.minimum}")


# -----------------------------
# Coercion
# -----------------------------


def _coerce_string(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    raise SettingValueError(f"Expected value to be a string, but it was a {type(value).__name__}")


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise SettingValueError("Expected value to be either true or false")


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        raise SettingValueError("Not a number of type INT")
    if isinstance(value, str) and _DECIMAL_INT.fullmatch(value.strip()):
        value = int(value.strip())
    if isinstance(value, int) and _INT_MIN <= value <= _INT_MAX:
        return value
    raise SettingValueError("Not a number of type INT")


_COERCERS: Mapping[SettingType, Callable[[Any], Any]] = MappingProxyType(
    {
        SettingType.STRING: _coerce_string,
        SettingType.BOOLEAN: _coerce_boolean,
        SettingType.INT: _coerce_int,
    }
)


# -----------------------------
# Schema
# -----------------------------


@dataclass(frozen=True)
class SettingDefinition:
    """One recognized setting: full path, type, default and optional validator."""

    name: str
    type: SettingType
    default: Any = NO_DEFAULT
    validator: Validator | None = None
    importance: Importance = Importance.HIGH
    documentation: str = ""

    @property
    def required(self) -> bool:
        return self.default is NO_DEFAULT

    def parse(self, raw: Any) -> Any:
        """Coerce and validate a raw value; raises SettingValueError."""
        value = _COERCERS[self.type](raw)
        if self.validator is not None:
            self.validator(value)
        return value


@dataclass(frozen=True)
class ParsedSettings:
    """Typed values for every defined setting, plus the violations found."""

    values: Mapping[str, Any]
    violations: tuple[SettingViolation, ...]

    @property
    def ok(self) -> bool:
        return not self.violations


@dataclass(frozen=True)
class SettingsSchema:
    """Read-only, ordered collection of setting definitions keyed by full path."""

    definitions: Mapping[str, SettingDefinition] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def of(cls, *definitions: SettingDefinition) -> SettingsSchema:
        by_name: dict[str, SettingDefinition] = {}
        for definition in definitions:
            if definition.name in by_name:
                raise ValueError(f"Setting {definition.name} is defined more than once.")
            by_name[definition.name] = definition
        return cls(MappingProxyType(by_name))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.definitions)

    def __contains__(self, name: object) -> bool:
        return name in self.definitions

    def __getitem__(self, name: str) -> SettingDefinition:
        return self.definitions[name]

    def parse(self, raw: Mapping[str, Any]) -> ParsedSettings:
        """
        Parse every defined setting from `raw`.

        Missing optional settings take their default; keys the schema does not
        define are ignored. One violation is collected per offending setting
        instead of stopping at the first.
        """
        values: dict[str, Any] = {}
        violations: list[SettingViolation] = []
        for name, definition in self.definitions.items():
            if name not in raw:
                if definition.required:
                    violations.append(
                        SettingViolation(
                            path=name,
                            value=None,
                            message=(
                                f'Missing required configuration "{name}" '
                                "which has no default value."
                            ),
                        )
                    )
                else:
                    values[name] = definition.default
                continue

            try:
                values[name] = definition.parse(raw[name])
            except SettingValueError as e:
                violations.append(
                    SettingViolation(path=name, value=single_quote(raw[name]), message=str(e))
                )
        return ParsedSettings(values=MappingProxyType(values), violations=tuple(violations))


# -----------------------------
# Table schema factory
# -----------------------------


def table_setting_prefix(topic: str, keyspace: str, table: str) -> str:
    """Return 'topic.<topic>.<keyspace>.<table>'."""
    return f"{TOPIC_SETTING_PREFIX}.{topic}.{keyspace}.{table}"


def table_setting_path(topic: str, keyspace: str, table: str, setting: str) -> str:
    """
    Compute the full path of a table setting.

    Example:
        table_setting_path("orders", "ks", "tbl", "ttl") -> "topic.orders.ks.tbl.ttl"
    """
    return f"{table_setting_prefix(topic, keyspace, table)}.{setting}"


def build_table_settings_schema(topic: str, keyspace: str, table: str) -> SettingsSchema:
    """Build the settings schema for one (topic, keyspace, table) triple."""

    def path(setting: TableSetting) -> str:
        return table_setting_path(topic, keyspace, table, setting.value)

    return SettingsSchema.of(
        SettingDefinition(
            name=path(TableSetting.MAPPING),
            type=SettingType.STRING,
            documentation=(
                "Mapping of record fields to table columns, in the form of "
                "'col1=value.f1, col2=key.f1'"
            ),
        ),
        SettingDefinition(
            name=path(TableSetting.DELETES_ENABLED),
            type=SettingType.BOOLEAN,
            default=DEFAULT_DELETES_ENABLED,
            documentation="Whether to delete rows where only the primary key is non-null",
        ),
        SettingDefinition(
            name=path(TableSetting.CONSISTENCY_LEVEL),
            type=SettingType.STRING,
            default=DEFAULT_CONSISTENCY_LEVEL,
            documentation="Query consistency level",
        ),
        SettingDefinition(
            name=path(TableSetting.TTL),
            type=SettingType.INT,
            default=DEFAULT_TTL,
            validator=AtLeast(NO_TTL),
            documentation="TTL of inserted rows in seconds; -1 means no TTL",
        ),
        SettingDefinition(
            name=path(TableSetting.NULL_TO_UNSET),
            type=SettingType.BOOLEAN,
            default=DEFAULT_NULL_TO_UNSET,
            documentation="Whether null record fields are written as UNSET",
        ),
    )
