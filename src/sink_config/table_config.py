"""
Table-specific sink configuration.

`resolve_table_config` turns the raw settings of one (topic, keyspace, table)
triple into an immutable `TableConfig`:

  1) parse the settings through a freshly built schema (types, defaults, ranges)
  2) check the consistency level against `ConsistencyLevel`
  3) parse the mapping string
  4) parse the keyspace and table names

Every problem found along the way is collected; if there is at least one, a
single `TableConfigError` listing all of them is raised and no configuration
is returned.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from src.enums import ConsistencyLevel
from src.logger import LOGGER
from src.sink_config.errors import SettingViolation, TableConfigError, single_quote
from src.sink_config.identifiers import (
    Identifier,
    IdentifierError,
    format_qualified_name,
    parse_identifier,
)
from src.sink_config.mapping import Mapping as ColumnMapping
from src.sink_config.mapping import parse_mapping
from src.sink_config.settings_schema import (
    TableSetting,
    build_table_settings_schema,
    table_setting_path,
    table_setting_prefix,
)

_MAPPING_ENTRY_DELIMITER = re.compile(r", *")


@dataclass(frozen=True)
class TableKey:
    """Identity of a table configuration; a triple may only be configured once."""

    topic: str
    keyspace: Identifier
    table: Identifier


@dataclass(frozen=True, eq=False)
class TableConfig:
    """Resolved configuration for one table. Equality and hashing use `key` only."""

    key: TableKey
    mapping_string: str
    mapping: ColumnMapping
    consistency_level: ConsistencyLevel
    ttl: int
    null_to_unset: bool
    deletes_enabled: bool
    # Names as written in the settings bag; setting paths are built from these.
    keyspace_name: str = field(default="", repr=False)
    table_name: str = field(default="", repr=False)

    @property
    def topic(self) -> str:
        return self.key.topic

    @property
    def keyspace(self) -> Identifier:
        return self.key.keyspace

    @property
    def table(self) -> Identifier:
        return self.key.table

    @property
    def keyspace_and_table(self) -> str:
        """'keyspace.table' rendered as CQL."""
        return format_qualified_name(self.keyspace, self.table)

    def setting_path(self, setting: str) -> str:
        """Full path of `setting` for this table, e.g. 'topic.t.ks.tbl.ttl'."""
        keyspace = self.keyspace_name or self.keyspace.internal
        table = self.table_name or self.table.internal
        return table_setting_path(self.topic, keyspace, table, setting)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableConfig):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        entries = "\n".join(
            f"      {entry}" for entry in _MAPPING_ENTRY_DELIMITER.split(self.mapping_string)
        )
        return (
            f"{{keyspace: {self.keyspace}, table: {self.table}, "
            f"cl: {self.consistency_level}, ttl: {self.ttl}, "
            f"nullToUnset: {str(self.null_to_unset).lower()}, "
            f"deletesEnabled: {str(self.deletes_enabled).lower()}, mapping:\n"
            f"{entries}\n}}"
        )


# -----------------------------
# Resolution steps
# -----------------------------


def _consistency_level(
    path: str, value: str
) -> tuple[ConsistencyLevel | None, list[SettingViolation]]:
    try:
        return ConsistencyLevel.from_setting(value), []
    except KeyError:
        valid = ", ".join(level.name for level in ConsistencyLevel)
        return None, [
            SettingViolation(
                path=path,
                value=single_quote(value),
                message=f"valid values include: {valid}",
            )
        ]


def _mapping(
    path: str, mapping_string: str
) -> tuple[ColumnMapping | None, list[SettingViolation]]:
    result = parse_mapping(mapping_string, path)
    if result.ok:
        return result.mapping, []
    errors = "\n  ".join(result.errors)
    return None, [
        SettingViolation(
            path=path,
            value=single_quote(mapping_string),
            message=f"Encountered the following errors:\n{errors}",
            details=result.errors,
        )
    ]


def _identifier(prefix: str, name: str) -> tuple[Identifier | None, list[SettingViolation]]:
    try:
        return parse_identifier(name), []
    except IdentifierError as e:
        return None, [SettingViolation(path=prefix, value=single_quote(name), message=str(e))]


def resolve_table_config(
    topic: str,
    keyspace: str,
    table: str,
    settings: Mapping[str, Any],
) -> TableConfig:
    """
    Resolve the configuration of one table from a flat settings bag.

    Raises:
        TableConfigError: listing every offending setting (path, quoted value, explanation).
    """
    LOGGER.debug("Resolving settings for %s", table_setting_prefix(topic, keyspace, table))

    def path(setting: TableSetting) -> str:
        return table_setting_path(topic, keyspace, table, setting.value)

    parsed = build_table_settings_schema(topic, keyspace, table).parse(settings)
    violations = list(parsed.violations)
    values = parsed.values

    prefix = table_setting_prefix(topic, keyspace, table)
    keyspace_id, found = _identifier(prefix, keyspace)
    violations.extend(found)
    table_id, found = _identifier(prefix, table)
    violations.extend(found)

    consistency_level = None
    cl_path = path(TableSetting.CONSISTENCY_LEVEL)
    if cl_path in values:
        consistency_level, found = _consistency_level(cl_path, values[cl_path])
        violations.extend(found)

    mapping_string = values.get(path(TableSetting.MAPPING))
    mapping = None
    if mapping_string is not None:
        mapping, found = _mapping(path(TableSetting.MAPPING), mapping_string)
        violations.extend(found)

    if violations:
        raise TableConfigError(violations)

    config = TableConfig(
        key=TableKey(topic=topic, keyspace=keyspace_id, table=table_id),
        mapping_string=mapping_string,
        mapping=mapping,
        consistency_level=consistency_level,
        ttl=values[path(TableSetting.TTL)],
        null_to_unset=values[path(TableSetting.NULL_TO_UNSET)],
        deletes_enabled=values[path(TableSetting.DELETES_ENABLED)],
        keyspace_name=keyspace,
        table_name=table,
    )
    LOGGER.info("Resolved table config for topic %s -> %s", topic, config.keyspace_and_table)
    return config


# -----------------------------
# Builder
# -----------------------------


class TableConfigBuilder:
    """Accumulates the settings of one table, then resolves them."""

    def __init__(self, topic: str, keyspace: str, table: str) -> None:
        self.topic = topic
        self.keyspace = keyspace
        self.table = table
        self.settings: dict[str, Any] = {}

    def add_setting(self, key: str, value: Any) -> TableConfigBuilder:
        self.settings[key] = value
        return self

    def build(self) -> TableConfig:
        return resolve_table_config(self.topic, self.keyspace, self.table, self.settings)
