from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from src.constants import TOPIC_SETTING_PREFIX
from src.logger import LOGGER
from src.sink_config.errors import SettingViolation, TableConfigError
from src.sink_config.settings_schema import TableSetting, table_setting_prefix
from src.sink_config.table_config import TableConfig, TableConfigBuilder, TableKey

_NAME = r'"(?:[^"]|"")+"|[^."]+'
_TABLE_SETTING_KEY = re.compile(
    rf"^{re.escape(TOPIC_SETTING_PREFIX)}\.(?P<topic>[a-zA-Z0-9._-]+)"
    rf"\.(?P<keyspace>{_NAME})\.(?P<table>{_NAME})"
    rf"\.(?P<setting>{'|'.join(re.escape(s.value) for s in TableSetting)})$"
)

TableTriple = tuple[str, str, str]


def group_table_settings(settings: Mapping[str, Any]) -> dict[TableTriple, TableConfigBuilder]:
    """Group per-table keys by (topic, keyspace, table); other keys are ignored."""
    builders: dict[TableTriple, TableConfigBuilder] = {}
    for key, value in settings.items():
        match = _TABLE_SETTING_KEY.match(key)
        if match is None:
            continue
        triple = (match["topic"], match["keyspace"], match["table"])
        if triple not in builders:
            builders[triple] = TableConfigBuilder(*triple)
        builders[triple].add_setting(key, value)
    return builders


def discover_table_configs(settings: Mapping[str, Any]) -> list[TableConfig]:
    """
    Resolve every table configured in a flat settings bag.

    Tables are returned in the order their first setting appears. Failures of
    all tables are gathered into one TableConfigError. A table may only be
    configured once: a second spelling of the same identifiers (e.g. `ks.tbl`
    and `KS.TBL`) is a violation.
    """
    configs: dict[TableKey, TableConfig] = {}
    violations: list[SettingViolation] = []
    for builder in group_table_settings(settings).values():
        try:
            config = builder.build()
        except TableConfigError as e:
            violations.extend(e.violations)
            continue

        if config.key in configs:
            first = configs[config.key]
            violations.append(
                SettingViolation(
                    path=table_setting_prefix(config.topic, builder.keyspace, builder.table),
                    value=None,
                    message=(
                        f"Table {config.keyspace_and_table} of topic {config.topic} is already "
                        f"configured by {first.setting_path('*')}"
                    ),
                )
            )
            continue
        configs[config.key] = config

    if violations:
        LOGGER.error("%d table setting(s) are invalid.", len(violations))
        raise TableConfigError(violations)

    LOGGER.info("Discovered %d table config(s).", len(configs))
    return list(configs.values())
