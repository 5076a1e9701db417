"""Entry point for checking a sink settings file before the connector starts."""

import sys
from argparse import ArgumentParser

from src.logger import LOGGER
from src.sink_config.discover import discover_table_configs
from src.sink_config.errors import TableConfigError
from src.sink_config.loader import load_settings


def validate_settings(path: str) -> int:
    """Resolve every table in the settings file; return a process exit code."""
    settings = load_settings(path)
    try:
        configs = discover_table_configs(settings)
    except TableConfigError as e:
        for violation in e.violations:
            LOGGER.error(violation.render())
        return 1

    if not configs:
        LOGGER.warning("No table settings found in %s", path)
    for config in configs:
        LOGGER.info("%s: %s", config.topic, config)
    return 0


def main(argv: list[str] | None = None) -> int:
    p = ArgumentParser(description="Validate per-table sink settings.")
    p.add_argument("settings_file", help="YAML file holding the flat settings bag")
    args = p.parse_args(argv)
    return validate_settings(args.settings_file)


if __name__ == "__main__":
    sys.exit(main())
