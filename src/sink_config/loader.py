from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from src.sink_config.errors import ConfigError


def load_settings(path: str | Path) -> dict[str, str]:
    """
    Load a settings bag from a YAML file.

    Keys may be written flat ('topic.t.ks.tbl.ttl: 100') or nested; nested
    mappings are flattened with '.'. Scalars are stringified, booleans as
    'true'/'false'.
    """
    config_path = Path(path)
    with config_path.open("r") as f:
        document = yaml.safe_load(f)

    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ConfigError(f"Settings file {config_path} must contain a mapping at the top level.")
    return _flatten(document)


def _flatten(node: Mapping[Any, Any], prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for key, value in node.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, name))
        else:
            flat[name] = _stringify(value)
    return flat


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if value is None:
        return ""
    return str(value)
