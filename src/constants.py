"""Shared constant values used across the sink configuration engine."""

from typing import Final

TOPIC_SETTING_PREFIX: Final[str] = "topic"
WHOLE_RECORD_FIELD: Final[str] = "__self"

NO_TTL: Final[int] = -1
DEFAULT_TTL: Final[int] = NO_TTL
DEFAULT_CONSISTENCY_LEVEL: Final[str] = "LOCAL_ONE"
DEFAULT_DELETES_ENABLED: Final[bool] = True
DEFAULT_NULL_TO_UNSET: Final[bool] = True
