"""Enumerations used throughout the sink configuration engine."""

from enum import StrEnum


class ConsistencyLevel(StrEnum):
    """Write consistency level understood by the destination store.

    Declaration order is significant: it is the order used when listing the
    valid values in error messages.
    """

    ANY = "ANY"
    ONE = "ONE"
    TWO = "TWO"
    THREE = "THREE"
    QUORUM = "QUORUM"
    ALL = "ALL"
    LOCAL_ONE = "LOCAL_ONE"
    LOCAL_QUORUM = "LOCAL_QUORUM"
    EACH_QUORUM = "EACH_QUORUM"
    SERIAL = "SERIAL"
    LOCAL_SERIAL = "LOCAL_SERIAL"

    @classmethod
    def from_setting(cls, value: str) -> "ConsistencyLevel":
        """Look up a member by name, ignoring case and surrounding whitespace."""
        return cls[value.strip().upper()]


class RecordPart(StrEnum):
    """Top-level part of an inbound record that a mapping may reference."""

    KEY = "key"
    VALUE = "value"
