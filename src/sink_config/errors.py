"""
Errors raised while resolving per-table sink configuration.

- ConfigError: base error; names the offending setting, its value and why it was rejected.
- SettingViolation: one offending setting, collected before anything is raised.
- TableConfigError: every violation found while resolving one or more tables.
- SettingValueError: raised by coercers/validators, turned into a SettingViolation by the schema.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


def single_quote(value: object) -> str:
    """Render a value the way it is echoed back in error messages: 'value'."""
    return f"'{value}'"


def format_invalid_value(name: str, value: str | None, message: str | None) -> str:
    """Return 'Invalid value <value> for configuration <name>[: <message>]'."""
    text = f"Invalid value {value} for configuration {name}"
    return f"{text}: {message}" if message else text


class ConfigError(ValueError):
    """A configuration setting holds a value that cannot be accepted."""

    def __init__(self, name: str, value: str | None = None, message: str | None = None) -> None:
        self.name = name
        self.value = value
        self.message = message
        if value is None and message is None:
            # bare message form, e.g. ConfigError("settings file is empty")
            super().__init__(name)
        else:
            super().__init__(format_invalid_value(name, value, message))


class SettingValueError(ValueError):
    """A raw setting value failed coercion or validation."""


class UnsupportedTypeError(ConfigError):
    """A record schema type has no representation type."""

    def __init__(self, data_type: object) -> None:
        super().__init__(f"No representation type is registered for schema type {data_type!r}")
        self.data_type = data_type


class FieldLookupError(KeyError):
    """A mapped field does not exist in the record schema."""


@dataclass(frozen=True, slots=True)
class SettingViolation:
    """
    One offending setting.

    path:
        Fully qualified setting path, e.g. 'topic.t.ks.tbl.ttl'.
    value:
        The offending value as echoed to the user (already single-quoted), or None
        when the setting was missing.
    message:
        Human-readable explanation.
    details:
        Individual findings folded into `message` (mapping grammar errors).
    """

    path: str
    value: str | None
    message: str
    details: tuple[str, ...] = ()

    def render(self) -> str:
        if self.value is None:
            return self.message
        return format_invalid_value(self.path, self.value, self.message)


class TableConfigError(ConfigError):
    """Resolution failed; carries every violation that was found."""

    def __init__(self, violations: Sequence[SettingViolation]) -> None:
        if not violations:
            raise ValueError("TableConfigError requires at least one violation.")
        self.violations: tuple[SettingViolation, ...] = tuple(violations)
        first = self.violations[0]
        ValueError.__init__(self, "\n".join(v.render() for v in self.violations))
        self.name = first.path
        self.value = first.value
        self.message = first.message

    @property
    def paths(self) -> tuple[str, ...]:
        """Setting paths of every violation, in the order they were found."""
        return tuple(v.path for v in self.violations)
