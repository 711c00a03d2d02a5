"""Configuration utilities for INDISEL.

This module centralizes the environment-driven settings of the package:
per-logger log levels and the limits of the MER (reporting) selection rules.
"""

import logging
import os
import re
from dataclasses import dataclass

LOGGER_LEVELS_ENV = "INDISEL_LOGGER_LEVELS"  # pragma: no mutate
MER_MIN_TOTAL_ENV = "INDISEL_MER_MIN_TOTAL"  # pragma: no mutate
MER_MAX_TOTAL_ENV = "INDISEL_MER_MAX_TOTAL"  # pragma: no mutate

DEFAULT_MER_MIN_TOTAL = 3
DEFAULT_MER_MAX_TOTAL = 5


class ConfigError(Exception):
    """Base class for configuration errors."""


class InvalidLoggerLevelError(ConfigError):
    """Raised when a NAME=LEVEL logger setting cannot be parsed."""


class InvalidSettingError(ConfigError):
    """Raised when an environment setting has an invalid value."""

    def __init__(self, name: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value for {name} ({value!r}): {reason}")
        self.name = name
        self.value = value


@dataclass(frozen=True, slots=True)
class SelectionLimits:
    """Bounds of the total number of MER indicators of a project."""

    min_total: int = DEFAULT_MER_MIN_TOTAL
    max_total: int = DEFAULT_MER_MAX_TOTAL


def _normalize_items(value: str | list[str] | tuple[str, ...]) -> list[str]:
    """Split a string (or sequence of strings) on commas/whitespace, dropping empties."""
    values = value if isinstance(value, (tuple, list)) else [value]
    items: list[str] = []
    for v in values:
        items.extend([s for s in re.split(r"[,\s]+", v) if s])
    return items


def parse_logger_levels(value: str | list[str] | tuple[str, ...]) -> dict[str, int]:
    """Parse NAME=LEVEL pairs into a name->level dict.

    Later items override earlier ones for the same logger.

    Args:
        value: A comma/space separated string or a sequence of such strings.

    Returns:
        Mapping of logger names to numeric logging levels.

    Raises:
        InvalidLoggerLevelError: If an item is not NAME=LEVEL or LEVEL is unknown.
    """
    levels: dict[str, int] = {}
    for item in _normalize_items(value):
        try:
            name, level_str = item.split("=", 1)
        except ValueError as e:
            raise InvalidLoggerLevelError(f"Expected NAME=LEVEL, got {item!r}") from e
        level = logging.getLevelName(level_str.strip().upper())
        if not isinstance(level, int):
            raise InvalidLoggerLevelError(f"Invalid log level: {level_str}")
        levels[name.strip()] = level
    return levels


def get_logger_levels() -> dict[str, int]:
    """Per-logger levels from the `INDISEL_LOGGER_LEVELS` environment variable.

    Raises:
        InvalidLoggerLevelError: If the variable is malformed.
    """
    return parse_logger_levels(os.environ.get(LOGGER_LEVELS_ENV, ""))


def _get_int(name: str, default: int) -> int:
    if not (raw := os.environ.get(name)):
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise InvalidSettingError(name, raw, "expected an integer") from e
    if value < 0:
        raise InvalidSettingError(name, raw, "must not be negative")
    return value


def get_selection_limits() -> SelectionLimits:
    """MER selection limits from the environment.

    Reads `INDISEL_MER_MIN_TOTAL` and `INDISEL_MER_MAX_TOTAL` (defaults 3 and 5).

    Raises:
        InvalidSettingError: If a value is not a non-negative integer or
            the minimum exceeds the maximum.
    """
    limits = SelectionLimits(
        min_total=_get_int(MER_MIN_TOTAL_ENV, DEFAULT_MER_MIN_TOTAL),
        max_total=_get_int(MER_MAX_TOTAL_ENV, DEFAULT_MER_MAX_TOTAL),
    )
    if limits.min_total > limits.max_total:
        raise InvalidSettingError(
            MER_MIN_TOTAL_ENV,
            str(limits.min_total),
            f"greater than {MER_MAX_TOTAL_ENV} ({limits.max_total})",
        )
    return limits
