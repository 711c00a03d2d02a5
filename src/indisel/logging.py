"""Logging helpers used by applications hosting INDISEL.

This module provides utilities for configuring console logging with Rich,
a filter that annotates third-party log records with a short prefix used by
console formatting, and a one-call setup applying per-logger levels.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Literal, TypeAlias

from rich.console import Console
from rich.logging import RichHandler

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "indisel"
CONSOLE_HANDLER_NAME = "indisel-console"

ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]


class ThirdPartyPrefixFilter(logging.Filter):
    """Tag records with the top-level package of foreign loggers.

    Records from loggers outside `project_prefix` get `record.prefix` set to
    a bracketed package name ("urllib3.connectionpool" -> "[urllib3]"); the
    project's own records get an empty prefix. Nothing is filtered out.
    """

    def __init__(self, project_prefix: str = PROJECT_PREFIX) -> None:
        super().__init__()
        self.project_prefix = project_prefix

    def filter(self, record: logging.LogRecord) -> bool:
        """Set `record.prefix` and let the record through."""
        if record.name == self.project_prefix or record.name.startswith(
            f"{self.project_prefix}."
        ):
            record.prefix = ""
        else:
            record.prefix = f"[{record.name.split('.')[0]}]"
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Build the Rich handler writing log records to stderr.

    Outside debug mode, records are rendered as "<prefix> <message>" with the
    third-party prefix filter attached. In debug mode the level is forced to
    DEBUG and records carry their time, logger name and source location.

    Args:
        level: Minimum level of the handler (ignored in debug mode).
        debug_mode: Use the verbose debug rendering.
        color: Let Rich detect the terminal colors; plain text otherwise.

    Returns:
        RichHandler: The configured handler, not yet attached to any logger.
    """
    color_system: ColorSystem | None = "auto" if color else None
    console = Console(color_system=color_system, stderr=True)

    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter(fmt="%(asctime)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter(fmt="%(prefix)s %(message)s"))
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def configure_logging(
    level: int = logging.WARNING,
    *,
    debug_mode: bool = False,
    color: bool = True,
    logger_levels: Mapping[str, int] | None = None,
) -> RichHandler:
    """Attach a Rich console handler to the root logger and apply logger levels.

    Any console handler previously installed by this function is replaced, so
    calling it again reconfigures logging instead of duplicating output.

    Args:
        level: Console level (DEBUG when debug_mode is set).
        debug_mode: Enable debug formatting.
        color: Enable color output.
        logger_levels: Per-logger minimum levels (e.g. from
            `indisel.config.get_logger_levels()`).

    Returns:
        RichHandler: The installed handler.
    """
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == CONSOLE_HANDLER_NAME]:
        root.removeHandler(existing)

    handler = config_console_handler(level=level, debug_mode=debug_mode, color=color)
    handler.set_name(CONSOLE_HANDLER_NAME)
    root.addHandler(handler)
    root.setLevel(min(root.level or logging.WARNING, handler.level))

    for name, logger_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(logger_level)

    return handler
