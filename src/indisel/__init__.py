"""INDISEL

An indicator selection engine. It keeps a catalog of indicators organized by
sector and an immutable per-sector selection that honours the relationship
rules between indicators (global/sub hierarchies, paired indicators and
cross-sector exclusivity).

The package installs no log handler on import. Host applications set up
console logging once at startup, with per-logger levels read from
`INDISEL_LOGGER_LEVELS`:

    from indisel.config import get_logger_levels
    from indisel.logging import configure_logging

    configure_logging(logger_levels=get_logger_levels())
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
