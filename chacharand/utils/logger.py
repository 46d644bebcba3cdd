"""
Logging for chacharand.

All loggers hang under the `chacharand` package logger, which gets a
single stderr handler the first time any of them is requested. Level
and format come from the `logging` section of the config.

Never pass key material to a logger.
"""

import logging

from chacharand.utils.config import config_section
from chacharand.generators.errors import ConfigurationError

PACKAGE_LOGGER = "chacharand"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_package_logger() -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if root.handlers:
        return root

    log_cfg = config_section("logging")
    level = logging.getLevelName(str(log_cfg.get("level", "INFO")).upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown logging level: {log_cfg.get('level')!r}")

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(log_cfg.get("format", DEFAULT_FORMAT)))
    root.addHandler(handler)
    root.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the `chacharand` hierarchy.

    Module names (`chacharand.generators.rng`) are used as they are; any
    other name is nested under the package, so `get_logger("smoke_test")`
    logs as `chacharand.smoke_test`.
    """
    _configure_package_logger()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
