"""
Logging configuration for the storefront core.

The package logs through module-level ``logging.getLogger(__name__)``
loggers, all children of ``storefront_core``. As a library it never touches
the root logger: ``setup_logging`` attaches one stream handler to the
``storefront_core`` logger and sets its level, leaving the host
application's own logging alone. Calling it again replaces that handler
instead of stacking another one.

Usage:
    from storefront_core.logging_config import setup_logging
    setup_logging()  # Call once at application startup

Environment variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)
    LOG_PROPAGATE: Also pass records on to the root logger (default: false)
"""
import logging
import os
import sys
from typing import Optional, TextIO

from .schemas._coerce import to_bool

PACKAGE_LOGGER = "storefront_core"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Marks the handler this module installed so reconfiguring can find it
_HANDLER_ATTR = "_storefront_core_handler"


def resolve_level(level: Optional[str] = None) -> int:
    """Numeric level for ``level`` (or LOG_LEVEL), INFO when unknown."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    name = str(level).strip().upper()
    if name not in VALID_LEVELS:
        name = "INFO"
    return getattr(logging, name)


def setup_logging(
    level: Optional[str] = None,
    stream: Optional[TextIO] = None,
    propagate: Optional[bool] = None,
) -> logging.Logger:
    """
    Configure the ``storefront_core`` logger hierarchy.

    Args:
        level: Log level name. Falls back to LOG_LEVEL, then INFO.
        stream: Where records are written (default: stdout)
        propagate: Forward records to ancestor loggers. Falls back to
                   LOG_PROPAGATE, then False.

    Returns:
        The configured package logger
    """
    numeric_level = resolve_level(level)
    if propagate is None:
        propagate = to_bool(os.getenv("LOG_PROPAGATE"), False)

    package_logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            package_logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)

    package_logger.addHandler(handler)
    package_logger.setLevel(numeric_level)
    package_logger.propagate = propagate

    package_logger.debug("Logging configured at %s level", logging.getLevelName(numeric_level))
    return package_logger
