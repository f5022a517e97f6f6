"""Structured logging configuration."""

import logging
import sys
from pythonjsonlogger import jsonlogger


LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'

_LEVEL_ALIASES = {"warn": "WARNING"}


def setup_logger(
    name: str = "kibana_exporter",
    level: str = "INFO",
    fmt: str = "json"
) -> logging.Logger:
    """
    Configure console logging.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARN/WARNING, ERROR, CRITICAL)
        fmt: "json" for structured JSON lines, "text" for plain text

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    level_name = _LEVEL_ALIASES.get(level.lower(), level.upper())
    logger.setLevel(getattr(logging, level_name))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        formatter = jsonlogger.JsonFormatter(LOG_FORMAT, timestamp=True)
    else:
        formatter = logging.Formatter(LOG_FORMAT)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger
