"""
utils/logger.py
Simple logging wrapper for PortProbe
"""

import logging
import sys

ROOT_LOGGER = "portprobe"

VERBOSITY_LEVELS = {
    "quiet":   logging.ERROR,
    "normal":  logging.INFO,
    "verbose": logging.DEBUG,
    "debug":   logging.DEBUG,
}


def get_logger(name: str = ROOT_LOGGER, level: int = logging.INFO) -> logging.Logger:
    """
    Get a configured logger instance.

    Only the top-level logger gets a handler; dotted children
    (``portprobe.engine``) propagate to it.

    Args:
        name: Logger name
        level: Logging level for a freshly configured top-level logger

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    # Children and already-configured loggers are left alone
    if "." in name or logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)

    # Format: LEVEL - message
    formatter = logging.Formatter(
        '%(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def set_verbosity(name: str) -> int:
    """Apply a quiet/normal/verbose/debug level to the root logger."""
    try:
        level = VERBOSITY_LEVELS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown verbosity {name!r}. Choose from: {list(VERBOSITY_LEVELS)}"
        ) from None
    get_logger(ROOT_LOGGER).setLevel(level)
    return level


# Default logger instance
log = get_logger(ROOT_LOGGER)


__all__ = ["get_logger", "set_verbosity", "log", "ROOT_LOGGER", "VERBOSITY_LEVELS"]
