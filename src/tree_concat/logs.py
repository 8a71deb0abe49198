"""
Per-run diagnostic logger.
"""

import logging
from pathlib import Path

DEFAULT_LOG_FILE = "data.log"

RUN_LOGGER_NAME = "tree_concat.run"


def setup_logging(enabled: bool, log_file: str | Path = DEFAULT_LOG_FILE) -> logging.Logger:
    """
    Build the logger handle passed to each component for one run.

    When enabled, every message from DEBUG up is written to log_file, one bare
    message per line, replacing any previous log. When disabled the logger
    discards everything.
    """
    logger = logging.getLogger(RUN_LOGGER_NAME)
    close_logging(logger)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if enabled:
        handler: logging.Handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.NullHandler()
    logger.addHandler(handler)

    return logger


def close_logging(logger: logging.Logger):
    """Detach and close every handler on logger."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
