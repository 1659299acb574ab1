"""
Logging Configuration
=====================

Console (and optional file) logging for the water_sort CLIs.

Log records go to stderr so that board renders and evaluation summaries,
which the tools print to stdout, stay clean when redirected.
"""
import logging
import sys
from typing import Optional

# Marks handlers installed here so repeated calls replace only those
_HANDLER_TAG = "_water_sort_handler"

CONSOLE_FORMAT = "%(levelname)-7s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _tagged(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the 'water_sort' logger.

    Handlers added by earlier calls are replaced; handlers attached by the
    caller are left alone.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.WARNING)
        log_file: Optional path; receives timestamped records at the same level.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("water_sort")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()

    console = _tagged(logging.StreamHandler(sys.stderr))
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        file_handler = _tagged(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.debug("Logging configured at %s", logging.getLevelName(level))
    return logger
