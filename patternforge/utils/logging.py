"""Logging setup for the PatternForge command line.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are installed here, once, by the CLI.
"""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None,
                  log_format: Optional[str] = None) -> logging.Logger:
    """
    Configure console (stderr) and optional file logging.

    Args:
        verbose: If True, log at DEBUG. Otherwise only warnings and errors.
        log_file: Also append log records to this file.
        log_format: Override log format string.

    Returns:
        The ``patternforge`` package logger.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    formatter = logging.Formatter(log_format or DEFAULT_FORMAT)

    handlers = []
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logger = logging.getLogger("patternforge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)
