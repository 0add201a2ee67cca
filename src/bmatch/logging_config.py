"""
Logging setup for applications built on the package.

Library modules only create ``logging.getLogger(__name__)`` loggers; call
:func:`setup_logging` once from a script to route them somewhere.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "bmatch"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Attach a console handler (and optionally a file handler) to the package logger.

    Calling it again replaces the previously installed handlers.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            root_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(format_string)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.propagate = False
    root_logger.debug("Logging configured: level=%s", logging.getLevelName(level))
    return root_logger


__all__ = ["DEFAULT_FORMAT", "ROOT_LOGGER_NAME", "setup_logging"]
