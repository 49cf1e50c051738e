"""Log routing for repobuddy.

Every module logs through a child of the ``repobuddy`` logger. Console output
goes to stderr so JSON printed by ``repobuddy analyze`` stays clean on stdout.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "repobuddy"
CONSOLE_FORMAT = "%(name)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s"


def get_logger(component: Optional[str] = None) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    return root.getChild(component) if component else root


def _level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def _detach_handlers(logger: logging.Logger) -> None:
    while logger.handlers:
        handler = logger.handlers[0]
        logger.removeHandler(handler)
        handler.close()


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    # The file keeps debug detail even when the console is quiet.
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Route repobuddy logs to stderr and, optionally, a debug-level file.

    Calling this again replaces the handlers installed by the previous call.
    ``verbose`` wins over ``quiet`` when both are set.
    """
    console_level = _level(verbose, quiet)
    logger = get_logger()
    _detach_handlers(logger)
    logger.propagate = False
    logger.addHandler(_console_handler(console_level))
    if log_file is not None:
        logger.addHandler(_file_handler(Path(log_file)))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(console_level)
    return logger


__all__ = ["CONSOLE_FORMAT", "FILE_FORMAT", "ROOT_LOGGER", "configure_logging", "get_logger"]
