"""Logger hierarchy and handler setup for sweep runs.

Reports go to stdout; every log record goes to stderr (and optionally a
file) so ``--format json`` output stays machine-readable.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "dartsweep"

_CONSOLE_FORMAT = "[dartsweep] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the logger for one pipeline component, e.g. ``"scanner"``."""
    if not component:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install stderr output, plus a file sink when *log_file* is given.

    Verbose runs log at DEBUG, which includes every unresolvable directive.
    Calling this again replaces (and closes) the handlers of the last call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    _close_handlers(logger)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


__all__ = ["ROOT_LOGGER", "configure_logging", "get_logger"]
