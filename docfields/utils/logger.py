"""Logging setup shared by the library and the command line.

Library modules only call :func:`get_logger`; :func:`setup_logging` is
called once by the entry point to attach a handler. Records go to stderr
so that stdout carries only command output (JSON, summaries).
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output with decoder details
_NOISY_LOGGERS = ("PIL", "pdf2image")


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr at ``level``.

    A root logger that already has handlers is left alone. Unknown level
    names fall back to INFO.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (any case).
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        level_value = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(level_value)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_value, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
