from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Application logging: ``<LABEL> <message>`` lines on stdout.

Labels are INFO / WARN / ERROR / SUMMARY (plus DEBUG with --debug). Library
modules log through ``logging.getLogger(__name__)``; everything lives under
the ``gamedata_builder`` package, so records reach the one handler attached
here. Validation failures also go to the JSON Lines file written by
gamedata_builder.logging.error_log.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "get_logger",
    "log_summary",
    "reset_logging",
    "set_debug",
    "setup_logging",
]

APP_LOGGER_NAME = "gamedata_builder"

# INFO(20) と WARNING(30) の間
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Renders ``<LABEL> <message>``; unknown levels fall back to the level name."""

    LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        SUMMARY_LEVEL: "SUMMARY",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def _console_handler(stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(logging.INFO)
    handler.setFormatter(LabeledFormatter())
    return handler


def setup_logging() -> logging.Logger:
    """Configure the application logger once and return it.

    The handler is bound to the ``sys.stdout`` current at configuration
    time; call reset_logging() first to rebind (tests capturing stdout).
    """
    global _logger
    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(APP_LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(_console_handler(sys.stdout))
    logger.setLevel(logging.INFO)
    # ルートロガーへ流すと二重出力になる
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    return _logger if _logger is not None else setup_logging()


def set_debug(enabled: bool = True) -> None:
    """Switch the application logger and its handlers between DEBUG and INFO."""
    level = logging.DEBUG if enabled else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach handlers and forget the configured logger (tests)."""
    global _logger
    if _logger is not None:
        for handler in list(_logger.handlers):
            _logger.removeHandler(handler)
        _logger.setLevel(logging.NOTSET)
        _logger.propagate = True
    _logger = None
