"""Logging setup shared by the docmerge CLI and service."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "docmerge"
_CONSOLE_FORMAT = "[docmerge] %(levelname)s %(message)s"
# Extraction runs on pool threads, so the file sink records which one logged.
_FILE_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``docmerge`` or one of its children, e.g. ``docmerge.pipeline``."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send docmerge records to stderr and, optionally, to ``log_file``.

    The console shows INFO and above unless ``verbose`` is set. A log file
    always receives DEBUG records, so a quiet run still leaves a full trace.
    Calling this again replaces the handlers installed by the previous call.
    """
    console_level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.propagate = False
    _drop_handlers(logger)

    logger.addHandler(_console_handler(console_level))
    logger_level = console_level
    if log_file is not None:
        logger.addHandler(_file_handler(Path(log_file)))
        logger_level = logging.DEBUG
    logger.setLevel(logger_level)
    return logger


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


__all__ = ["configure_logging", "get_logger"]
