"""Logging utilities for commitsplit commands and service mode."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

_LOGGER_NAME = "commitsplit"

_CLI_FORMAT = "[commitsplit] %(levelname)s %(message)s"
_SERVICE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# uvicorn's own loggers share the commitsplit handlers while serving.
SERVICE_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the commitsplit hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None, service: bool = False
) -> logging.Logger:
    """Configure the commitsplit logger.

    CLI runs get terse console lines. Service mode timestamps every record,
    names its logger and routes uvicorn's loggers through the same handlers.
    ``log_file`` adds a file sink in either mode.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handlers = _build_handlers(level, log_file, _SERVICE_FORMAT if service else _CLI_FORMAT)

    logger = logging.getLogger(_LOGGER_NAME)
    _install(logger, handlers, level)
    if service:
        for name in SERVICE_LOGGERS:
            _install(logging.getLogger(name), handlers, level)
    return logger


def _build_handlers(level: int, log_file: Path | None, console_format: str) -> List[logging.Handler]:
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(console_format))
    handlers: List[logging.Handler] = [stream_handler]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_SERVICE_FORMAT))
        handlers.append(file_handler)
    return handlers


def _install(logger: logging.Logger, handlers: List[logging.Handler], level: int) -> None:
    logger.setLevel(level)
    logger.propagate = False
    # Repeated start-ups replace handlers instead of stacking them.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)


__all__ = ["SERVICE_LOGGERS", "configure_logging", "get_logger"]
