"""Logging helpers shared by crudcore modules."""

import logging
from typing import Union

ROOT_LOGGER_NAME = "crudcore"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; names outside the package are nested under it."""
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(level: Union[int, str] = "INFO") -> logging.Logger:
    """
    Install a single stream handler on the package logger.

    Calling it again only updates the level.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not any(getattr(h, "_crudcore_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._crudcore_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
