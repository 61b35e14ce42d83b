"""Logging helpers shared by every FieldForge module."""

from __future__ import annotations

import logging
from pathlib import Path

PACKAGE_LOGGER = "fieldforge"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for *name* (normally ``__name__``)."""
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_dir: str | None = None) -> logging.Logger:
    """Attach console (and optional file) handlers to the package logger.

    Safe to call more than once: previously installed FieldForge handlers
    are replaced rather than duplicated.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_fieldforge", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._fieldforge = True  # type: ignore[attr-defined]
    logger.addHandler(console)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path / "fieldforge.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler._fieldforge = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    return logger
