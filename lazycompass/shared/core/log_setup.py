"""File logging configured once at startup."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from lazycompass.domains.connections.domain.config import LoggingConfig
from lazycompass.shared.core.redaction import redact_sensitive_text

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
PACKAGE_LOGGER = "lazycompass"

LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class RedactingFormatter(logging.Formatter):
    """Formatter that strips credentials from every rendered record."""

    def format(self, record: logging.LogRecord) -> str:
        return redact_sensitive_text(super().format(record))


def parse_level(name: str) -> int | None:
    return LEVELS.get(name.strip().lower())


def configure_logging(settings: LoggingConfig, path: Path, *, debug: bool = False) -> str | None:
    """Attach a rotating file handler to the package logger.

    Returns a warning message when the configured level is unknown; the
    level then falls back to info. Any handler from a previous call is
    replaced.
    """
    warning: str | None = None
    level = parse_level(settings.effective_level())
    if level is None:
        warning = f"unknown log level '{settings.effective_level()}', using info"
        level = logging.INFO
    if debug:
        level = logging.DEBUG

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=settings.max_size_bytes(),
        backupCount=settings.effective_max_backups(),
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(RedactingFormatter(LOG_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False
    if warning is not None:
        logger.warning(warning)
    return warning
