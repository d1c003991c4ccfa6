"""Logging setup for the ``emvqr`` logger tree."""
from __future__ import annotations

import json
import logging
from logging.config import dictConfig
from typing import Any

from .config import settings

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record: level, logger, message and the ``extra`` keys."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - overrides base
        payload: dict[str, Any] = {"level": record.levelname, "logger": record.name, "message": record.getMessage()}
        payload.update((k, v) for k, v in vars(record).items() if k not in _RECORD_KEYS)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging() -> None:
    """Attach a stream handler to ``emvqr`` using the configured level and format."""

    formatter = {"()": JsonFormatter} if settings.logging.json_logs else {"format": "%(levelname)s %(name)s %(message)s"}
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"emvqr": formatter},
            "handlers": {"emvqr": {"class": "logging.StreamHandler", "formatter": "emvqr"}},
            "loggers": {"emvqr": {"handlers": ["emvqr"], "level": settings.logging.level, "propagate": False}},
        }
    )
