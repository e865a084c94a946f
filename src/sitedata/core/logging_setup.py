"""Logging configuration for the ``sitedata`` logger tree."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from rich.console import Console
from rich.logging import RichHandler

from sitedata.core.config import LoggingConfig

ROOT_LOGGER = "sitedata"


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, msg (+ exc when present)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Install a single handler on the ``sitedata`` logger.

    Safe to call more than once; earlier handlers installed here are replaced.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(ROOT_LOGGER)
    for existing in list(logger.handlers):
        if getattr(existing, "_sitedata", False):
            logger.removeHandler(existing)

    handler: logging.Handler
    if config.format == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    handler._sitedata = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(config.level)
    logger.propagate = False
    return logger
