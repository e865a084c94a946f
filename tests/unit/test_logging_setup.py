"""Unit tests for sitedata.core.logging_setup."""

from __future__ import annotations

import json
import logging

from rich.logging import RichHandler

from sitedata.core.config import LoggingConfig
from sitedata.core.logging_setup import JsonFormatter, configure_logging


def _own_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, "_sitedata", False)]


class TestConfigureLogging:
    def test_text_uses_rich_handler(self) -> None:
        logger = configure_logging(LoggingConfig(level="DEBUG"))
        handlers = _own_handlers(logger)
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)
        assert logger.level == logging.DEBUG

    def test_json_format(self) -> None:
        logger = configure_logging(LoggingConfig(format="json"))
        (handler,) = _own_handlers(logger)
        assert isinstance(handler.formatter, JsonFormatter)

    def test_repeated_calls_replace_handler(self) -> None:
        configure_logging()
        logger = configure_logging(LoggingConfig(level="WARNING"))
        assert len(_own_handlers(logger)) == 1
        assert logger.level == logging.WARNING


class TestJsonFormatter:
    def test_fields(self) -> None:
        record = logging.LogRecord(
            "sitedata.core.store", logging.INFO, __file__, 1, "applied v%d", (3,), None
        )
        entry = json.loads(JsonFormatter().format(record))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "sitedata.core.store"
        assert entry["msg"] == "applied v3"
        assert "ts" in entry
