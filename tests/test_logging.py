"""Tests for logging setup."""

import json
import logging
from unittest.mock import MagicMock, patch

from twtfeed.logging import JsonFormatter, setup_logging


def test_json_formatter_keeps_unicode():
    record = logging.LogRecord("twtfeed", logging.INFO, __file__, 1, "Parsed ➤ feed", None, None)

    data = json.loads(JsonFormatter().format(record))

    assert data == {"level": "INFO", "msg": "Parsed ➤ feed", "logger": "twtfeed"}
    assert "➤" in JsonFormatter().format(record)


def test_setup_logging_uses_json_in_prod():
    settings = MagicMock()
    settings.env = "prod"
    settings.log_level = "WARNING"

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        with patch("twtfeed.logging.get_settings", return_value=settings):
            setup_logging()

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
