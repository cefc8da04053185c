"""
Tests for root logger configuration.
"""

import json
import logging

import pytest

from core import setup_logging, setup_logging_from_settings
from core.settings import load_settings


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestSetupLogging:

    def test_level_and_single_handler(self):
        setup_logging(level="debug")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(level="chatty")
        assert logging.getLogger().level == logging.INFO

    def test_json_format(self):
        setup_logging(log_format="json", correlation_id="run-1")
        formatter = logging.getLogger().handlers[0].formatter
        record = logging.LogRecord("risk_scoring.engine", logging.INFO, __file__, 1, "scored", None, None)

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "scored"
        assert payload["correlation_id"] == "run-1"

    def test_from_settings(self):
        settings = load_settings({"RISK_ANALYTICS_LOG_LEVEL": "WARNING", "RISK_ANALYTICS_LOG_FORMAT": "text"})
        setup_logging_from_settings(settings)
        assert logging.getLogger().level == logging.WARNING
