"""
Tests for structured logging setup
"""

import json
import logging

import pytest
import structlog

from smartsearch.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:

    def test_sets_root_level(self):
        setup_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_defaults_to_info(self):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_json_logs(self, capsys):
        setup_logging("INFO", json_logs=True)
        structlog.get_logger("smartsearch.test").info("Search filters reconciled", source="rules")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "Search filters reconciled"
        assert event["source"] == "rules"
        assert event["level"] == "info"
        assert event["logger"] == "smartsearch.test"
