"""
Tests for structlog configuration.
"""

from __future__ import annotations

import json

import pytest
import structlog

from channelhub.core.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_structlog():
    yield
    structlog.reset_defaults()
    configure_logging("info", "text")


class TestConfigureLogging:
    def test_json_at_info(self, capsys):
        configure_logging("info", "json")
        log = structlog.get_logger()
        log.debug("hidden.event")
        log.info("shown.event", key="value")

        lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["event"] == "shown.event"
        assert entry["key"] == "value"
        assert entry["level"] == "info"

    def test_text_at_debug(self, capsys):
        configure_logging("debug", "text")
        structlog.get_logger().debug("debug.event")
        assert "debug.event" in capsys.readouterr().out

    def test_level_name_is_case_insensitive(self, capsys):
        configure_logging("WARNING", "json")
        log = structlog.get_logger()
        log.info("quiet.event")
        log.warning("loud.event")
        out = capsys.readouterr().out
        assert "quiet.event" not in out
        assert "loud.event" in out
