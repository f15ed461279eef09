"""Unit tests for structured logging setup."""

import json

import pytest
import structlog

from spiffe_entry.infrastructure.logging import add_service_name, get_logger, setup_logging


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.unit
class TestLogging:
    """Tests for logging configuration."""

    def test_json_events_carry_service_name(self, capsys, reset_structlog):
        setup_logging("INFO", "json", service_name="spiffe_entry")
        get_logger("test").info("entries_derived", entries=2)

        event = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert event["event"] == "entries_derived"
        assert event["service"] == "spiffe_entry"
        assert event["level"] == "info"
        assert event["entries"] == 2

    def test_level_filtering(self, capsys, reset_structlog):
        setup_logging("WARNING", "json")
        get_logger("test").info("hidden")
        assert "hidden" not in capsys.readouterr().out

    def test_service_name_does_not_override_event_field(self):
        processor = add_service_name("spiffe_entry")
        assert processor(None, "info", {"event": "x", "service": "other"})["service"] == "other"
        assert processor(None, "info", {"event": "x"})["service"] == "spiffe_entry"
