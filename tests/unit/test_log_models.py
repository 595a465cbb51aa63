"""Unit tests for LogEntry dataclass."""

from dataclasses import FrozenInstanceError
from datetime import datetime
import json

import pytest

from mcuxeq.logging.log_models import LogEntry

TIMESTAMP = datetime(2025, 1, 12, 10, 30, 15, 234000)


class TestLogEntry:
    """Test suite for LogEntry dataclass."""

    def test_log_entry_creation(self):
        entry = LogEntry(
            timestamp=TIMESTAMP,
            level="INFO",
            source="TestSource",
            message="Test message"
        )

        assert entry.timestamp == TIMESTAMP
        assert entry.details is None
        assert entry.port is None
        assert entry.nbytes is None

    def test_log_entry_immutable(self):
        """Test that LogEntry is frozen (immutable)."""
        entry = LogEntry(timestamp=TIMESTAMP, level="INFO", source="Test", message="Test")

        with pytest.raises(FrozenInstanceError):
            entry.message = "Changed"

    def test_to_string_minimal(self):
        entry = LogEntry(
            timestamp=TIMESTAMP,
            level="DEBUG",
            source="RawByteSource",
            message="Read 12 bytes"
        )

        assert entry.to_string() == (
            "2025-01-12 10:30:15.234 | DEBUG   | RawByteSource   | Read 12 bytes"
        )

    def test_to_string_with_fields(self):
        """Test optional fields are appended in a fixed order."""
        entry = LogEntry(
            timestamp=TIMESTAMP,
            level="ERROR",
            source="CommandSession",
            message="Error occurred",
            phase="echo-wait",
            command="gpio 0 pulse",
            nbytes=0,
            error="Command echo not found"
        )

        assert entry.to_string().endswith(
            "| Error occurred | PHASE: echo-wait | CMD: gpio 0 pulse | BYTES: 0"
            " | ERROR: Command echo not found"
        )

    def test_to_dict(self):
        entry = LogEntry(
            timestamp=TIMESTAMP,
            level="DEBUG",
            source="SerialTransport",
            message="Port opened",
            details={"baud_rate": 115200},
            port="/dev/ttyUSB0"
        )

        data = entry.to_dict()

        assert data["timestamp"] == "2025-01-12T10:30:15.234000"
        assert data["details"] == {"baud_rate": 115200}
        assert data["port"] == "/dev/ttyUSB0"
        assert data["phase"] is None

    def test_to_json(self):
        entry = LogEntry(
            timestamp=TIMESTAMP,
            level="DEBUG",
            source="SerialTransport",
            message="Port closed",
            details={"session_duration_seconds": 0.5}
        )

        assert json.loads(entry.to_json()) == entry.to_dict()
