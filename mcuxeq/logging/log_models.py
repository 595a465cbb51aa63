"""Log data models for session logging.

This module defines immutable data structures for log entries, providing
structured representation of port events, command traffic and errors.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Optional
import json


@dataclass(frozen=True)
class LogEntry:
    """Immutable log entry for session logging.

    Attributes:
        timestamp: When the event occurred
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        source: Component name (TransportOpener, CommandSession, etc.)
        message: Human-readable message describing the event
        details: Additional structured data (arbitrary dict)
        port: Serial device path (optional)
        command: Command text sent (optional)
        phase: Session phase the event belongs to (optional)
        nbytes: Byte count for reads/writes (optional)
        error: Error message if applicable (optional)

    Example:
        >>> entry = LogEntry(
        ...     timestamp=datetime.now(),
        ...     level="DEBUG",
        ...     source="RawByteSource",
        ...     message="Read 12 bytes",
        ...     port="/dev/ttyUSB0",
        ...     nbytes=12
        ... )
        >>> entry.to_string()
        '2025-01-12 10:30:15.234 | DEBUG   | RawByteSource   | Read 12 bytes | BYTES: 12'
    """

    timestamp: datetime
    level: str  # DEBUG, INFO, WARNING, ERROR
    source: str  # Component name
    message: str
    details: Optional[Dict[str, Any]] = None

    port: Optional[str] = None
    command: Optional[str] = None
    phase: Optional[str] = None
    nbytes: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary for serialization.

        Returns:
            Dictionary with all fields, ISO format for timestamp
        """
        return {
            'timestamp': self.timestamp.isoformat(),
            'level': self.level,
            'source': self.source,
            'message': self.message,
            'details': self.details,
            'port': self.port,
            'command': self.command,
            'phase': self.phase,
            'nbytes': self.nbytes,
            'error': self.error
        }

    def to_string(self) -> str:
        """Format log entry as human-readable string.

        Returns:
            Formatted string: "YYYY-MM-DD HH:MM:SS.mmm | LEVEL | SOURCE | MESSAGE"
        """
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        base = f"{timestamp_str} | {self.level:7} | {self.source:15} | {self.message}"

        if self.phase:
            base += f" | PHASE: {self.phase}"
        if self.command:
            base += f" | CMD: {self.command}"
        if self.nbytes is not None:
            base += f" | BYTES: {self.nbytes}"
        if self.error:
            base += f" | ERROR: {self.error}"

        return base

    def to_json(self) -> str:
        """Convert log entry to JSON string."""
        return json.dumps(self.to_dict(), default=str)
