"""Session logger for command/response diagnostics.

This module provides the SessionLogger class, a central coordinator for
diagnostic output of one mcuxeq run. It writes structured LogEntry records
to the console (stderr) and optionally to a rotating log file, filtered by
log level. Nothing it writes ever goes to stdout, which carries only the
device response.
"""

from datetime import datetime
from threading import Lock
from typing import Optional, Dict, Any, TextIO
import sys

from mcuxeq.config.config_models import LogLevel, LoggingConfig
from mcuxeq.logging.file_handler import FileHandler
from mcuxeq.logging.hexdump import hexdump_lines
from mcuxeq.logging.log_models import LogEntry


class SessionLogger:
    """Central coordinator for session diagnostics.

    Attributes:
        log_level: Current log level (DEBUG, INFO, WARNING, ERROR)
        enable_console: Whether console logging is enabled
        log_file_path: Path to log file (if file logging enabled)
        hexdump: Whether raw chunks are dumped in hex

    Example:
        >>> logger = SessionLogger(log_level=LogLevel.DEBUG)
        >>> logger.log_command(port="/dev/ttyUSB0", command="gpio 0 pulse")
        >>> logger.close()
    """

    _LEVEL_PRIORITY = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3
    }

    def __init__(
        self,
        log_level: LogLevel = LogLevel.WARNING,
        enable_console: bool = True,
        log_file_path: Optional[str] = None,
        json_format: bool = False,
        max_file_size_mb: float = 1,
        backup_count: int = 3,
        hexdump: bool = False,
        stream: Optional[TextIO] = None
    ):
        """Initialize SessionLogger with output destinations and log level.

        Args:
            log_level: Log level for filtering (default: WARNING)
            enable_console: Enable console logging (default: True)
            log_file_path: Path to log file, None disables file logging
            json_format: Write JSON lines to the log file (default: False)
            max_file_size_mb: Maximum file size before rotation (default: 1)
            backup_count: Number of backup files to keep (default: 3)
            hexdump: Dump every chunk read from the device (default: False)
            stream: Console stream (default: sys.stderr at write time)
        """
        self.log_level = log_level.value if isinstance(log_level, LogLevel) else log_level
        self.enable_console = enable_console
        self.log_file_path = log_file_path
        self.hexdump = hexdump
        self._stream = stream

        self._lock = Lock()

        self._file_handler: Optional[FileHandler] = None
        if log_file_path:
            self._file_handler = FileHandler(
                log_file_path=log_file_path,
                max_size_mb=max_file_size_mb,
                backup_count=backup_count,
                json_format=json_format
            )

    @classmethod
    def from_config(cls,
                    config: LoggingConfig,
                    debug_level: int = 0,
                    log_file_path: Optional[str] = None,
                    stream: Optional[TextIO] = None) -> 'SessionLogger':
        """Create a logger from the logging section and the -d count.

        One -d lowers the level to DEBUG, two or more also enable hex dumps.
        """
        level = LogLevel.DEBUG if debug_level > 0 else config.level
        return cls(
            log_level=level,
            enable_console=True,
            log_file_path=log_file_path or config.file_path,
            json_format=config.json_format,
            max_file_size_mb=config.max_file_size_mb,
            backup_count=config.backup_count,
            hexdump=debug_level > 1,
            stream=stream
        )

    def log(self, entry: LogEntry) -> None:
        """Log an entry to all enabled destinations with level filtering."""
        if not self.is_enabled_for(entry.level):
            return

        with self._lock:
            if self._file_handler:
                self._file_handler.write(entry)

            if self.enable_console:
                stream = self._stream or sys.stderr
                print(entry.to_string(), file=stream)

    def is_enabled_for(self, level: str) -> bool:
        """Check if entries of the given level pass the current filter."""
        entry_priority = self._LEVEL_PRIORITY.get(level, 0)
        current_priority = self._LEVEL_PRIORITY.get(self.log_level, 0)
        return entry_priority >= current_priority

    def debug(self, source: str, message: str, **fields: Any) -> None:
        """Log a DEBUG entry (convenience method)."""
        if not self.is_enabled_for("DEBUG"):
            return
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="DEBUG",
            source=source,
            message=message,
            **fields
        ))

    def log_port_event(
        self,
        event: str,
        port: str,
        details: Optional[Dict[str, Any]] = None,
        level: str = "INFO"
    ) -> None:
        """Log serial port event (convenience method).

        Example:
            >>> logger.log_port_event(
            ...     event="Port opened",
            ...     port="/dev/ttyUSB0",
            ...     details={"baud_rate": 115200}
            ... )
        """
        self.log(LogEntry(
            timestamp=datetime.now(),
            level=level,
            source="SerialTransport",
            message=event,
            port=port,
            details=details
        ))

    def log_command(self, port: str, command: str) -> None:
        """Log the command being sent (convenience method)."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="DEBUG",
            source="CommandSession",
            message="Sending command",
            port=port,
            command=command
        ))

    def log_chunk(self, port: str, data: bytes) -> None:
        """Log a chunk read from the device, with a hex dump if enabled."""
        if not self.is_enabled_for("DEBUG"):
            return

        self.debug("RawByteSource", f"Read {len(data)} bytes", port=port, nbytes=len(data))
        if self.hexdump:
            for row in hexdump_lines(data):
                self.debug("RawByteSource", row, port=port)

    def log_error(
        self,
        source: str,
        error: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log error event (convenience method)."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="ERROR",
            source=source,
            message="Error occurred",
            error=error,
            details=details
        ))

    def close(self) -> None:
        """Close the log file, if any. Safe to call multiple times."""
        if self._file_handler:
            self._file_handler.close()
            self._file_handler = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures logger is closed."""
        self.close()
        return False
