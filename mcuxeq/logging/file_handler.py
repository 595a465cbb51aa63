"""File handler for session logs with automatic rotation.

Writes log entries to a file, rotating it once it exceeds a size limit
and keeping a configurable number of numbered backups.
"""

from pathlib import Path
from threading import Lock
from typing import Optional, TextIO
import os
import sys

from mcuxeq.logging.log_models import LogEntry


class FileHandler:
    """Thread-safe file handler with automatic log rotation.

    Attributes:
        log_file_path: Path to the current log file
        max_size_bytes: Maximum file size in bytes before rotation
        backup_count: Number of backup files to keep
        json_format: Write one JSON object per line instead of text

    Example:
        >>> handler = FileHandler("~/.mcuxeq/logs/session.log", max_size_mb=1)
        >>> handler.write(log_entry)
        >>> handler.close()
    """

    def __init__(self, log_file_path: str, max_size_mb: float = 1,
                 backup_count: int = 3, json_format: bool = False):
        """Initialize FileHandler with path and rotation settings.

        Creates the log directory if it doesn't exist.

        Args:
            log_file_path: Path to log file (supports ~ expansion)
            max_size_mb: Maximum file size in MB before rotation (default: 1)
            backup_count: Number of rotated backups to keep (default: 3)
            json_format: Emit JSON lines instead of text (default: False)

        Raises:
            OSError: If log directory cannot be created or file cannot be opened
        """
        self.log_file_path = Path(log_file_path).expanduser().resolve()
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.backup_count = backup_count
        self.json_format = json_format
        self._lock = Lock()
        self._file_handle: Optional[TextIO] = None
        self._is_closed = False

        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._open_file()

    def _open_file(self) -> None:
        self._file_handle = open(
            self.log_file_path,
            mode='a',
            encoding='utf-8',
            buffering=8192
        )

    def write(self, entry: LogEntry) -> bool:
        """Write log entry to file with automatic rotation.

        Args:
            entry: LogEntry to write to file

        Returns:
            True if write successful, False if write failed
        """
        if self._is_closed or self._file_handle is None:
            return False

        with self._lock:
            try:
                self._rotate_if_needed()

                line = entry.to_json() if self.json_format else entry.to_string()
                if self._file_handle is None:
                    return False

                self._file_handle.write(line + '\n')
                self._file_handle.flush()
                return True

            except OSError as e:
                # A broken log file must not abort the device session
                print(f"ERROR: Failed to write log entry: {e}", file=sys.stderr)
                return False

    def _rotate_if_needed(self) -> None:
        """Rotate the log file once it reaches max_size_bytes.

        session.log -> session.log.1 -> session.log.2 ...; the oldest
        backup beyond backup_count is removed. Caller must hold self._lock.
        """
        if self._file_handle is None:
            return

        if os.path.getsize(self.log_file_path) < self.max_size_bytes:
            return

        self._file_handle.close()
        self._file_handle = None

        for i in range(self.backup_count - 1, 0, -1):
            src = Path(f"{self.log_file_path}.{i}")
            dst = Path(f"{self.log_file_path}.{i + 1}")
            if src.exists():
                src.replace(dst)

        if self.backup_count > 0:
            self.log_file_path.replace(Path(f"{self.log_file_path}.1"))
        else:
            self.log_file_path.unlink()

        self._open_file()

    def flush(self) -> None:
        """Flush buffered writes to disk."""
        if self._file_handle is None or self._is_closed:
            return

        with self._lock:
            if not self._file_handle.closed:
                self._file_handle.flush()
                os.fsync(self._file_handle.fileno())

    def close(self) -> None:
        """Close log file and flush all buffers.

        Idempotent - safe to call multiple times.
        """
        if self._is_closed:
            return

        with self._lock:
            try:
                if self._file_handle and not self._file_handle.closed:
                    self._file_handle.flush()
                    self._file_handle.close()
            finally:
                self._file_handle = None
                self._is_closed = True

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures file is closed."""
        self.close()
        return False
