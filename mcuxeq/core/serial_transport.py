"""Serial device I/O for one command/response cycle.

This module wraps an opened pyserial port with the few primitives the
session needs: waiting for readability with a timeout, draining available
bytes, writing a command in full and closing the device. pyserial errors
are translated into the mcuxeq exception hierarchy.
"""

from typing import Optional, TYPE_CHECKING
import select
import time

import serial

from mcuxeq.core.exceptions import (
    SerialPortError,
    EndOfStreamError,
    ShortWriteError
)

if TYPE_CHECKING:
    from mcuxeq.logging.session_logger import SessionLogger


class SerialTransport:
    """An opened, exclusively held serial device.

    Created by TransportOpener; owns the pyserial port until close().
    Closing the descriptor also releases the advisory lock.

    Example:
        >>> with TransportOpener(config).open() as transport:
        ...     transport.write_all(b"version\\n")
        ...     if transport.wait_readable(2.0):
        ...         data = transport.read_available(64)
    """

    def __init__(self,
                 serial_port: serial.Serial,
                 logger: Optional['SessionLogger'] = None):
        """Take ownership of an open pyserial port.

        Args:
            serial_port: Open port, configured with timeout=0 (non-blocking reads)
            logger: Optional SessionLogger for port events
        """
        self._serial = serial_port
        self.port: str = serial_port.port
        self.logger = logger
        self._open_time: Optional[float] = time.time()

    def fileno(self) -> int:
        return self._serial.fileno()

    @property
    def is_open(self) -> bool:
        return self._serial.is_open

    def wait_readable(self, timeout: Optional[float]) -> bool:
        """Block until the device has input or timeout seconds pass.

        Args:
            timeout: Seconds to wait, None waits forever

        Returns:
            True if input is pending, False on timeout

        Raises:
            SerialPortError: Port closed or poll failed
        """
        self._ensure_open("poll")
        try:
            readable, _, _ = select.select([self.fileno()], [], [], timeout)
        except (OSError, ValueError) as e:
            raise SerialPortError("Poll error", self.port, e) from e
        return bool(readable)

    def read_available(self, max_bytes: int) -> bytes:
        """Read up to max_bytes of already pending input without blocking.

        Returns:
            At least one byte

        Raises:
            EndOfStreamError: Device signalled readiness but had no data
            SerialPortError: Read failed
        """
        self._ensure_open("read")
        try:
            data = self._serial.read(max_bytes)
        except serial.SerialException as e:
            if 'returned no data' in str(e):
                raise EndOfStreamError("No data", self.port, e) from e
            raise SerialPortError("Read error", self.port, e) from e

        if not data:
            raise EndOfStreamError("No data", self.port)
        return data

    def write_all(self, data: bytes) -> int:
        """Write data to the device in full and wait until it is sent.

        Returns:
            Number of bytes written

        Raises:
            ShortWriteError: Device accepted fewer bytes than given
            SerialPortError: Write failed
        """
        self._ensure_open("write")
        try:
            written = self._serial.write(data)
            self._serial.flush()
        except serial.SerialException as e:
            raise SerialPortError("Write error", self.port, e) from e

        if written is None or written < len(data):
            raise ShortWriteError(self.port, written or 0, len(data))
        return written

    def close(self) -> None:
        """Close the device and release its locks.

        Safe to call multiple times; does nothing if already closed.
        """
        if not self._serial.is_open:
            return

        try:
            self._serial.close()
        finally:
            if self.logger:
                duration = None
                if self._open_time is not None:
                    duration = time.time() - self._open_time
                self.logger.log_port_event(
                    event="Port closed",
                    port=self.port,
                    details={"session_duration_seconds": duration},
                    level="DEBUG"
                )
            self._open_time = None

    def _ensure_open(self, operation: str) -> None:
        if not self._serial.is_open:
            raise SerialPortError(f"Cannot {operation} closed port", self.port)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"SerialTransport(port='{self.port}', status={status})"
