"""Byte-at-a-time reader over a serial transport."""

from typing import Optional, TYPE_CHECKING

from mcuxeq.core.exceptions import ReadTimeoutError

if TYPE_CHECKING:
    from mcuxeq.core.serial_transport import SerialTransport
    from mcuxeq.logging.session_logger import SessionLogger

READ_CHUNK_SIZE = 64


class RawByteSource:
    """Serves device input one byte at a time.

    Input is fetched in chunks of up to chunk_size bytes and handed out
    strictly in arrival order; the transport is only read again once the
    current chunk is exhausted. Each refill waits at most idle_timeout
    seconds for the device to produce something.

    Attributes:
        idle_timeout: Seconds to wait for the next chunk (None = forever)
        chunk_size: Maximum bytes fetched per read
    """

    def __init__(self,
                 transport: 'SerialTransport',
                 idle_timeout: Optional[float],
                 chunk_size: int = READ_CHUNK_SIZE,
                 logger: Optional['SessionLogger'] = None):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.transport = transport
        self.idle_timeout = idle_timeout
        self.chunk_size = chunk_size
        self.logger = logger
        self._buffer = b""
        self._count = 0
        self._pos = 0

    @property
    def pending(self) -> int:
        """Bytes already fetched but not yet served."""
        return self._count - self._pos

    def read_byte(self) -> int:
        """Return the next input byte.

        Raises:
            ReadTimeoutError: Nothing arrived within the idle timeout
            EndOfStreamError: Device hung up
            SerialPortError: Poll or read failure
        """
        if self._pos >= self._count:
            self._refill()

        byte = self._buffer[self._pos]
        self._pos += 1
        return byte

    def _refill(self) -> None:
        if not self.transport.wait_readable(self.idle_timeout):
            raise ReadTimeoutError("Timeout", self.transport.port)

        data = self.transport.read_available(self.chunk_size)
        self._buffer = data
        self._count = len(data)
        self._pos = 0

        if self.logger:
            self.logger.log_chunk(self.transport.port, data)
