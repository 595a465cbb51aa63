"""Exclusive, race-free opening of the serial device.

Two locks protect the device. Cooperating mcuxeq processes queue on an
advisory flock() taken right after open; everybody else is kept out by
the kernel's exclusive terminal mode (TIOCEXCL). Unless forced, the
process drops CAP_SYS_ADMIN first so that an existing TIOCEXCL holder
makes our own open fail instead of being silently overridden.
"""

from dataclasses import dataclass
from typing import Callable, Optional, TYPE_CHECKING
import errno
import os
import termios
import time

import serial

from mcuxeq.core.deadline import Clock, Deadline
from mcuxeq.core.exceptions import SerialPortError, SerialPortBusyError
from mcuxeq.core.serial_transport import SerialTransport
from mcuxeq.core.transport_control import TransportControl, PosixTransportControl

if TYPE_CHECKING:
    from mcuxeq.config.config_models import SessionConfig
    from mcuxeq.logging.session_logger import SessionLogger

BUSY_ERRNOS = frozenset({errno.EBUSY, errno.EAGAIN})


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-interval retry schedule for busy opens.

    Attributes:
        interval_ms: Sleep between attempts
        timeout_ms: Total budget; <= 0 retries forever
    """
    interval_ms: int = 200
    timeout_ms: int = 2000

    def deadline(self, clock: Clock = time.monotonic) -> Deadline:
        return Deadline.start(self.timeout_ms, clock)


def _errno_of(exc: Optional[BaseException]) -> Optional[int]:
    """Find the OS error number behind a (possibly wrapped) exception."""
    while exc is not None:
        err = getattr(exc, 'errno', None)
        if isinstance(err, int) and err:
            return err
        exc = exc.__cause__ or exc.__context__
    return None


class TransportOpener:
    """Opens the configured device exclusively and puts it in raw mode.

    Example:
        >>> opener = TransportOpener(config, logger=session_logger)
        >>> transport = opener.open()
    """

    def __init__(self,
                 config: 'SessionConfig',
                 control: Optional[TransportControl] = None,
                 logger: Optional['SessionLogger'] = None,
                 retry_policy: Optional[RetryPolicy] = None,
                 serial_factory: Callable[..., serial.Serial] = serial.Serial,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Clock = time.monotonic):
        """Initialize opener.

        Args:
            config: Session configuration (device, force, baud rate, timeouts)
            control: Terminal control backend (default: PosixTransportControl)
            logger: Optional SessionLogger for diagnostics
            retry_policy: Busy retry schedule (default: from config)
            serial_factory: Callable creating an open pyserial port
            sleep: Sleep function used between busy retries
            clock: Monotonic clock for the open deadline
        """
        self.config = config
        self.control = control or PosixTransportControl()
        self.logger = logger
        self.retry_policy = retry_policy or RetryPolicy(
            interval_ms=config.retry_interval_ms,
            timeout_ms=config.timeout_ms
        )
        self._serial_factory = serial_factory
        self._sleep = sleep
        self._clock = clock

    def open(self) -> SerialTransport:
        """Acquire the device.

        Returns:
            Exclusively held transport in raw mode with empty buffers

        Raises:
            SerialPortBusyError: Device stayed busy past the open deadline
            SerialPortError: Any other open or configuration failure
        """
        if not self.config.force:
            self.control.drop_elevated_privilege()

        self._debug(f"Opening {self.config.device}...")
        port = self._open_with_retry()

        transport = SerialTransport(port, logger=self.logger)
        try:
            self._configure(transport.fileno())
        except BaseException:
            transport.close()
            raise

        if self.logger:
            self.logger.log_port_event(
                event="Port opened",
                port=self.config.device,
                details={
                    "baud_rate": self.config.baud_rate,
                    "force": self.config.force
                },
                level="DEBUG"
            )
        return transport

    def _open_with_retry(self) -> serial.Serial:
        device = self.config.device
        deadline = self.retry_policy.deadline(self._clock)

        while True:
            try:
                return self._open_once()
            except ValueError as e:
                raise SerialPortError(f"Invalid settings for {device}", device, e) from e
            except OSError as e:
                err = _errno_of(e)
                if err not in BUSY_ERRNOS:
                    raise SerialPortError(f"Failed to open {device}", device, e) from e
                if deadline.expired():
                    raise SerialPortBusyError(f"Failed to open {device}", device, e) from e

                self._debug(f"{os.strerror(err)}, retrying")
                self._sleep(self.retry_policy.interval_ms / 1000.0)

    def _open_once(self) -> serial.Serial:
        # exclusive=True makes pyserial take flock(LOCK_EX | LOCK_NB);
        # a forced open skips the advisory lock altogether.
        return self._serial_factory(
            port=self.config.device,
            baudrate=self.config.baud_rate,
            timeout=0,
            exclusive=None if self.config.force else True
        )

    def _configure(self, fd: int) -> None:
        steps = (
            ("put terminal in exclusive mode", self.control.set_exclusive),
            ("enable raw mode", self.control.set_raw_mode),
            ("flush", self.control.flush),
        )
        for what, operation in steps:
            try:
                operation(fd)
            except (OSError, termios.error) as e:
                raise SerialPortError(f"Failed to {what}", self.config.device, e) from e

    def _debug(self, message: str) -> None:
        if self.logger:
            self.logger.debug("TransportOpener", message, port=self.config.device)
