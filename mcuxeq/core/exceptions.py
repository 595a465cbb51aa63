"""Custom exception hierarchy for mcuxeq.

Every failure of a command/response cycle is fatal to the session. Each
condition has its own exception type carrying enough context (device,
phase, underlying OS error) to be reported once at the top level.
"""

from typing import Optional


class McuxeqError(Exception):
    """Base exception for all mcuxeq errors.

    All custom exceptions inherit from this base class to allow
    catching all tool-specific errors with a single except clause.
    """
    pass


class ConfigError(McuxeqError):
    """Invalid or incomplete configuration.

    Raised for missing device paths, empty commands, malformed
    configuration files and similar problems detected before the
    device is touched.
    """
    pass


class PromptPatternError(ConfigError):
    """Prompt regular expression failed to compile.

    Attributes:
        pattern: The pattern text as given by the user
    """

    def __init__(self, message: str, pattern: str):
        super().__init__(message)
        self.pattern = pattern

    def __str__(self) -> str:
        base_msg = super().__str__()
        return f"{base_msg} (pattern: {self.pattern!r})"


class SerialPortError(McuxeqError):
    """Serial port communication error.

    Raised when serial port operations fail (open, configure, read, write).
    Captures port identifier and underlying OS error for diagnostics.

    Attributes:
        port: Serial device path (e.g., '/dev/ttyUSB0')
        os_error: Original exception from pyserial or OS (if available)
    """

    def __init__(self, message: str, port: str, os_error: Optional[Exception] = None):
        """Initialize SerialPortError.

        Args:
            message: Human-readable error description
            port: Serial device path
            os_error: Original exception from pyserial/OS
        """
        super().__init__(message)
        self.port = port
        self.os_error = os_error

    def __str__(self) -> str:
        """Format error message with port context."""
        base_msg = super().__str__()
        if self.os_error:
            return f"{base_msg} (port: {self.port}, cause: {self.os_error})"
        return f"{base_msg} (port: {self.port})"


class SerialPortBusyError(SerialPortError):
    """Port stayed busy until the open deadline expired.

    Raised when another process kept the device (kernel exclusive mode
    or the advisory lock of another mcuxeq instance) for longer than the
    configured timeout.
    """
    pass


class ReadTimeoutError(SerialPortError):
    """No byte arrived within the idle timeout."""
    pass


class EndOfStreamError(SerialPortError):
    """Device reported readiness but returned no data (hangup)."""
    pass


class ShortWriteError(SerialPortError):
    """Fewer bytes were written than the command holds.

    Attributes:
        written: Number of bytes accepted by the device
        expected: Length of the command
    """

    def __init__(self, port: str, written: int, expected: int):
        super().__init__(f"Short write {written} < {expected}", port)
        self.written = written
        self.expected = expected


class ProtocolError(McuxeqError):
    """Device output did not follow the expected echo/response protocol."""
    pass


class EchoNotFoundError(ProtocolError):
    """Device showed its prompt before echoing the command.

    Attributes:
        command: Command text that was sent
    """

    def __init__(self, message: str, command: str):
        super().__init__(message)
        self.command = command

    def __str__(self) -> str:
        base_msg = super().__str__()
        return f"{base_msg} (command: {self.command!r})"


class LineTooLongError(ProtocolError):
    """A line grew past the maximum line length without a newline or prompt.

    Attributes:
        limit: Maximum line length in bytes, terminator included
    """

    def __init__(self, limit: int):
        super().__init__("Line too long")
        self.limit = limit

    def __str__(self) -> str:
        return f"{super().__str__()} (limit: {self.limit} bytes)"


class PhaseTimeoutError(McuxeqError):
    """A session phase used up its deadline.

    Attributes:
        phase: Name of the phase that timed out ('echo-wait',
            'response-collect')
    """

    def __init__(self, message: str, phase: str):
        super().__init__(message)
        self.phase = phase

    def __str__(self) -> str:
        base_msg = super().__str__()
        return f"{base_msg} (phase: {self.phase})"
