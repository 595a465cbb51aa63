"""Core command/response engine.

This package provides the serial transport layer, the byte-to-line
assembler and the two-phase command session.
"""

from mcuxeq.core.exceptions import (
    McuxeqError,
    ConfigError,
    PromptPatternError,
    SerialPortError,
    SerialPortBusyError,
    ReadTimeoutError,
    EndOfStreamError,
    ShortWriteError,
    ProtocolError,
    EchoNotFoundError,
    LineTooLongError,
    PhaseTimeoutError
)
from mcuxeq.core.deadline import Deadline
from mcuxeq.core.transport_control import TransportControl, PosixTransportControl
from mcuxeq.core.serial_transport import SerialTransport
from mcuxeq.core.transport_opener import TransportOpener, RetryPolicy
from mcuxeq.core.byte_source import RawByteSource
from mcuxeq.core.line_assembler import LineAssembler, PROMPT_SEEN, LINE_SIZE
from mcuxeq.core.session_result import SessionResult, SessionState
from mcuxeq.core.command_session import CommandSession, build_command, execute
from mcuxeq.core.errors import report, exit_status, EXIT_SUCCESS, EXIT_USAGE, EXIT_FAILURE

__all__ = [
    'McuxeqError',
    'ConfigError',
    'PromptPatternError',
    'SerialPortError',
    'SerialPortBusyError',
    'ReadTimeoutError',
    'EndOfStreamError',
    'ShortWriteError',
    'ProtocolError',
    'EchoNotFoundError',
    'LineTooLongError',
    'PhaseTimeoutError',
    'Deadline',
    'TransportControl',
    'PosixTransportControl',
    'SerialTransport',
    'TransportOpener',
    'RetryPolicy',
    'RawByteSource',
    'LineAssembler',
    'PROMPT_SEEN',
    'LINE_SIZE',
    'SessionResult',
    'SessionState',
    'CommandSession',
    'build_command',
    'execute',
    'report',
    'exit_status',
    'EXIT_SUCCESS',
    'EXIT_USAGE',
    'EXIT_FAILURE',
]
