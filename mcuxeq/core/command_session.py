"""Command/response orchestration.

A session sends exactly one command, waits for the device to echo it and
then streams every following line to the output until the device shows
its prompt again. Each of the two phases gets its own deadline.
"""

from typing import BinaryIO, Callable, Optional, Sequence, Union, TYPE_CHECKING
import os
import sys
import time

from mcuxeq.core.byte_source import RawByteSource
from mcuxeq.core.deadline import Clock, Deadline
from mcuxeq.core.exceptions import (
    ConfigError,
    EchoNotFoundError,
    PhaseTimeoutError
)
from mcuxeq.core.line_assembler import LineAssembler, PROMPT_SEEN
from mcuxeq.core.serial_transport import SerialTransport
from mcuxeq.core.session_result import SessionResult, SessionState, TRANSITIONS
from mcuxeq.core.transport_control import TransportControl
from mcuxeq.core.transport_opener import TransportOpener

if TYPE_CHECKING:
    from mcuxeq.config.config_models import SessionConfig
    from mcuxeq.logging.session_logger import SessionLogger

Word = Union[str, bytes]


def build_command(words: Sequence[Word]) -> bytes:
    """Join command words with single spaces and append one newline.

    Words are taken verbatim; str words are encoded the way the OS
    encodes command line arguments, so any argv survives unchanged.

    Example:
        >>> build_command(["gpio", "0", "pulse"])
        b'gpio 0 pulse\\n'

    Raises:
        ConfigError: No words given
    """
    if not words:
        raise ConfigError("No command given")
    return b" ".join(os.fsencode(w) for w in words) + b"\n"


class CommandSession:
    """Runs one command/response exchange on a serial device.

    The session owns the transport for its whole lifetime and always
    closes it, whether the exchange succeeds or fails.

    Example:
        >>> session = CommandSession(config, logger=session_logger)
        >>> result = session.run(["gpio", "0", "pulse"])
        >>> session.state
        <SessionState.DONE: 'done'>
    """

    def __init__(self,
                 config: 'SessionConfig',
                 transport: Optional[SerialTransport] = None,
                 opener: Optional[TransportOpener] = None,
                 output: Optional[BinaryIO] = None,
                 logger: Optional['SessionLogger'] = None,
                 clock: Clock = time.monotonic):
        """Initialize session.

        Args:
            config: Resolved session configuration
            transport: Already opened transport (skips opening)
            opener: Opener used when no transport is given
                (default: TransportOpener(config))
            output: Binary stream receiving response lines
                (default: sys.stdout.buffer)
            logger: Optional SessionLogger for diagnostics
            clock: Monotonic clock for phase deadlines
        """
        self.config = config
        self.logger = logger
        self._transport = transport
        self._opener = opener
        self._output = output
        self._clock = clock
        self.state = SessionState.IDLE

    def run(self, words: Sequence[Word]) -> SessionResult:
        """Send the command and stream its response.

        Args:
            words: Command words, joined by single spaces

        Returns:
            SessionResult summarizing the exchange

        Raises:
            McuxeqError: Any failure; the session ends in FAILED state
        """
        command = build_command(words)
        try:
            self._enter(SessionState.OPENING)
            transport = self._acquire()
            try:
                result = self._exchange(transport, command)
            finally:
                transport.close()
        except BaseException:
            self.state = SessionState.FAILED
            raise

        self._enter(SessionState.DONE)
        return result

    def _acquire(self) -> SerialTransport:
        if self._transport is not None:
            return self._transport
        opener = self._opener or TransportOpener(self.config, logger=self.logger)
        return opener.open()

    def _exchange(self, transport: SerialTransport, command: bytes) -> SessionResult:
        text = os.fsdecode(command[:-1])

        if self.logger:
            self.logger.log_command(transport.port, text)
        start = self._clock()
        written = transport.write_all(command)

        source = RawByteSource(transport, self.config.idle_timeout, logger=self.logger)
        assembler = LineAssembler(source, self.config.prompt)

        self._enter(SessionState.ECHO_WAIT)
        self._wait_for_echo(assembler, command)
        echo_seen = self._clock()
        self._debug("Command echo found.")

        self._enter(SessionState.RESPONSE_COLLECT)
        lines, nbytes = self._collect_response(assembler)

        return SessionResult(
            command=text,
            bytes_written=written,
            response_lines=lines,
            response_bytes=nbytes,
            echo_time=echo_seen - start,
            response_time=self._clock() - echo_seen
        )

    def _wait_for_echo(self, assembler: LineAssembler, command: bytes) -> None:
        deadline = Deadline.start(self.config.timeout_ms, self._clock)
        self._debug("Waiting for command echo...", phase=SessionState.ECHO_WAIT.value)

        while True:
            line = assembler.next_line()
            if line is PROMPT_SEEN:
                raise EchoNotFoundError("Command echo not found", os.fsdecode(command[:-1]))
            if command in line:
                return
            if deadline.expired():
                raise PhaseTimeoutError("Command echo not found", SessionState.ECHO_WAIT.value)

            self._debug(f"Ignoring {line!r}", phase=SessionState.ECHO_WAIT.value)

    def _collect_response(self, assembler: LineAssembler):
        deadline = Deadline.start(self.config.timeout_ms, self._clock)
        output = self._output if self._output is not None else sys.stdout.buffer
        lines = 0
        nbytes = 0

        while True:
            line = assembler.next_line()
            if line is PROMPT_SEEN:
                self._debug("Prompt seen, end of data", phase=SessionState.RESPONSE_COLLECT.value)
                return lines, nbytes
            if deadline.expired():
                raise PhaseTimeoutError("Response too long", SessionState.RESPONSE_COLLECT.value)

            output.write(line)
            output.flush()
            lines += 1
            nbytes += len(line)

    def _enter(self, state: SessionState) -> None:
        if state not in TRANSITIONS.get(self.state, set()):
            raise RuntimeError(f"Invalid session transition {self.state.value} -> {state.value}")
        self.state = state

    def _debug(self, message: str, **fields) -> None:
        if self.logger:
            self.logger.debug("CommandSession", message, **fields)


def execute(config: 'SessionConfig',
            words: Sequence[Word],
            output: Optional[BinaryIO] = None,
            logger: Optional['SessionLogger'] = None,
            control: Optional[TransportControl] = None,
            sleep: Callable[[float], None] = time.sleep) -> SessionResult:
    """Open the configured device and run one command session on it.

    Example:
        >>> result = execute(config, ["version"])
    """
    opener = TransportOpener(config, control=control, logger=logger, sleep=sleep)
    session = CommandSession(config, opener=opener, output=output, logger=logger)
    return session.run(words)
