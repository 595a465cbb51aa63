"""Command session state and result data model.

This module defines the SessionState enum describing the lifecycle of a
command/response exchange and the immutable SessionResult returned after a
successful one.
"""

from dataclasses import dataclass, field
from enum import Enum
import time


class SessionState(Enum):
    """Lifecycle of a command session.

    IDLE -> OPENING -> ECHO_WAIT -> RESPONSE_COLLECT -> DONE, with FAILED
    reachable from every non-terminal state.
    """
    IDLE = "idle"
    OPENING = "opening"
    ECHO_WAIT = "echo-wait"
    RESPONSE_COLLECT = "response-collect"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (SessionState.DONE, SessionState.FAILED)


# Allowed transitions; FAILED is added for every non-terminal state
TRANSITIONS = {
    SessionState.IDLE: {SessionState.OPENING},
    SessionState.OPENING: {SessionState.ECHO_WAIT},
    SessionState.ECHO_WAIT: {SessionState.RESPONSE_COLLECT},
    SessionState.RESPONSE_COLLECT: {SessionState.DONE},
}


@dataclass(frozen=True)
class SessionResult:
    """Immutable summary of a completed command/response exchange.

    Attributes:
        command: Command text sent, without the trailing newline
        bytes_written: Size of the command on the wire
        response_lines: Number of response lines written to the output
        response_bytes: Total size of those lines
        echo_time: Seconds from sending until the echo was seen
        response_time: Seconds from the echo until the prompt was seen
        timestamp: Unix timestamp when the result was created
    """

    command: str
    bytes_written: int
    response_lines: int
    response_bytes: int
    echo_time: float
    response_time: float
    timestamp: float = field(default_factory=time.time)

    @property
    def execution_time(self) -> float:
        return self.echo_time + self.response_time

    def __str__(self) -> str:
        return (f"[done] {self.command} -> {self.response_lines} lines, "
                f"{self.response_bytes} bytes ({self.execution_time:.3f}s)")
