"""mcuxeq - Microcontroller Command/Response Utility.

Sends a single command to a device shell attached to a serial port and
captures its response:
- Exclusive, race-free access to the serial device
- Echo detection and prompt-terminated response capture
- Idle and per-phase timeouts
"""

__version__ = "0.1.0"

# Core command/response engine
from mcuxeq.core import (
    SessionResult,
    SessionState,
    CommandSession,
    TransportOpener,
    SerialTransport,
    build_command,
    execute,
    McuxeqError,
    SerialPortError,
    ProtocolError,
    PhaseTimeoutError,
)

# Configuration
from mcuxeq.config import (
    SessionConfig,
    ConfigLoader,
    build_session_config,
    compile_prompt,
)

__all__ = [
    # Core
    "SessionResult",
    "SessionState",
    "CommandSession",
    "TransportOpener",
    "SerialTransport",
    "build_command",
    "execute",
    # Configuration
    "SessionConfig",
    "ConfigLoader",
    "build_session_config",
    "compile_prompt",
    # Exceptions
    "McuxeqError",
    "SerialPortError",
    "ProtocolError",
    "PhaseTimeoutError",
]
