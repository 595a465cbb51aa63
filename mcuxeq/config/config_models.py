"""Configuration data models for mcuxeq.

This module defines immutable configuration dataclasses. Config mirrors
the layered file/environment settings; SessionConfig is the resolved,
ready-to-use configuration of a single command/response cycle.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any, Pattern


class LogLevel(Enum):
    """Logging level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SerialConfig:
    """Serial port configuration."""
    device: Optional[str] = None
    baud_rate: int = 115200
    timeout_ms: int = 2000
    retry_interval_ms: int = 200


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: LogLevel = LogLevel.WARNING
    file_path: Optional[str] = None
    json_format: bool = False
    max_file_size_mb: float = 1
    backup_count: int = 3


@dataclass(frozen=True)
class Config:
    """Complete configuration object with all sections."""
    serial: SerialConfig = field(default_factory=SerialConfig)
    prompt: str = "^[[:alnum:]]*[#$>] $"
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation with nested sections.
        """
        def convert_value(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, dict):
                return {k: convert_value(v) for k, v in obj.items()}
            return obj

        return convert_value(asdict(self))


@dataclass(frozen=True)
class SessionConfig:
    """Resolved inputs of one command/response cycle.

    Built once at startup and passed explicitly to every component.

    Attributes:
        device: Serial device path
        prompt: Compiled prompt matcher (bytes pattern)
        timeout_ms: Idle timeout and per-phase budget; <= 0 disables both
        force: Open the device even when another process holds it
        debug_level: Diagnostic verbosity (0 = quiet)
        baud_rate: Line speed applied when opening
        retry_interval_ms: Back-off between busy open attempts
    """

    device: str
    prompt: Pattern[bytes]
    timeout_ms: int = 2000
    force: bool = False
    debug_level: int = 0
    baud_rate: int = 115200
    retry_interval_ms: int = 200

    def __post_init__(self):
        if self.debug_level < 0:
            raise ValueError("debug_level must be >= 0")

    @property
    def idle_timeout(self) -> Optional[float]:
        """Idle read timeout in seconds, or None to wait forever."""
        if self.timeout_ms <= 0:
            return None
        return self.timeout_ms / 1000.0
