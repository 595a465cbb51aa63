"""Absolute time bounds for blocking session phases."""

from dataclasses import dataclass
from typing import Callable, Optional
import time


Clock = Callable[[], float]


@dataclass(frozen=True)
class Deadline:
    """Absolute point in time after which a phase has timed out.

    A deadline built from a non-positive timeout is infinite and never
    expires. Expiry is strict: a clock reading equal to the bound is
    not a timeout.

    Example:
        >>> deadline = Deadline.start(2000)
        >>> deadline.expired()
        False
    """

    expires_at: Optional[float]
    clock: Clock = time.monotonic

    @classmethod
    def start(cls, timeout_ms: int, clock: Clock = time.monotonic) -> 'Deadline':
        """Create a deadline timeout_ms from now.

        Args:
            timeout_ms: Phase budget in milliseconds (<= 0 means infinite)
            clock: Monotonic clock returning seconds

        Returns:
            New Deadline instance
        """
        if timeout_ms <= 0:
            return cls(None, clock)
        return cls(clock() + timeout_ms / 1000.0, clock)

    def expired(self) -> bool:
        """Check whether the current time is strictly past the deadline."""
        if self.expires_at is None:
            return False
        return self.clock() > self.expires_at
