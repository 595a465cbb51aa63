"""Shared fixtures: an in-memory serial transport and a controllable clock."""

from collections import deque
from typing import Callable, Iterable, Optional

import pytest

from mcuxeq.config.config_models import SessionConfig
from mcuxeq.config.prompt import compile_prompt
from mcuxeq.core.exceptions import EndOfStreamError

# Scripted chunk meaning "device hung up"
HANGUP = object()


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """Stand-in for SerialTransport replaying scripted device output.

    Each scripted chunk is returned by one read_available() call (split if
    larger than the requested size). on_read(index) runs after every read.
    """

    def __init__(self,
                 chunks: Iterable = (),
                 port: str = "/dev/ttyFAKE0",
                 on_read: Optional[Callable[[int], None]] = None):
        self.port = port
        self.chunks = deque(chunks)
        self.on_read = on_read
        self.written = bytearray()
        self.wait_calls = []
        self.read_sizes = []
        self.reads = 0
        self.close_calls = 0

    def wait_readable(self, timeout):
        self.wait_calls.append(timeout)
        return bool(self.chunks)

    def read_available(self, max_bytes):
        self.read_sizes.append(max_bytes)
        chunk = self.chunks.popleft()
        if chunk is HANGUP:
            raise EndOfStreamError("No data", self.port)

        data, rest = chunk[:max_bytes], chunk[max_bytes:]
        if rest:
            self.chunks.appendleft(rest)

        index = self.reads
        self.reads += 1
        if self.on_read:
            self.on_read(index)
        return data

    def write_all(self, data):
        self.written += data
        return len(data)

    def close(self):
        self.close_calls += 1

    @property
    def closed(self) -> bool:
        return self.close_calls > 0


@pytest.fixture
def fake_clock():
    """Clock frozen at t=0 until advanced."""
    return FakeClock()


@pytest.fixture
def make_transport():
    """Factory building FakeTransport instances from scripted chunks."""
    def _make(*chunks, **kwargs):
        return FakeTransport(chunks, **kwargs)
    return _make


@pytest.fixture
def make_session_config():
    """Factory for SessionConfig with a compiled prompt."""
    def _make(prompt: str = "^> $", **kwargs):
        kwargs.setdefault("device", "/dev/ttyFAKE0")
        return SessionConfig(prompt=compile_prompt(prompt), **kwargs)
    return _make


@pytest.fixture
def hangup():
    """Marker chunk making FakeTransport raise EndOfStreamError."""
    return HANGUP
