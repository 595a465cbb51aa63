"""Platform-specific terminal control used while opening the device.

The opener talks to the kernel through three operations: dropping the
privilege that bypasses exclusive terminals, marking the terminal
exclusive, and switching it to raw mode. They live behind the
TransportControl interface so the opener can be exercised without a
real terminal.
"""

from abc import ABC, abstractmethod
import ctypes
import fcntl
import logging
import os
import sys
import termios

logger = logging.getLogger(__name__)

# linux/capability.h
_LINUX_CAPABILITY_VERSION_3 = 0x20080522
CAP_SYS_ADMIN = 21


class _CapHeader(ctypes.Structure):
    _fields_ = [("version", ctypes.c_uint32), ("pid", ctypes.c_int)]


class _CapData(ctypes.Structure):
    _fields_ = [
        ("effective", ctypes.c_uint32),
        ("permitted", ctypes.c_uint32),
        ("inheritable", ctypes.c_uint32),
    ]


class TransportControl(ABC):
    """Kernel-level controls applied to an opened terminal descriptor."""

    @abstractmethod
    def drop_elevated_privilege(self) -> bool:
        """Give up the capability that overrides exclusive terminals.

        Returns:
            True if a privilege was actually dropped
        """

    @abstractmethod
    def set_exclusive(self, fd: int) -> None:
        """Reject further opens of the terminal by other processes."""

    @abstractmethod
    def set_raw_mode(self, fd: int) -> None:
        """Disable line editing, echo and signal characters; 8-bit clean."""

    @abstractmethod
    def flush(self, fd: int) -> None:
        """Discard pending input and output."""


class PosixTransportControl(TransportControl):
    """TransportControl for POSIX terminals.

    Capability handling is Linux specific; on other systems
    drop_elevated_privilege() does nothing.
    """

    def drop_elevated_privilege(self) -> bool:
        if not sys.platform.startswith('linux'):
            return False

        libc = ctypes.CDLL(None, use_errno=True)
        header = _CapHeader(_LINUX_CAPABILITY_VERSION_3, 0)
        data = (_CapData * 2)()

        if libc.capget(ctypes.byref(header), data) != 0:
            err = ctypes.get_errno()
            logger.warning("capget failed: %s", os.strerror(err))
            return False

        mask = 1 << CAP_SYS_ADMIN
        if not data[0].effective & mask:
            return False

        data[0].effective &= ~mask
        if libc.capset(ctypes.byref(header), data) != 0:
            err = ctypes.get_errno()
            logger.warning("capset failed: %s", os.strerror(err))
            return False

        logger.debug("Dropped CAP_SYS_ADMIN from effective set")
        return True

    def set_exclusive(self, fd: int) -> None:
        fcntl.ioctl(fd, termios.TIOCEXCL)

    def set_raw_mode(self, fd: int) -> None:
        # Same flag set as cfmakeraw(3)
        attr = termios.tcgetattr(fd)
        attr[0] &= ~(termios.IGNBRK | termios.BRKINT | termios.PARMRK |
                     termios.ISTRIP | termios.INLCR | termios.IGNCR |
                     termios.ICRNL | termios.IXON)
        attr[1] &= ~termios.OPOST
        attr[2] &= ~(termios.CSIZE | termios.PARENB)
        attr[2] |= termios.CS8
        attr[3] &= ~(termios.ECHO | termios.ECHONL | termios.ICANON |
                     termios.ISIG | termios.IEXTEN)
        attr[6][termios.VMIN] = 1
        attr[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSANOW, attr)

    def flush(self, fd: int) -> None:
        termios.tcflush(fd, termios.TCIOFLUSH)
