"""Session logging module.

Structured diagnostics for a command/response cycle: console and
rotating file output, plus hex dumps of raw device traffic.
"""

from mcuxeq.logging.log_models import LogEntry
from mcuxeq.logging.file_handler import FileHandler
from mcuxeq.logging.hexdump import hexdump_lines
from mcuxeq.logging.session_logger import SessionLogger

__all__ = ['LogEntry', 'FileHandler', 'SessionLogger', 'hexdump_lines']
