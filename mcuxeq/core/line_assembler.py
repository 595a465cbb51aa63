"""Assembly of device output into lines, with mid-line prompt detection.

Interactive shells print their prompt without a trailing newline, so the
prompt pattern is tested against the partial line after every byte
rather than only at line ends.
"""

from typing import Optional, Pattern, TYPE_CHECKING

from mcuxeq.core.exceptions import LineTooLongError

if TYPE_CHECKING:
    from mcuxeq.core.byte_source import RawByteSource

LINE_SIZE = 1024

# Returned by LineAssembler.next_line() when the prompt has been seen
PROMPT_SEEN = None

CR = 0x0d
LF = 0x0a


class LineAssembler:
    """Turns a byte stream into lines and prompt notifications.

    Carriage returns are dropped. Lines keep their terminating newline.
    The line buffer holds at most max_line - 1 bytes (the limit counts a
    terminator); growing past it is an error, never a truncation.

    Example:
        >>> assembler = LineAssembler(source, re.compile(rb"^> $"))
        >>> while (line := assembler.next_line()) is not PROMPT_SEEN:
        ...     sys.stdout.buffer.write(line)
    """

    def __init__(self,
                 source: 'RawByteSource',
                 prompt: Pattern[bytes],
                 max_line: int = LINE_SIZE):
        self.source = source
        self.prompt = prompt
        self.max_line = max_line
        self._line = bytearray()

    @property
    def partial(self) -> bytes:
        """Content of the line currently being assembled."""
        return bytes(self._line)

    def next_line(self) -> Optional[bytes]:
        """Read until a complete line or the prompt.

        Returns:
            The completed line including b"\\n", or PROMPT_SEEN (None) as
            soon as the buffered partial line matches the prompt

        Raises:
            LineTooLongError: Line exceeded max_line
            ReadTimeoutError, EndOfStreamError, SerialPortError: from the source
        """
        while True:
            c = self.source.read_byte()
            if c == CR:
                continue

            if len(self._line) >= self.max_line - 1:
                raise LineTooLongError(self.max_line)

            self._line.append(c)

            if self.prompt.search(self._line):
                self._line.clear()
                return PROMPT_SEEN

            if c == LF:
                line = bytes(self._line)
                self._line.clear()
                return line
