"""Hex dump formatting for raw serial chunks."""

from typing import List

BYTES_PER_ROW = 16


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte < 0x7f else '.'


def hexdump_lines(data: bytes) -> List[str]:
    """Format data as classic hex dump rows.

    Each row holds a 4-digit offset, up to 16 hex bytes padded to a
    fixed width, and the printable representation between bars.

    Example:
        >>> hexdump_lines(b"OK\\r\\n")
        ['0000: 4f 4b 0d 0a                                     |OK..            |']
    """
    rows = []
    for off in range(0, len(data), BYTES_PER_ROW):
        chunk = data[off:off + BYTES_PER_ROW]
        hex_part = ''.join(f" {b:02x}" for b in chunk)
        hex_part += "   " * (BYTES_PER_ROW - len(chunk))
        text = ''.join(_printable(b) for b in chunk).ljust(BYTES_PER_ROW)
        rows.append(f"{off:04x}:{hex_part} |{text}|")
    return rows
