"""Unit tests for LineAssembler.

Covers line splitting, carriage return removal, mid-line prompt
detection and the line length limit.
"""

import re

import pytest

from mcuxeq.config.prompt import compile_prompt
from mcuxeq.core.byte_source import RawByteSource
from mcuxeq.core.exceptions import LineTooLongError, ReadTimeoutError
from mcuxeq.core.line_assembler import LineAssembler, PROMPT_SEEN, LINE_SIZE

PROMPT = re.compile(rb"^> $")


@pytest.fixture
def make_assembler(make_transport):
    def _make(*chunks, prompt=PROMPT, max_line=LINE_SIZE):
        source = RawByteSource(make_transport(*chunks), 2.0)
        return LineAssembler(source, prompt, max_line=max_line)
    return _make


class TestLineSplitting:
    """Test line assembly."""

    def test_single_line(self, make_assembler):
        assembler = make_assembler(b"OK\n")

        assert assembler.next_line() == b"OK\n"

    def test_lines_across_chunks(self, make_assembler):
        """Test lines are assembled regardless of chunk boundaries."""
        assembler = make_assembler(b"fir", b"st\nsec", b"ond\n")

        assert assembler.next_line() == b"first\n"
        assert assembler.next_line() == b"second\n"

    def test_carriage_returns_dropped(self, make_assembler):
        assembler = make_assembler(b"O\rK\r\n")

        assert assembler.next_line() == b"OK\n"

    def test_empty_line(self, make_assembler):
        assembler = make_assembler(b"\r\n")

        assert assembler.next_line() == b"\n"

    def test_incomplete_line_times_out(self, make_assembler):
        """Test a line without newline is never returned."""
        assembler = make_assembler(b"partial")

        with pytest.raises(ReadTimeoutError):
            assembler.next_line()

        assert assembler.partial == b"partial"


class TestPromptDetection:
    """Test prompt detection inside partial lines."""

    def test_prompt_without_newline(self, make_assembler):
        """Test the prompt is seen before any newline arrives."""
        assembler = make_assembler(b"OK\n> ")

        assert assembler.next_line() == b"OK\n"
        assert assembler.next_line() is PROMPT_SEEN
        assert assembler.partial == b""

    def test_prompt_after_carriage_return(self, make_assembler):
        assembler = make_assembler(b"\r> ")

        assert assembler.next_line() is PROMPT_SEEN

    def test_prompt_detected_immediately(self, make_assembler):
        """Test bytes after the prompt stay unread."""
        assembler = make_assembler(b"> trailing")

        assert assembler.next_line() is PROMPT_SEEN
        assert assembler.source.pending == len(b"trailing")

    def test_prompt_checked_on_whole_line(self, make_assembler):
        """Test an anchored prompt does not match in the middle of a line."""
        assembler = make_assembler(b"x> \n")

        assert assembler.next_line() == b"x> \n"

    def test_prompt_matching_newline(self, make_assembler):
        """Test the prompt wins when the completed line also matches it."""
        assembler = make_assembler(b"done\n", prompt=re.compile(rb"done\n"))

        assert assembler.next_line() is PROMPT_SEEN

    def test_compiled_dot_matches_newline(self, make_assembler):
        """Test a compiled prompt ending in a dot is completed by the newline."""
        assembler = make_assembler(b"done\n", prompt=compile_prompt("^done."))

        assert assembler.next_line() is PROMPT_SEEN

    def test_compiled_end_anchor_skips_newline(self, make_assembler):
        """Test an empty line is returned, not taken for an empty prompt."""
        assembler = make_assembler(b"\n", prompt=compile_prompt("^$"))

        assert assembler.next_line() == b"\n"


class TestLineLimit:
    """Test the maximum line length."""

    def test_longest_line_accepted(self, make_assembler):
        """Test a line of LINE_SIZE - 1 bytes with its newline is returned."""
        line = b"x" * (LINE_SIZE - 2) + b"\n"
        assembler = make_assembler(line)

        assert assembler.next_line() == line

    def test_line_too_long(self, make_assembler):
        """Test one more byte fails instead of truncating."""
        assembler = make_assembler(b"x" * (LINE_SIZE - 1) + b"\n")

        with pytest.raises(LineTooLongError) as exc_info:
            assembler.next_line()

        assert exc_info.value.limit == LINE_SIZE

    def test_runaway_output(self, make_assembler):
        assembler = make_assembler(b"y" * 2000)

        with pytest.raises(LineTooLongError):
            assembler.next_line()

    def test_carriage_returns_not_counted(self, make_assembler):
        line = b"x\r" * 10 + b"\n"
        assembler = make_assembler(line, max_line=12)

        assert assembler.next_line() == b"x" * 10 + b"\n"

    def test_limit_resets_per_line(self, make_assembler):
        line = b"x" * 9 + b"\n"
        assembler = make_assembler(line * 3, max_line=11)

        for _ in range(3):
            assert assembler.next_line() == line
