"""Terminal I/O for the line editor.

Provides a ``Terminal`` protocol, a ``ProcessTerminal`` backed by raw
file descriptors, and the two probes the editor runs against a terminal:
measuring its width with cursor-position reports and checking that it
answers escape sequences at all.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import os
import re
import sys
import termios
import threading
import time
import tty
from typing import Callable, ContextManager, Iterator, Protocol

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

CURSOR_POSITION_QUERY = b"\x1b[6n"
DEVICE_STATUS_QUERY = b"\x1b[5n"
MOVE_TO_RIGHT_EDGE = b"\x1b[999C"
CLEAR_SCREEN = b"\x1b[H\x1b[2J"
BELL = b"\x07"
_CURSOR_BACK_FMT = "\x1b[{}D"

_CURSOR_REPORT_RE = re.compile(rb"^\x1b\[(\d+);(\d+)$")

DEFAULT_COLUMNS = 80
_REPORT_MAX_LEN = 32


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Byte-level input/output used by the editor."""

    @property
    def output_lock(self) -> threading.RLock: ...

    def read(self, size: int = 1) -> bytes: ...

    def write(self, data: bytes) -> None: ...

    def set_blocking(self, blocking: bool) -> None: ...

    def isatty(self) -> bool: ...

    def raw_mode(self) -> ContextManager[None]: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin/stdout file descriptors.

    Writes go straight to the descriptor (no Python buffering) so that a
    refresh reaches the terminal in one piece. Other threads printing to
    the same terminal should hold :attr:`output_lock` while they write.
    """

    def __init__(self, input_fd: int | None = None, output_fd: int | None = None) -> None:
        self.input_fd = sys.stdin.fileno() if input_fd is None else input_fd
        self.output_fd = sys.stdout.fileno() if output_fd is None else output_fd
        self._output_lock = threading.RLock()
        self._write_log_path: str = os.environ.get("PI_LINEEDIT_WRITE_LOG", "")

    @property
    def output_lock(self) -> threading.RLock:
        return self._output_lock

    def isatty(self) -> bool:
        return os.isatty(self.input_fd)

    # -- I/O ------------------------------------------------------------------

    def read(self, size: int = 1) -> bytes:
        """Read up to *size* bytes. Returns ``b""`` at end of input."""
        return os.read(self.input_fd, size)

    def write(self, data: bytes) -> None:
        """Write all of *data*, and mirror it to the write log if configured."""
        view = memoryview(data)
        while view:
            written = os.write(self.output_fd, view)
            view = view[written:]

        if self._write_log_path:
            try:
                with open(self._write_log_path, "ab") as f:
                    f.write(data)
            except OSError:
                pass

    def set_blocking(self, blocking: bool) -> None:
        os.set_blocking(self.input_fd, blocking)

    # -- raw mode -------------------------------------------------------------

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        """Put the input terminal in raw mode for the duration of the block.

        Output post-processing stays enabled so ``\\n`` still returns the
        carriage. Does nothing if the input is not a TTY.
        """
        if not self.isatty():
            yield
            return

        fd = self.input_fd
        original = termios.tcgetattr(fd)
        if _is_raw_mode(fd):
            yield
            return

        tty.setraw(fd, termios.TCSAFLUSH)
        attrs = termios.tcgetattr(fd)
        attrs[1] |= termios.OPOST  # c_oflag
        termios.tcsetattr(fd, termios.TCSAFLUSH, attrs)
        try:
            yield
        finally:
            termios.tcsetattr(fd, termios.TCSAFLUSH, original)


# ---------------------------------------------------------------------------
# Width probe
# ---------------------------------------------------------------------------


def _read_cursor_column(terminal: Terminal) -> int | None:
    """Ask for the cursor position and return its (1-based) column."""
    terminal.write(CURSOR_POSITION_QUERY)

    report = bytearray()
    while len(report) < _REPORT_MAX_LEN - 1:
        try:
            byte = terminal.read(1)
        except OSError:
            break
        if not byte or byte == b"R":
            break
        # Some serial links inject newlines into the report
        if byte != b"\n":
            report += byte

    match = _CURSOR_REPORT_RE.match(bytes(report))
    if match is None:
        logger.debug("malformed cursor position report: %r", bytes(report))
        return None
    return int(match.group(2))


def get_column_count(terminal: Terminal) -> int:
    """Measure the terminal width, falling back to 80 columns.

    Moves the cursor to the right edge, reads back its column, then moves
    it back where it was.
    """
    with terminal.output_lock:
        try:
            start = _read_cursor_column(terminal)
            if start is None:
                return DEFAULT_COLUMNS

            terminal.write(MOVE_TO_RIGHT_EDGE)
            cols = _read_cursor_column(terminal)
            if cols is None:
                return DEFAULT_COLUMNS

            if cols > start:
                terminal.write(_CURSOR_BACK_FMT.format(cols - start).encode())
            return cols
        except OSError as e:
            logger.debug("column probe failed: %s", e)
            return DEFAULT_COLUMNS


# ---------------------------------------------------------------------------
# Capability probe
# ---------------------------------------------------------------------------


class ProbeResult(enum.Enum):
    OK = "ok"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"
    ERROR = "error"


def probe_capability(
    terminal: Terminal,
    *,
    timeout: float = 0.5,
    interval: float = 0.01,
    sleep: Callable[[float], None] = time.sleep,
) -> ProbeResult:
    """Check whether the terminal answers a device status request.

    A healthy terminal replies ``ESC [0n`` (or ``ESC [3n``). Input is
    switched to non-blocking mode while polling and restored afterwards.
    """
    with terminal.output_lock:
        try:
            terminal.set_blocking(False)
        except OSError as e:
            logger.debug("cannot make input non-blocking: %s", e)
            return ProbeResult.ERROR

        result = ProbeResult.TIMEOUT
        try:
            terminal.write(DEVICE_STATUS_QUERY)
            received = 0
            remaining = timeout
            while remaining > 0 and received < 4:
                sleep(interval)
                remaining -= interval
                try:
                    byte = terminal.read(1)
                except BlockingIOError:
                    continue
                if not byte:
                    continue
                if received == 0 and byte != b"\x1b":
                    result = ProbeResult.MALFORMED
                    break
                received += 1
            if received >= 4:
                result = ProbeResult.OK
        except OSError as e:
            logger.debug("capability probe failed: %s", e)
            result = ProbeResult.ERROR
        finally:
            try:
                terminal.set_blocking(True)
            except OSError as e:
                logger.debug("cannot restore blocking input: %s", e)
                result = ProbeResult.ERROR

    logger.debug("capability probe: %s", result.value)
    return result


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_raw_mode(fd: int) -> bool:
    """Heuristic check for whether the terminal fd is already in raw mode.

    Raw mode is characterised by the absence of ICANON and ECHO in the
    local-mode flags.
    """
    try:
        attrs = termios.tcgetattr(fd)
        lflag = attrs[3]  # c_lflag
        return not bool(lflag & (termios.ICANON | termios.ECHO))
    except termios.error:
        return False
