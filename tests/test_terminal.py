"""Tests for pi.lineedit.terminal -- width and capability probes."""

from __future__ import annotations

import os

import pytest

from pi.lineedit.terminal import (
    DEFAULT_COLUMNS,
    ProbeResult,
    ProcessTerminal,
    _read_cursor_column,
    get_column_count,
    probe_capability,
)

from .virtual_terminal import VirtualTerminal


def no_sleep(seconds: float) -> None:
    pass


class _BrokenBlockingTerminal(VirtualTerminal):
    def set_blocking(self, blocking: bool) -> None:
        raise OSError("not supported")


class TestColumnCount:
    def test_measures_and_restores_cursor(self) -> None:
        term = VirtualTerminal(columns=120)
        assert get_column_count(term) == 120
        assert term.output == b"\x1b[6n\x1b[999C\x1b[6n\x1b[119D"

    def test_silent_terminal_falls_back(self) -> None:
        term = VirtualTerminal(respond=False)
        assert get_column_count(term) == DEFAULT_COLUMNS
        assert term.output == b"\x1b[6n"

    def test_malformed_report_falls_back(self) -> None:
        term = VirtualTerminal(respond=False, input=b"garbageR")
        assert get_column_count(term) == DEFAULT_COLUMNS

    def test_write_failure_falls_back(self) -> None:
        term = VirtualTerminal()
        term.fail_writes = True
        assert get_column_count(term) == DEFAULT_COLUMNS

    def test_report_with_injected_newline(self) -> None:
        term = VirtualTerminal(respond=False, input=b"\x1b[12;\n34R")
        assert _read_cursor_column(term) == 34


class TestProbeCapability:
    def test_answering_terminal(self) -> None:
        term = VirtualTerminal()
        assert probe_capability(term, sleep=no_sleep) is ProbeResult.OK
        assert term.blocking

    def test_silent_terminal_times_out(self) -> None:
        term = VirtualTerminal(respond=False)
        assert probe_capability(term, sleep=no_sleep) is ProbeResult.TIMEOUT
        assert term.blocking

    def test_reply_not_starting_with_escape(self) -> None:
        term = VirtualTerminal(respond=False, input=b"x0n")
        assert probe_capability(term, sleep=no_sleep) is ProbeResult.MALFORMED

    def test_write_failure(self) -> None:
        term = VirtualTerminal()
        term.fail_writes = True
        assert probe_capability(term, sleep=no_sleep) is ProbeResult.ERROR
        assert term.blocking

    def test_cannot_switch_blocking(self) -> None:
        term = _BrokenBlockingTerminal()
        assert probe_capability(term, sleep=no_sleep) is ProbeResult.ERROR


class TestProcessTerminal:
    @pytest.fixture
    def pipes(self):
        in_r, in_w = os.pipe()
        out_r, out_w = os.pipe()
        yield in_r, in_w, out_r, out_w
        for fd in (in_r, in_w, out_r, out_w):
            os.close(fd)

    def test_read_and_write(self, pipes) -> None:
        in_r, in_w, out_r, out_w = pipes
        term = ProcessTerminal(in_r, out_w)
        os.write(in_w, b"abc")
        assert term.read(2) == b"ab"
        term.write(b"> hi")
        assert os.read(out_r, 16) == b"> hi"

    def test_raw_mode_is_noop_on_pipe(self, pipes) -> None:
        in_r, in_w, out_r, out_w = pipes
        term = ProcessTerminal(in_r, out_w)
        assert not term.isatty()
        with term.raw_mode():
            pass

    def test_nonblocking_read_raises(self, pipes) -> None:
        in_r, in_w, out_r, out_w = pipes
        term = ProcessTerminal(in_r, out_w)
        term.set_blocking(False)
        with pytest.raises(BlockingIOError):
            term.read(1)
        term.set_blocking(True)

    def test_write_log(self, pipes, tmp_path, monkeypatch) -> None:
        in_r, in_w, out_r, out_w = pipes
        log = tmp_path / "writes.log"
        monkeypatch.setenv("PI_LINEEDIT_WRITE_LOG", str(log))
        term = ProcessTerminal(in_r, out_w)
        term.write(b"\r> x\x1b[0K")
        assert log.read_bytes() == b"\r> x\x1b[0K"
