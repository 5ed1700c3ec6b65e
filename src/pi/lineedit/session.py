"""Suspendable line-editing session.

A session is started with a prompt, then fed input one chunk at a time
until it reports an outcome::

    session = EditSession(config, terminal)
    session.start("> ")
    result = CONTINUE
    while not result.finished:
        result = session.step()
    session.stop()

``feed`` never blocks, so it can equally be called from an event loop
whenever input is available. Escape sequences split across calls are
resumed on the next call.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable

from pi.lineedit.buffer import EditBuffer
from pi.lineedit.completion import CompletionCycle
from pi.lineedit.config import EditorConfig
from pi.lineedit.errors import SessionStateError
from pi.lineedit.keys import (
    BACKSPACE,
    CR,
    CTRL_H,
    ENTER,
    ESC,
    TAB,
    Command,
    EscapeDecoder,
    command_for_byte,
)
from pi.lineedit.render import Refresh, Renderer, RenderState
from pi.lineedit.terminal import BELL, CLEAR_SCREEN, DEFAULT_COLUMNS, Terminal, get_column_count

logger = logging.getLogger(__name__)

_DUMB_ERASE = b"\x08 "


class SessionState(enum.Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    FINISHED = "finished"


class Outcome(enum.Enum):
    CONTINUE = "continue"
    DONE = "done"
    CANCELLED = "cancelled"
    END_OF_INPUT = "end_of_input"
    ERROR = "error"


@dataclass(frozen=True)
class FeedResult:
    """Result of feeding input to a session.

    ``line`` is set only for ``DONE`` and ``error`` only for ``ERROR``.
    """

    outcome: Outcome
    line: str | None = None
    error: OSError | None = None

    @property
    def finished(self) -> bool:
        return self.outcome is not Outcome.CONTINUE


CONTINUE = FeedResult(Outcome.CONTINUE)


class EditSession:
    """One run of interactive editing, from prompt to outcome."""

    def __init__(
        self,
        config: EditorConfig,
        terminal: Terminal,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.terminal = terminal
        self.state = SessionState.NOT_STARTED
        self.buffer = EditBuffer(config.max_line_length)
        self.renderer = Renderer(config, RenderState())
        self.unconsumed = b""

        self._clock = clock
        self._last_arrival: float | None = None
        self._decoder = EscapeDecoder()
        self._completion = CompletionCycle()
        self._dumb = config.dumb

    # -- public API -----------------------------------------------------------

    @property
    def line(self) -> str:
        return self.buffer.text()

    @property
    def cursor(self) -> int:
        return self.buffer.cursor

    @property
    def in_completion(self) -> bool:
        return self._completion.active

    def start(self, prompt: str) -> None:
        """Reset the buffer, measure the terminal and show *prompt*."""
        if self.state is SessionState.ACTIVE:
            raise SessionStateError("session already active")

        self.buffer = EditBuffer(self.config.max_line_length)
        self.unconsumed = b""
        self._last_arrival = None
        self._decoder.reset()
        self._completion.reset()
        self._dumb = self.config.dumb

        with self.terminal.output_lock:
            # Piped input would be eaten as a cursor report
            if self._dumb or not self.terminal.isatty():
                columns = DEFAULT_COLUMNS
            else:
                columns = get_column_count(self.terminal)
            self.renderer = Renderer(self.config, RenderState.for_prompt(prompt, columns))
            if not self._dumb:
                self.config.history.begin_edit()
            self.state = SessionState.ACTIVE
            try:
                self._write(prompt.encode("utf-8"))
            except OSError:
                self._finish(Outcome.ERROR)
                raise
        logger.debug("session started: columns=%d dumb=%s", columns, self._dumb)

    def feed(self, data: bytes) -> FeedResult:
        """Process *data* and report whether editing has finished.

        Bytes following the one that finished the session are left in
        :attr:`unconsumed`.
        """
        self._require_active()
        with self.terminal.output_lock:
            for i, byte in enumerate(data):
                try:
                    result = self._step(byte)
                except OSError as e:
                    result = self._finish(Outcome.ERROR, error=e)
                if result.finished:
                    self.unconsumed = bytes(data[i + 1 :])
                    return result
        return CONTINUE

    def step(self, size: int = 1) -> FeedResult:
        """Read up to *size* bytes from the terminal and feed them.

        A read returning nothing means the input was closed.
        """
        self._require_active()
        try:
            data = self.terminal.read(size)
        except BlockingIOError:
            return CONTINUE
        except OSError as e:
            with self.terminal.output_lock:
                return self._finish(Outcome.ERROR, error=e)
        if not data:
            with self.terminal.output_lock:
                return self._finish(Outcome.END_OF_INPUT)
        return self.feed(data)

    def stop(self) -> None:
        """Move to a fresh line. The edited text stays available."""
        if self.state is SessionState.NOT_STARTED:
            raise SessionStateError("session was never started")
        with self.terminal.output_lock:
            if self.state is SessionState.ACTIVE:
                self._finish(Outcome.CANCELLED)
            self._write(b"\n")

    def hide(self) -> None:
        """Erase the line so other output can be printed."""
        self._require_active()
        if self._dumb:
            return
        with self.terminal.output_lock:
            self._refresh(Refresh.CLEAN)

    def show(self) -> None:
        """Redraw the line after :meth:`hide`."""
        self._require_active()
        if self._dumb:
            return
        with self.terminal.output_lock:
            callback = self.config.completion_callback
            if self._completion.active and callback is not None:
                preview = self._completion.preview(list(callback(self.line)))
                if preview is not None:
                    self._refresh_view(preview.encode("utf-8"), Refresh.WRITE)
                    return
            self._refresh(Refresh.WRITE)

    # -- input handling -------------------------------------------------------

    def _step(self, byte: int) -> FeedResult:
        now = self._clock()
        gap = None if self._last_arrival is None else now - self._last_arrival
        self._last_arrival = now

        if self._dumb:
            return self._dumb_step(byte)

        if self._decoder.pending:
            command = self._decoder.push(byte)
            if command is not None:
                return self._dispatch(command, byte)
            return CONTINUE

        if self._is_paste(gap, byte):
            self._insert_pasted(byte)
            return CONTINUE

        if (self._completion.active or byte == TAB) and self.config.completion_callback is not None:
            if self._complete(byte):
                return CONTINUE

        if byte == ESC:
            self._decoder.start()
            return CONTINUE
        if byte == CR:
            return self._dispatch(Command.SUBMIT, byte)
        return self._dispatch(command_for_byte(byte), byte)

    def _is_paste(self, gap: float | None, byte: int) -> bool:
        delay = self.config.paste_key_delay
        return (
            delay > 0
            and gap is not None
            and gap < delay
            and byte not in (ENTER, CR)
            and self.buffer.at_end
        )

    def _dispatch(self, command: Command, byte: int) -> FeedResult:
        buf = self.buffer

        if command is Command.SUBMIT:
            return self._submit()

        if command is Command.CANCEL:
            return self._finish(Outcome.CANCELLED)

        if command is Command.DELETE_OR_EOF:
            if len(buf) == 0:
                return self._finish(Outcome.END_OF_INPUT)
            if buf.delete_forward():
                self._refresh()
            return CONTINUE

        if command is Command.INSERT:
            self._insert(byte)
            return CONTINUE

        if command is Command.HISTORY_PREV or command is Command.HISTORY_NEXT:
            self._recall(older=command is Command.HISTORY_PREV)
            return CONTINUE

        if command is Command.CLEAR_SCREEN:
            self._write(CLEAR_SCREEN)
            self._refresh()
            return CONTINUE

        if command is Command.KILL_LINE:
            buf.kill_line()
            changed = True
        elif command is Command.KILL_TO_END:
            buf.kill_to_end()
            changed = True
        elif command is Command.DELETE_PREV_WORD:
            buf.delete_prev_word()
            changed = True
        elif command is Command.BACKSPACE:
            changed = buf.backspace()
        elif command is Command.DELETE_FORWARD:
            changed = buf.delete_forward()
        elif command is Command.TRANSPOSE:
            changed = buf.transpose()
        elif command is Command.CURSOR_LEFT:
            changed = buf.move_left()
        elif command is Command.CURSOR_RIGHT:
            changed = buf.move_right()
        elif command is Command.MOVE_HOME:
            changed = buf.move_home()
        elif command is Command.MOVE_END:
            changed = buf.move_end()
        else:
            changed = False

        if changed:
            self._refresh()
        return CONTINUE

    def _insert(self, byte: int) -> None:
        buf = self.buffer
        appending = buf.at_end
        if not buf.insert(byte):
            return
        if appending and self.renderer.fast_path_ok(len(buf)):
            self._write(b"*" if self.config.mask else bytes([byte]))
        else:
            self._refresh()

    def _insert_pasted(self, byte: int) -> None:
        if self.buffer.insert(byte):
            self._write(b"*" if self.config.mask else bytes([byte]))

    def _recall(self, *, older: bool) -> None:
        entry = self.config.history.recall(self.line, older=older)
        if entry is None:
            return
        self.buffer.replace(entry.encode("utf-8"))
        self._refresh()

    def _complete(self, byte: int) -> bool:
        """Offer *byte* to completion. Returns ``True`` if it was consumed."""
        callback = self.config.completion_callback
        assert callback is not None
        candidates = list(callback(self.line))
        step = self._completion.handle(byte, candidates)

        if step.bell:
            self._write(BELL)
        if step.accept is not None:
            self.buffer.replace(step.accept.encode("utf-8"))
        if candidates:
            if step.preview is not None:
                self._refresh_view(step.preview.encode("utf-8"))
            else:
                self._refresh()
        return step.consumed

    def _submit(self) -> FeedResult:
        line = self.line
        self.config.history.end_edit()
        if self.config.multi_line and self.buffer.move_end():
            self._refresh()
        if self.config.hints_callback is not None:
            # Leave the line on screen as typed, without the hint
            self._refresh(hints=False)
        return self._finish(Outcome.DONE, line=line)

    def _dumb_step(self, byte: int) -> FeedResult:
        buf = self.buffer
        if byte in (ENTER, CR):
            return self._finish(Outcome.DONE, line=buf.text())
        if 0x1C <= byte <= 0x1F:
            return CONTINUE
        if byte in (BACKSPACE, CTRL_H):
            buf.backspace()
            self._write(_DUMB_ERASE)
        else:
            buf.insert(byte)
        self._write(bytes([byte]))
        if buf.full:
            return self._finish(Outcome.DONE, line=buf.text())
        return CONTINUE

    # -- helpers ----------------------------------------------------------------

    def _finish(
        self,
        outcome: Outcome,
        *,
        line: str | None = None,
        error: OSError | None = None,
    ) -> FeedResult:
        self.config.history.end_edit()
        self._decoder.reset()
        self._completion.reset()
        self.state = SessionState.FINISHED
        if error is not None:
            logger.warning("edit session failed: %s", error)
        else:
            logger.debug("edit session finished: %s", outcome.value)
        return FeedResult(outcome, line=line, error=error)

    def _require_active(self) -> None:
        if self.state is not SessionState.ACTIVE:
            raise SessionStateError(f"session is {self.state.value}, not active")

    def _refresh(self, flags: Refresh = Refresh.ALL, *, hints: bool = True) -> None:
        self.renderer.refresh(self.buffer.data, self.buffer.cursor, self._write, flags, hints=hints)

    def _refresh_view(self, data: bytes, flags: Refresh = Refresh.ALL) -> None:
        data = data[: self.buffer.capacity]
        self.renderer.refresh(data, len(data), self._write, flags)

    def _write(self, data: bytes) -> None:
        self.terminal.write(data)
