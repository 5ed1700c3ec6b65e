"""Screen refresh for the edited line.

Two strategies exist. Single-line mode keeps the prompt and buffer on
one row and scrolls the buffer horizontally so the cursor stays visible.
Multi-line mode lets the buffer wrap over several rows and has to erase
every row drawn by the previous refresh before drawing again.

Each refresh is built in an :class:`AppendBuffer` and written with a
single call.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable

from pi.lineedit.append_buffer import AppendBuffer
from pi.lineedit.completion import render_hint
from pi.lineedit.config import EditorConfig
from pi.lineedit.utils import visible_width

_ERASE_TO_EOL = "\x1b[0K"
_MOVE_UP_FMT = "\x1b[{}A"
_MOVE_DOWN_FMT = "\x1b[{}B"
_COLUMN_FMT = "\r\x1b[{}C"


class Refresh(enum.Flag):
    """Which half of a refresh to perform."""

    CLEAN = enum.auto()  # erase what the previous refresh drew
    WRITE = enum.auto()  # draw the current state
    ALL = CLEAN | WRITE


@dataclass
class RenderState:
    """Screen bookkeeping carried from one refresh to the next."""

    prompt: str = ""
    prompt_width: int = 0
    columns: int = 80
    old_pos: int = 0  # cursor offset at the previous multi-line refresh
    old_rows: int = 0  # rows used by the previous multi-line refresh

    @classmethod
    def for_prompt(cls, prompt: str, columns: int) -> RenderState:
        return cls(prompt=prompt, prompt_width=visible_width(prompt), columns=max(columns, 1))


def _cursor_column(col: int) -> str:
    return _COLUMN_FMT.format(col) if col else "\r"


class Renderer:
    """Turns buffer bytes and a cursor offset into terminal output."""

    def __init__(self, config: EditorConfig, state: RenderState) -> None:
        self.config = config
        self.state = state

    def fast_path_ok(self, length: int) -> bool:
        """Whether appending a byte at the end may be echoed without a refresh.

        *length* is the buffer length after the append.
        """
        return (
            not self.config.multi_line
            and self.config.hints_callback is None
            and self.state.prompt_width + length < self.state.columns
        )

    def refresh(
        self,
        data: bytes,
        pos: int,
        write: Callable[[bytes], object],
        flags: Refresh = Refresh.ALL,
        *,
        hints: bool = True,
    ) -> None:
        ab = self.build(data, pos, flags, hints=hints)
        ab.flush_to(write)

    def build(self, data: bytes, pos: int, flags: Refresh = Refresh.ALL, *, hints: bool = True) -> AppendBuffer:
        if self.config.multi_line:
            return self._multi_line(data, pos, flags, hints)
        return self._single_line(data, pos, flags, hints)

    # -- helpers ----------------------------------------------------------------

    def _append_text(self, ab: AppendBuffer, data: bytes) -> None:
        if self.config.mask:
            ab.append(b"*" * len(data))
        else:
            ab.append(data)

    def _append_hint(self, ab: AppendBuffer, data: bytes, hints: bool) -> None:
        if not hints:
            return
        render_hint(
            ab,
            data.decode("utf-8", errors="replace"),
            self.state.prompt_width + len(data),
            self.state.columns,
            self.config.hints_callback,
            self.config.free_hints_callback,
        )

    # -- single line ------------------------------------------------------------

    def _single_line(self, data: bytes, pos: int, flags: Refresh, hints: bool) -> AppendBuffer:
        plen = self.state.prompt_width
        cols = self.state.columns

        # Scroll so the cursor fits, then cut what overflows on the right
        start = min(max(plen + pos - cols + 1, 0), pos)
        visible = data[start:]
        pos -= start
        if plen + len(visible) > cols:
            visible = visible[: max(cols - plen, 0)]

        ab = AppendBuffer()
        ab.append("\r")
        if flags & Refresh.WRITE:
            ab.append(self.state.prompt)
            self._append_text(ab, visible)
            self._append_hint(ab, data, hints)
        ab.append(_ERASE_TO_EOL)
        if flags & Refresh.WRITE:
            ab.append(_cursor_column(pos + plen))
        return ab

    # -- multi line -------------------------------------------------------------

    def _multi_line(self, data: bytes, pos: int, flags: Refresh, hints: bool) -> AppendBuffer:
        state = self.state
        plen = state.prompt_width
        cols = state.columns
        length = len(data)

        rows = (plen + length + cols - 1) // cols
        cursor_row = (plen + state.old_pos + cols) // cols
        old_rows = state.old_rows
        state.old_rows = rows

        ab = AppendBuffer()

        if flags & Refresh.CLEAN:
            # Go to the last row drawn before, then erase upwards
            if old_rows - cursor_row > 0:
                ab.append(_MOVE_DOWN_FMT.format(old_rows - cursor_row))
            for _ in range(old_rows - 1):
                ab.append("\r" + _ERASE_TO_EOL + _MOVE_UP_FMT.format(1))

        ab.append("\r" + _ERASE_TO_EOL)

        if flags & Refresh.WRITE:
            ab.append(state.prompt)
            self._append_text(ab, data)
            self._append_hint(ab, data, hints)

            # Cursor at the very end of a full row: start the next row now
            if pos and pos == length and (pos + plen) % cols == 0:
                ab.append("\n\r")
                rows += 1
                if rows > state.old_rows:
                    state.old_rows = rows

            new_cursor_row = (plen + pos + cols) // cols
            if rows - new_cursor_row > 0:
                ab.append(_MOVE_UP_FMT.format(rows - new_cursor_row))
            ab.append(_cursor_column((plen + pos) % cols))

        state.old_pos = pos
        return ab
