"""Blocking and asyncio front-ends over :class:`EditSession`.

``LineEditor.readline`` behaves like ``input()``: it returns the line,
raises ``KeyboardInterrupt`` on Ctrl-C and ``EOFError`` at end of input.
``readline_async`` does the same from inside an event loop, feeding the
session whenever the input descriptor becomes readable.
"""

from __future__ import annotations

import asyncio
import logging

from pi.lineedit.config import EditorConfig
from pi.lineedit.errors import HistoryFileNotFound
from pi.lineedit.session import CONTINUE, EditSession, FeedResult, Outcome
from pi.lineedit.terminal import (
    CLEAR_SCREEN,
    ProbeResult,
    ProcessTerminal,
    Terminal,
    probe_capability,
)

logger = logging.getLogger(__name__)

_READ_CHUNK = 4096


class LineEditor:
    """Reads edited lines from a terminal.

    The config (and the history it owns) is shared by every line read,
    so recalled entries survive between calls.
    """

    def __init__(self, config: EditorConfig | None = None, terminal: Terminal | None = None) -> None:
        self.config = config if config is not None else EditorConfig()
        self.terminal = terminal if terminal is not None else ProcessTerminal()
        # Input read past the end of the previous line
        self._pending = b""

    def session(self) -> EditSession:
        """Create an unstarted session for callers driving input themselves."""
        return EditSession(self.config, self.terminal)

    # -- reading --------------------------------------------------------------

    def readline(self, prompt: str = "") -> str:
        with self.terminal.raw_mode():
            session = self.session()
            session.start(prompt)
            result = self._feed_pending(session)
            while not result.finished:
                result = session.step()
            self._finish(session, result)
        return _unwrap(result)

    async def readline_async(self, prompt: str = "") -> str:
        terminal = self.terminal
        if not isinstance(terminal, ProcessTerminal):
            raise TypeError("readline_async needs a file-descriptor backed terminal")

        loop = asyncio.get_running_loop()
        session = self.session()
        done: asyncio.Future[FeedResult] = loop.create_future()

        def _on_readable() -> None:
            if done.done():
                return
            result = session.step(_READ_CHUNK)
            if result.finished:
                done.set_result(result)

        with terminal.raw_mode():
            session.start(prompt)
            result = self._feed_pending(session)
            if not result.finished:
                loop.add_reader(terminal.input_fd, _on_readable)
                try:
                    result = await done
                except asyncio.CancelledError:
                    session.stop()
                    raise
                finally:
                    loop.remove_reader(terminal.input_fd)
            self._finish(session, result)
        return _unwrap(result)

    def _feed_pending(self, session: EditSession) -> FeedResult:
        pending, self._pending = self._pending, b""
        if not pending:
            return CONTINUE
        return session.feed(pending)

    def _finish(self, session: EditSession, result: FeedResult) -> None:
        self._pending = session.unconsumed
        if result.outcome is not Outcome.ERROR:
            session.stop()

    # -- terminal helpers -----------------------------------------------------

    def probe(self) -> ProbeResult:
        """Check the terminal answers escape sequences; fall back to dumb mode if not."""
        result = probe_capability(self.terminal)
        if result is not ProbeResult.OK:
            logger.info("terminal probe %s, using dumb mode", result.value)
            self.config.set_dumb_mode(True)
        return result

    def clear_screen(self) -> None:
        with self.terminal.output_lock:
            self.terminal.write(CLEAR_SCREEN)

    # -- history --------------------------------------------------------------

    def load_history(self, path: str) -> bool:
        """Load history from *path*. Returns ``False`` if the file does not exist."""
        try:
            self.config.history.load(path)
        except HistoryFileNotFound:
            logger.debug("no history file at %s", path)
            return False
        return True

    def save_history(self, path: str) -> None:
        self.config.history.save(path)


def _unwrap(result: FeedResult) -> str:
    if result.outcome is Outcome.DONE:
        assert result.line is not None
        return result.line
    if result.outcome is Outcome.CANCELLED:
        raise KeyboardInterrupt
    if result.outcome is Outcome.END_OF_INPUT:
        raise EOFError
    assert result.error is not None
    raise result.error
