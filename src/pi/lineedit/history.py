"""Bounded line history with duplicate suppression and file persistence.

While an edit session is running, the newest slot of the history holds
the line being typed so that scrolling back through older entries and
returning does not lose it. That slot is tracked explicitly as a
:class:`_LiveEdit` instead of being an ordinary entry, and it is dropped
again by :meth:`History.end_edit` whatever way the session finishes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterator

from pi.lineedit.errors import HistoryFileError, HistoryFileNotFound, InvalidArgument

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_MAX_LEN = 100


@dataclass
class _LiveEdit:
    slot: int  # index of the in-progress line inside ``_entries``
    offset: int = 0  # how many entries back from the newest we are showing


class History:
    """Chronological list of past lines, oldest first.

    Adding beyond ``max_len`` evicts the oldest entry. Adding a line equal
    to the newest entry is a no-op.
    """

    def __init__(self, max_len: int = DEFAULT_HISTORY_MAX_LEN) -> None:
        if max_len < 0:
            raise InvalidArgument(f"history max length must be >= 0, got {max_len}")
        self._entries: list[str] = []
        self._max_len = max_len
        self._live: _LiveEdit | None = None

    # -- basic container ----------------------------------------------------

    @property
    def max_len(self) -> int:
        return self._max_len

    @property
    def entries(self) -> list[str]:
        """Snapshot of the stored lines, excluding any in-progress line."""
        if self._live is None:
            return list(self._entries)
        return self._entries[: self._live.slot] + self._entries[self._live.slot + 1 :]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def add(self, line: str) -> bool:
        """Append *line*. Returns ``True`` if it was stored."""
        if self._max_len == 0:
            return False
        if self._entries and self._entries[-1] == line:
            return False
        self._append(line)
        return True

    def _append(self, line: str) -> None:
        if len(self._entries) == self._max_len:
            del self._entries[0]
            if self._live is not None:
                self._live.slot -= 1
                if self._live.slot < 0:
                    self._live = None
        self._entries.append(line)

    def set_max_len(self, max_len: int) -> None:
        """Resize the history, keeping only the newest *max_len* lines."""
        if max_len < 1:
            raise InvalidArgument(f"history max length must be >= 1, got {max_len}")
        excess = len(self._entries) - max_len
        if excess > 0:
            del self._entries[:excess]
            if self._live is not None:
                self._live.slot -= excess
                if self._live.slot < 0:
                    self._live = None
        self._max_len = max_len

    def clear(self) -> None:
        self._entries.clear()
        self._live = None

    # -- persistence ----------------------------------------------------------

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write one entry per line, oldest first.

        Entries containing newlines do not survive a save/load round trip.
        """
        try:
            with open(path, "w", encoding="utf-8") as f:
                for line in self.entries:
                    f.write(line + "\n")
        except OSError as e:
            raise HistoryFileError(e.errno, f"cannot save history: {e.strerror}", str(path)) from e
        logger.debug("saved %d history entries to %s", len(self.entries), path)

    def load(self, path: str | os.PathLike[str]) -> None:
        """Add every line of *path* through :meth:`add`.

        Raises :class:`HistoryFileNotFound` when the file does not exist so
        callers can tell a first run apart from a real I/O failure.
        """
        try:
            with open(path, encoding="utf-8", errors="replace", newline="") as f:
                count = 0
                for raw in f:
                    self.add(_strip_line_end(raw))
                    count += 1
        except FileNotFoundError as e:
            raise HistoryFileNotFound(e.errno, "no history file", str(path)) from e
        except OSError as e:
            raise HistoryFileError(e.errno, f"cannot load history: {e.strerror}", str(path)) from e
        logger.debug("loaded %d history lines from %s", count, path)

    # -- live edit slot -----------------------------------------------------

    @property
    def editing(self) -> bool:
        return self._live is not None

    def begin_edit(self) -> None:
        """Reserve the newest slot for the line about to be edited."""
        if self._max_len == 0:
            return
        self._append("")
        self._live = _LiveEdit(slot=len(self._entries) - 1)

    def recall(self, current: str, *, older: bool) -> str | None:
        """Step through history from the live edit slot.

        *current* is stored into the slot being left, so edits made to a
        recalled line persist until the session ends. Returns the entry to
        show, or ``None`` when the step would leave the history (recall
        does not wrap).
        """
        live = self._live
        if live is None or len(self._entries) <= 1:
            return None
        self._entries[live.slot - live.offset] = current
        offset = live.offset + (1 if older else -1)
        if offset < 0 or offset > live.slot:
            return None
        live.offset = offset
        return self._entries[live.slot - offset]

    def end_edit(self) -> None:
        """Drop the in-progress slot."""
        if self._live is None:
            return
        del self._entries[self._live.slot]
        self._live = None


def _strip_line_end(line: str) -> str:
    cut = line.find("\r")
    if cut == -1:
        cut = line.find("\n")
    return line if cut == -1 else line[:cut]
