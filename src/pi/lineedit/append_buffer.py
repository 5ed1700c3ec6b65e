"""Growable byte buffer that batches one refresh into a single write.

Writing every escape sequence of a refresh separately makes slow
terminals flicker, so the renderer appends everything here and the
session flushes it with one ``write`` call.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class AppendBuffer:
    """Accumulates output bytes until :meth:`flush_to` is called.

    Appends are best effort: if growing the buffer fails with
    :class:`MemoryError` the chunk is dropped and the buffer keeps its
    previous contents, so a refresh degrades instead of aborting an edit.
    """

    def __init__(self) -> None:
        self._data = bytearray()
        self.dropped = 0

    def append(self, data: bytes | str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not data:
            return
        try:
            self._data.extend(data)
        except MemoryError:
            self.dropped += 1
            logger.warning("append buffer: dropped %d bytes", len(data))

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def flush_to(self, write: Callable[[bytes], object]) -> None:
        """Hand all accumulated bytes to *write* in one call, then reset."""
        if self._data:
            data = bytes(self._data)
            self._data = bytearray()
            write(data)

    def __len__(self) -> int:
        return len(self._data)
