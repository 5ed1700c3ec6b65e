"""Fixed-capacity edit buffer with a byte cursor.

Every mutator keeps ``0 <= cursor <= len(buffer) <= capacity`` and
reports whether anything changed, which the session uses to skip
needless redraws.
"""

from __future__ import annotations

_SPACE = 0x20


class EditBuffer:
    """Bytes being edited plus the cursor offset into them."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"buffer capacity must be positive, got {capacity}")
        self._data = bytearray()
        self._cursor = 0
        self.capacity = capacity

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def full(self) -> bool:
        return len(self._data) >= self.capacity

    @property
    def at_end(self) -> bool:
        return self._cursor == len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def text(self) -> str:
        return self._data.decode("utf-8", errors="replace")

    # -- whole-buffer operations ----------------------------------------------

    def reset(self) -> None:
        self._data.clear()
        self._cursor = 0

    def replace(self, data: bytes) -> None:
        """Load *data* (truncated to capacity) and put the cursor at the end."""
        self._data[:] = data[: self.capacity]
        self._cursor = len(self._data)

    # -- insertion -------------------------------------------------------------

    def insert(self, byte: int) -> bool:
        """Insert one byte at the cursor. Returns ``False`` if the buffer is full."""
        if self.full:
            return False
        self._data.insert(self._cursor, byte)
        self._cursor += 1
        return True

    # -- cursor motion ---------------------------------------------------------

    def move_left(self) -> bool:
        if self._cursor > 0:
            self._cursor -= 1
            return True
        return False

    def move_right(self) -> bool:
        if self._cursor < len(self._data):
            self._cursor += 1
            return True
        return False

    def move_home(self) -> bool:
        if self._cursor != 0:
            self._cursor = 0
            return True
        return False

    def move_end(self) -> bool:
        if self._cursor != len(self._data):
            self._cursor = len(self._data)
            return True
        return False

    # -- deletion --------------------------------------------------------------

    def delete_forward(self) -> bool:
        """Delete the byte under the cursor (the Delete key)."""
        if self._cursor < len(self._data):
            del self._data[self._cursor]
            return True
        return False

    def backspace(self) -> bool:
        if self._cursor > 0:
            del self._data[self._cursor - 1]
            self._cursor -= 1
            return True
        return False

    def delete_prev_word(self) -> bool:
        """Delete back over trailing spaces, then back to the previous space."""
        end = self._cursor
        start = end
        while start > 0 and self._data[start - 1] == _SPACE:
            start -= 1
        while start > 0 and self._data[start - 1] != _SPACE:
            start -= 1
        del self._data[start:end]
        self._cursor = start
        return start != end

    def kill_line(self) -> None:
        """Clear the whole line."""
        self.reset()

    def kill_to_end(self) -> None:
        del self._data[self._cursor :]

    def transpose(self) -> bool:
        """Swap the bytes around the cursor and advance unless on the last one."""
        pos = self._cursor
        if 0 < pos < len(self._data):
            self._data[pos - 1], self._data[pos] = self._data[pos], self._data[pos - 1]
            if pos != len(self._data) - 1:
                self._cursor += 1
            return True
        return False
