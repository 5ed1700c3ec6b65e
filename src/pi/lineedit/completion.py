"""Tab completion cycling and inline hints.

Both features are driven by callbacks supplied by the host program: a
completion callback returning candidate lines for the current buffer,
and a hints callback returning a :class:`Hint` to show after the cursor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from pi.lineedit.append_buffer import AppendBuffer
from pi.lineedit.keys import ESC, TAB

_DEFAULT_BOLD_COLOR = 37
_STYLE_RESET = "\x1b[0m"


@dataclass
class Hint:
    """Suggestion shown to the right of the typed text.

    ``color`` is an SGR foreground code (31-37, 90-97) or -1 for none.
    """

    text: str
    color: int = -1
    bold: bool = False


CompletionCallback = Callable[[str], Sequence[str]]
HintsCallback = Callable[[str], Hint | None]
FreeHintsCallback = Callable[[str], None]


# ---------------------------------------------------------------------------
# Completion cycling
# ---------------------------------------------------------------------------


@dataclass
class CompletionStep:
    """What the session should do after a key was offered to completion."""

    consumed: bool
    bell: bool = False
    accept: str | None = None
    preview: str | None = None


class CompletionCycle:
    """Tracks which candidate is selected while Tab is pressed repeatedly.

    With ``n`` candidates the selection runs ``0 .. n``; index ``n`` stands
    for "show what the user typed" and rings the bell.
    """

    def __init__(self) -> None:
        self.active = False
        self.index = 0

    def reset(self) -> None:
        self.active = False
        self.index = 0

    def handle(self, key: int, candidates: Sequence[str]) -> CompletionStep:
        count = len(candidates)
        if count == 0:
            self.reset()
            return CompletionStep(consumed=key == TAB, bell=True)

        if key == TAB:
            if not self.active:
                self.active = True
                self.index = 0
                bell = False
            else:
                self.index = (self.index + 1) % (count + 1)
                bell = self.index == count
            return CompletionStep(consumed=True, bell=bell, preview=self._selected(candidates))

        if key == ESC:
            self.reset()
            return CompletionStep(consumed=True)

        accept = self._selected(candidates)
        self.reset()
        return CompletionStep(consumed=False, accept=accept)

    def _selected(self, candidates: Sequence[str]) -> str | None:
        if self.active and self.index < len(candidates):
            return candidates[self.index]
        return None

    def preview(self, candidates: Sequence[str]) -> str | None:
        """Candidate to display for the current selection, if any."""
        return self._selected(candidates)


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------


def hint_style(hint: Hint) -> str:
    """SGR prefix for a hint, or ``""`` when it is unstyled."""
    color = hint.color
    if hint.bold and color == -1:
        color = _DEFAULT_BOLD_COLOR
    if color == -1 and not hint.bold:
        return ""
    return f"\x1b[{int(hint.bold)};{color}m"


def render_hint(
    ab: AppendBuffer,
    text: str,
    used_columns: int,
    columns: int,
    hints_callback: HintsCallback | None,
    free_hints_callback: FreeHintsCallback | None = None,
) -> None:
    """Append the hint for *text* if there is room left on the row.

    *used_columns* is the prompt width plus the buffer length.
    """
    if hints_callback is None or used_columns >= columns:
        return
    hint = hints_callback(text)
    if hint is None:
        return

    style = hint_style(hint)
    ab.append(style)
    ab.append(hint.text[: columns - used_columns])
    if style:
        ab.append(_STYLE_RESET)

    if free_hints_callback is not None:
        free_hints_callback(hint.text)
