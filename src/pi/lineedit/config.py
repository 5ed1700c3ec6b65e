"""Editor configuration owned by the host application."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from pi.lineedit.completion import CompletionCallback, FreeHintsCallback, HintsCallback
from pi.lineedit.errors import InvalidArgument
from pi.lineedit.history import History

DEFAULT_MAX_LINE_LENGTH = 4096
MIN_MAX_LINE_LENGTH = 64
DEFAULT_PASTE_KEY_DELAY = 0.030

UNSUPPORTED_TERMS = frozenset({"dumb", "cons25", "emacs"})


@dataclass
class EditorConfig:
    """Mode flags, limits, callbacks and the history shared by sessions.

    ``paste_key_delay`` is the gap (seconds) below which a byte is taken
    to be part of a paste rather than typed; set it to 0 to disable paste
    detection.
    """

    multi_line: bool = False
    mask: bool = False
    dumb: bool = False
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    history: History = field(default_factory=History)
    completion_callback: CompletionCallback | None = None
    hints_callback: HintsCallback | None = None
    free_hints_callback: FreeHintsCallback | None = None
    paste_key_delay: float = DEFAULT_PASTE_KEY_DELAY

    def __post_init__(self) -> None:
        _check_max_line_length(self.max_line_length)
        if self.paste_key_delay < 0:
            raise InvalidArgument(f"paste key delay must be >= 0, got {self.paste_key_delay}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> EditorConfig:
        env = os.environ if environ is None else environ
        term = env.get("TERM", "").lower()
        return cls(
            dumb=term in UNSUPPORTED_TERMS,
            multi_line=env.get("PI_LINEEDIT_MULTILINE", "") == "1",
        )

    # -- mode toggles ---------------------------------------------------------

    def enable_mask(self) -> None:
        self.mask = True

    def disable_mask(self) -> None:
        self.mask = False

    def set_multi_line(self, enabled: bool) -> None:
        self.multi_line = enabled

    def set_dumb_mode(self, enabled: bool) -> None:
        self.dumb = enabled

    @property
    def is_dumb_mode(self) -> bool:
        return self.dumb

    # -- validated limits -----------------------------------------------------

    def set_max_line_length(self, length: int) -> None:
        _check_max_line_length(length)
        self.max_line_length = length

    def set_history_max_len(self, length: int) -> None:
        self.history.set_max_len(length)


def _check_max_line_length(length: int) -> None:
    if length < MIN_MAX_LINE_LENGTH:
        raise InvalidArgument(
            f"max line length must be at least {MIN_MAX_LINE_LENGTH}, got {length}"
        )
