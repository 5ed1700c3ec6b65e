"""pi-lineedit: Line editing for terminals and serial consoles."""

# Output assembly
from pi.lineedit.append_buffer import AppendBuffer

# Editing primitives
from pi.lineedit.buffer import EditBuffer

# Completion and hints
from pi.lineedit.completion import (
    CompletionCallback,
    CompletionCycle,
    FreeHintsCallback,
    Hint,
    HintsCallback,
    hint_style,
)

# Configuration
from pi.lineedit.config import EditorConfig

# Front-ends
from pi.lineedit.editor import LineEditor

# Errors
from pi.lineedit.errors import (
    HistoryFileError,
    HistoryFileNotFound,
    InvalidArgument,
    LineEditError,
    SessionStateError,
)

# History
from pi.lineedit.history import History

# Key decoding
from pi.lineedit.keys import Command, EscapeDecoder, command_for_byte

# Rendering
from pi.lineedit.render import Refresh, Renderer, RenderState

# Sessions
from pi.lineedit.session import EditSession, FeedResult, Outcome, SessionState

# Terminal
from pi.lineedit.terminal import (
    ProbeResult,
    ProcessTerminal,
    Terminal,
    get_column_count,
    probe_capability,
)

# Utilities
from pi.lineedit.utils import strip_ansi, visible_width

__all__ = [
    # Output assembly
    "AppendBuffer",
    # Editing primitives
    "EditBuffer",
    # Completion and hints
    "CompletionCallback",
    "CompletionCycle",
    "FreeHintsCallback",
    "Hint",
    "HintsCallback",
    "hint_style",
    # Configuration
    "EditorConfig",
    # Front-ends
    "LineEditor",
    # Errors
    "HistoryFileError",
    "HistoryFileNotFound",
    "InvalidArgument",
    "LineEditError",
    "SessionStateError",
    # History
    "History",
    # Key decoding
    "Command",
    "EscapeDecoder",
    "command_for_byte",
    # Rendering
    "Refresh",
    "RenderState",
    "Renderer",
    # Sessions
    "EditSession",
    "FeedResult",
    "Outcome",
    "SessionState",
    # Terminal
    "ProbeResult",
    "ProcessTerminal",
    "Terminal",
    "get_column_count",
    "probe_capability",
    # Utilities
    "strip_ansi",
    "visible_width",
]
