"""Exception types raised by the line editor."""

from __future__ import annotations


class LineEditError(Exception):
    """Base class for line editor errors."""


class InvalidArgument(LineEditError, ValueError):
    """A configuration value is out of range. Nothing was changed."""


class HistoryFileError(LineEditError, OSError):
    """A history file could not be opened, read or written."""


class HistoryFileNotFound(HistoryFileError, FileNotFoundError):
    """The history file does not exist yet."""


class SessionStateError(LineEditError, RuntimeError):
    """An edit session was driven out of order (e.g. fed before start)."""
