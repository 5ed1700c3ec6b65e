"""Keyboard input decoding.

Maps single control bytes to editing commands and decodes the short
``ESC [`` / ``ESC O`` sequences terminals send for arrows, Home, End and
Delete. Decoding is a small resumable state machine so a sequence split
across two reads (non-blocking input) is still recognised.
"""

from __future__ import annotations

import enum

# ---------------------------------------------------------------------------
# Control bytes
# ---------------------------------------------------------------------------

CTRL_A = 0x01
CTRL_B = 0x02
CTRL_C = 0x03
CTRL_D = 0x04
CTRL_E = 0x05
CTRL_F = 0x06
CTRL_H = 0x08
TAB = 0x09
ENTER = 0x0A
CTRL_K = 0x0B
CTRL_L = 0x0C
CR = 0x0D
CTRL_N = 0x0E
CTRL_P = 0x10
CTRL_T = 0x14
CTRL_U = 0x15
CTRL_W = 0x17
ESC = 0x1B
BACKSPACE = 0x7F


class Command(enum.Enum):
    """Editing actions produced from raw input."""

    INSERT = "insert"
    SUBMIT = "submit"
    CANCEL = "cancel"
    DELETE_OR_EOF = "delete_or_eof"
    BACKSPACE = "backspace"
    DELETE_FORWARD = "delete_forward"
    TRANSPOSE = "transpose"
    CURSOR_LEFT = "cursor_left"
    CURSOR_RIGHT = "cursor_right"
    HISTORY_PREV = "history_prev"
    HISTORY_NEXT = "history_next"
    MOVE_HOME = "move_home"
    MOVE_END = "move_end"
    CLEAR_SCREEN = "clear_screen"
    KILL_LINE = "kill_line"
    KILL_TO_END = "kill_to_end"
    DELETE_PREV_WORD = "delete_prev_word"


CONTROL_COMMANDS: dict[int, Command] = {
    ENTER: Command.SUBMIT,
    CTRL_C: Command.CANCEL,
    CTRL_D: Command.DELETE_OR_EOF,
    BACKSPACE: Command.BACKSPACE,
    CTRL_H: Command.BACKSPACE,
    CTRL_T: Command.TRANSPOSE,
    CTRL_B: Command.CURSOR_LEFT,
    CTRL_F: Command.CURSOR_RIGHT,
    CTRL_P: Command.HISTORY_PREV,
    CTRL_N: Command.HISTORY_NEXT,
    CTRL_A: Command.MOVE_HOME,
    CTRL_E: Command.MOVE_END,
    CTRL_L: Command.CLEAR_SCREEN,
    CTRL_U: Command.KILL_LINE,
    CTRL_K: Command.KILL_TO_END,
    CTRL_W: Command.DELETE_PREV_WORD,
}


def command_for_byte(byte: int) -> Command:
    """Classify a single non-ESC byte. Anything unmapped is inserted."""
    return CONTROL_COMMANDS.get(byte, Command.INSERT)


# ESC [ <letter>
CSI_COMMANDS: dict[int, Command] = {
    ord("A"): Command.HISTORY_PREV,
    ord("B"): Command.HISTORY_NEXT,
    ord("C"): Command.CURSOR_RIGHT,
    ord("D"): Command.CURSOR_LEFT,
    ord("H"): Command.MOVE_HOME,
    ord("F"): Command.MOVE_END,
}

# ESC O <letter>
SS3_COMMANDS: dict[int, Command] = {
    ord("H"): Command.MOVE_HOME,
    ord("F"): Command.MOVE_END,
}

# ESC [ <digit> ~
TILDE_COMMANDS: dict[int, Command] = {
    ord("3"): Command.DELETE_FORWARD,
}


# ---------------------------------------------------------------------------
# Escape-sequence state machine
# ---------------------------------------------------------------------------


class DecoderState(enum.Enum):
    START = "start"
    SAW_ESC = "saw_esc"
    SAW_BRACKET = "saw_bracket"
    SAW_O = "saw_o"
    SAW_OTHER = "saw_other"
    SAW_DIGIT = "saw_digit"


class EscapeDecoder:
    """Consumes the bytes that follow an ESC.

    Exactly two bytes are read after ESC, plus a third when the first two
    are ``[`` and a digit. Sequences that do not map to a command are
    dropped silently; terminals send plenty of those.
    """

    def __init__(self) -> None:
        self.state = DecoderState.START
        self._digit = 0

    @property
    def pending(self) -> bool:
        """True while in the middle of a sequence."""
        return self.state is not DecoderState.START

    def start(self) -> None:
        """Called when an ESC byte is read."""
        self.state = DecoderState.SAW_ESC

    def reset(self) -> None:
        self.state = DecoderState.START
        self._digit = 0

    def push(self, byte: int) -> Command | None:
        """Feed the next byte. Returns a command once a sequence completes."""
        state = self.state

        if state is DecoderState.SAW_ESC:
            if byte == ord("["):
                self.state = DecoderState.SAW_BRACKET
            elif byte == ord("O"):
                self.state = DecoderState.SAW_O
            else:
                self.state = DecoderState.SAW_OTHER
            return None

        if state is DecoderState.SAW_BRACKET:
            if ord("0") <= byte <= ord("9"):
                self._digit = byte
                self.state = DecoderState.SAW_DIGIT
                return None
            self.reset()
            return CSI_COMMANDS.get(byte)

        if state is DecoderState.SAW_DIGIT:
            digit = self._digit
            self.reset()
            if byte == ord("~"):
                return TILDE_COMMANDS.get(digit)
            return None

        if state is DecoderState.SAW_O:
            self.reset()
            return SS3_COMMANDS.get(byte)

        # SAW_OTHER (second byte of an unknown sequence) or no ESC seen
        self.reset()
        return None
