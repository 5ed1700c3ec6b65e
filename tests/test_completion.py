"""Tests for pi.lineedit.completion -- cycling and hint rendering."""

from __future__ import annotations

from pi.lineedit.append_buffer import AppendBuffer
from pi.lineedit.completion import CompletionCycle, Hint, hint_style, render_hint
from pi.lineedit.keys import ESC, TAB

CANDIDATES = ["hello", "hello there"]


class TestCompletionCycle:
    def test_first_tab_selects_first_candidate(self) -> None:
        cycle = CompletionCycle()
        step = cycle.handle(TAB, CANDIDATES)
        assert step.consumed
        assert not step.bell
        assert step.preview == "hello"
        assert cycle.active

    def test_tab_cycles_through_original_text(self) -> None:
        cycle = CompletionCycle()
        previews = []
        bells = []
        for _ in range(4):
            step = cycle.handle(TAB, CANDIDATES)
            previews.append(step.preview)
            bells.append(step.bell)
        assert previews == ["hello", "hello there", None, "hello"]
        assert bells == [False, False, True, False]

    def test_no_candidates_rings_bell(self) -> None:
        cycle = CompletionCycle()
        step = cycle.handle(TAB, [])
        assert step.bell
        assert step.consumed
        assert not cycle.active

    def test_other_key_with_no_candidates_is_not_consumed(self) -> None:
        cycle = CompletionCycle()
        cycle.handle(TAB, CANDIDATES)
        step = cycle.handle(ord("x"), [])
        assert not step.consumed
        assert not cycle.active

    def test_escape_restores_original(self) -> None:
        cycle = CompletionCycle()
        cycle.handle(TAB, CANDIDATES)
        step = cycle.handle(ESC, CANDIDATES)
        assert step.consumed
        assert step.accept is None
        assert not cycle.active

    def test_other_key_accepts_selection(self) -> None:
        cycle = CompletionCycle()
        cycle.handle(TAB, CANDIDATES)
        cycle.handle(TAB, CANDIDATES)
        step = cycle.handle(ord(" "), CANDIDATES)
        assert not step.consumed
        assert step.accept == "hello there"
        assert not cycle.active

    def test_other_key_on_original_slot_accepts_nothing(self) -> None:
        cycle = CompletionCycle()
        for _ in range(3):
            cycle.handle(TAB, CANDIDATES)
        step = cycle.handle(ord("x"), CANDIDATES)
        assert step.accept is None


class TestHintStyle:
    def test_plain(self) -> None:
        assert hint_style(Hint(" World")) == ""

    def test_color(self) -> None:
        assert hint_style(Hint(" World", color=35)) == "\x1b[0;35m"

    def test_bold_without_color_uses_white(self) -> None:
        assert hint_style(Hint(" World", bold=True)) == "\x1b[1;37m"

    def test_bold_color(self) -> None:
        assert hint_style(Hint(" World", color=31, bold=True)) == "\x1b[1;31m"


class TestRenderHint:
    def test_styled_hint_is_reset(self) -> None:
        ab = AppendBuffer()
        render_hint(ab, "hello", 12, 80, lambda s: Hint(" World", color=35))
        assert ab.getvalue() == b"\x1b[0;35m World\x1b[0m"

    def test_hint_is_truncated_to_remaining_columns(self) -> None:
        ab = AppendBuffer()
        render_hint(ab, "hello", 17, 20, lambda s: Hint(" World"))
        assert ab.getvalue() == b" Wo"

    def test_no_room_skips_callback(self) -> None:
        calls: list[str] = []

        def hints(text: str) -> Hint | None:
            calls.append(text)
            return Hint("x")

        ab = AppendBuffer()
        render_hint(ab, "hello", 20, 20, hints)
        assert calls == []
        assert len(ab) == 0

    def test_no_hint(self) -> None:
        ab = AppendBuffer()
        render_hint(ab, "bye", 5, 80, lambda s: None)
        assert len(ab) == 0

    def test_free_callback_receives_hint_text(self) -> None:
        freed: list[str] = []
        ab = AppendBuffer()
        render_hint(ab, "hello", 7, 80, lambda s: Hint(" World"), freed.append)
        assert freed == [" World"]
