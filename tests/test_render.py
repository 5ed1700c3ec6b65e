"""Tests for pi.lineedit.render -- single-line and multi-line refresh."""

from __future__ import annotations

from pi.lineedit.completion import Hint
from pi.lineedit.config import EditorConfig
from pi.lineedit.render import Refresh, Renderer, RenderState


def make_renderer(columns: int = 80, prompt: str = "> ", **config_kwargs) -> Renderer:
    return Renderer(EditorConfig(**config_kwargs), RenderState.for_prompt(prompt, columns))


def render(renderer: Renderer, data: bytes, pos: int, flags: Refresh = Refresh.ALL, **kwargs) -> bytes:
    return renderer.build(data, pos, flags, **kwargs).getvalue()


def visible_part(output: bytes, prompt: bytes = b"> ") -> bytes:
    """Text drawn between the prompt and the erase-to-end-of-line."""
    start = output.index(prompt) + len(prompt)
    return output[start : output.index(b"\x1b[0K")]


# ---------------------------------------------------------------------------
# Single line
# ---------------------------------------------------------------------------


class TestSingleLine:
    def test_simple_line(self) -> None:
        out = render(make_renderer(), b"hello", 5)
        assert out == b"\r> hello\x1b[0K\r\x1b[7C"

    def test_cursor_in_middle(self) -> None:
        out = render(make_renderer(), b"hello", 1)
        assert out.endswith(b"\r\x1b[3C")

    def test_cursor_at_column_zero_emits_bare_return(self) -> None:
        out = render(make_renderer(prompt=""), b"hello", 0)
        assert out == b"\rhello\x1b[0K\r"

    def test_narrow_terminal_scrolls_to_cursor(self) -> None:
        out = render(make_renderer(columns=10), b"abcdefghi", 9)
        shown = visible_part(out)
        assert 2 + len(shown) <= 10
        assert out == b"\r> cdefghi\x1b[0K\r\x1b[9C"

    def test_narrow_terminal_cuts_right_side(self) -> None:
        out = render(make_renderer(columns=10), b"abcdefghijklmnopqrst", 0)
        assert visible_part(out) == b"abcdefgh"
        assert out.endswith(b"\r\x1b[2C")

    def test_mask_mode(self) -> None:
        out = render(make_renderer(mask=True), b"ab", 2)
        assert out == b"\r> **\x1b[0K\r\x1b[4C"

    def test_clean_only(self) -> None:
        out = render(make_renderer(), b"hello", 5, Refresh.CLEAN)
        assert out == b"\r\x1b[0K"

    def test_write_only(self) -> None:
        out = render(make_renderer(), b"hi", 2, Refresh.WRITE)
        assert out == b"\r> hi\x1b[0K\r\x1b[4C"

    def test_colored_prompt_measured_without_escapes(self) -> None:
        renderer = make_renderer(prompt="\x1b[32m> \x1b[0m")
        assert renderer.state.prompt_width == 2
        out = render(renderer, b"hi", 2)
        assert out.endswith(b"\r\x1b[4C")


class TestHints:
    def test_hint_follows_text(self) -> None:
        renderer = make_renderer(hints_callback=lambda s: Hint(" World", color=35) if s == "hello" else None)
        out = render(renderer, b"hello", 5)
        assert out == b"\r> hello\x1b[0;35m World\x1b[0m\x1b[0K\r\x1b[7C"

    def test_hints_suppressed(self) -> None:
        renderer = make_renderer(hints_callback=lambda s: Hint(" World"))
        out = render(renderer, b"hello", 5, hints=False)
        assert b"World" not in out


class TestFastPath:
    def test_allowed_when_line_fits(self) -> None:
        assert make_renderer(columns=10).fast_path_ok(7)

    def test_refused_at_right_edge(self) -> None:
        assert not make_renderer(columns=10).fast_path_ok(8)

    def test_refused_in_multi_line(self) -> None:
        assert not make_renderer(multi_line=True).fast_path_ok(1)

    def test_refused_with_hints(self) -> None:
        assert not make_renderer(hints_callback=lambda s: None).fast_path_ok(1)


# ---------------------------------------------------------------------------
# Multi line
# ---------------------------------------------------------------------------


class TestMultiLine:
    def test_first_draw_of_wrapped_line(self) -> None:
        renderer = make_renderer(columns=10, multi_line=True)
        out = render(renderer, b"abcdefghijkl", 12)
        assert out == b"\r\x1b[0K> abcdefghijkl\r\x1b[4C"
        assert renderer.state.old_rows == 2
        assert renderer.state.old_pos == 12

    def test_redraw_erases_previous_rows(self) -> None:
        renderer = make_renderer(columns=10, multi_line=True)
        render(renderer, b"abcdefghijkl", 12)
        out = render(renderer, b"abcdefghijkl", 0)
        assert out == (
            b"\r\x1b[0K\x1b[1A"  # erase second row, move up
            b"\r\x1b[0K"
            b"> abcdefghijkl"
            b"\x1b[1A\r\x1b[2C"  # back to the cursor on the first row
        )

    def test_redraw_from_first_row_moves_down_first(self) -> None:
        renderer = make_renderer(columns=10, multi_line=True)
        render(renderer, b"abcdefghijkl", 0)
        out = render(renderer, b"abcdefghijkl", 0)
        assert out.startswith(b"\x1b[1B\r\x1b[0K\x1b[1A")

    def test_cursor_at_exact_row_end_opens_new_row(self) -> None:
        renderer = make_renderer(columns=10, multi_line=True)
        out = render(renderer, b"abcdefgh", 8)
        assert out == b"\r\x1b[0K> abcdefgh\n\r\r"
        assert renderer.state.old_rows == 2

    def test_clean_only(self) -> None:
        renderer = make_renderer(columns=10, multi_line=True)
        render(renderer, b"abcdefghijkl", 12)
        out = render(renderer, b"abcdefghijkl", 12, Refresh.CLEAN)
        assert out == b"\r\x1b[0K\x1b[1A\r\x1b[0K"
