"""CLI entry point for pi-lineedit. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import sys

import click

from pi.lineedit.completion import Hint
from pi.lineedit.config import EditorConfig
from pi.lineedit.editor import LineEditor
from pi.lineedit.errors import LineEditError
from pi.lineedit.terminal import ProcessTerminal, Terminal

_QUIT = b"quit"


def _make_terminal() -> Terminal:
    return ProcessTerminal()


def complete(line: str) -> list[str]:
    if line.startswith("h"):
        return ["hello", "hello there"]
    return []


def hint(line: str) -> Hint | None:
    if line.lower() == "hello":
        return Hint(" World", color=35)
    return None


@click.command()
@click.option("--multiline", is_flag=True, help="Let long lines wrap over several rows")
@click.option("--mask", is_flag=True, help="Echo '*' instead of the typed characters")
@click.option("--dumb", is_flag=True, help="Plain echo without cursor control")
@click.option("--probe", is_flag=True, help="Fall back to dumb mode if the terminal does not answer")
@click.option("--history", "history_path", default=None, help="History file to load and save")
@click.option("--keycodes", is_flag=True, help="Print the bytes of each key until 'quit' is typed")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
)
def main(multiline, mask, dumb, probe, history_path, keycodes, log_level):
    """Read lines with editing, completion, hints and history."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = EditorConfig.from_env()
    if multiline:
        config.set_multi_line(True)
    if mask:
        config.enable_mask()
    if dumb:
        config.set_dumb_mode(True)
    config.completion_callback = complete
    config.hints_callback = hint

    editor = LineEditor(config, _make_terminal())

    if keycodes:
        print_key_codes(editor.terminal)
        return

    if probe:
        editor.probe()

    if history_path:
        try:
            editor.load_history(history_path)
        except LineEditError as e:
            click.echo(f"Cannot load history: {e}", err=True)
            sys.exit(1)

    while True:
        try:
            line = editor.readline("hello> ")
        except (EOFError, KeyboardInterrupt):
            break

        if line.startswith("/"):
            _run_command(editor, line)
            continue
        if line:
            click.echo(f"echo: '{line}'")
            config.history.add(line)
            if history_path:
                editor.save_history(history_path)


def _run_command(editor: LineEditor, line: str) -> None:
    name, _, arg = line.partition(" ")
    if name == "/historylen":
        try:
            editor.config.set_history_max_len(int(arg))
        except (ValueError, LineEditError) as e:
            click.echo(f"Invalid history length: {e}", err=True)
    elif name == "/mask":
        editor.config.enable_mask()
    elif name == "/unmask":
        editor.config.disable_mask()
    elif name == "/clear":
        editor.clear_screen()
    else:
        click.echo(f"Unrecognized command: {name}", err=True)


def print_key_codes(terminal: Terminal) -> None:
    """Echo the bytes received for each key press until "quit" is typed."""
    click.echo("Key codes debugging mode.")
    click.echo("Press keys to see scan codes. Type 'quit' at any time to exit.")

    recent = bytearray(len(_QUIT))
    with terminal.raw_mode():
        while True:
            data = terminal.read(1)
            if not data:
                break
            byte = data[0]
            recent = recent[1:] + data
            shown = chr(byte) if 0x20 <= byte < 0x7F else "?"
            terminal.write(f"'{shown}' {byte:02x} ({byte}) (type quit to exit)\n\r".encode())
            if recent == _QUIT:
                break
