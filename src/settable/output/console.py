"""Buffered Rich consoles and the settable colour theme.

Renderers draw into an in-memory console and hand back a string, so every
output path (rich, quiet, JSON) ends in the same ``click.echo``. Rich drops
colour codes on its own when the real stream is not a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEFAULT_WIDTH = 120

SETTABLE_THEME = Theme(
    {
        # status line
        "settable.ok": "bold green",
        "settable.error": "bold red",
        "settable.warning": "bold yellow",
        "settable.op": "bold cyan",
        # fields
        "settable.key": "dim",
        "settable.id": "bold blue",
        # outcome statuses
        "settable.status.applied": "green",
        "settable.status.skipped": "dim",
        "settable.status.failed": "red",
        # approval column
        "settable.approved": "green",
        "settable.denied": "dim red",
    }
)


def create_console(*, no_color: bool = False, width: int = DEFAULT_WIDTH) -> Console:
    """A themed console writing to a fresh buffer."""
    return Console(
        file=StringIO(),
        theme=SETTABLE_THEME,
        no_color=no_color,
        highlight=False,
        width=width,
    )


def get_output(console: Console) -> str:
    buffer = console.file
    assert isinstance(buffer, StringIO)
    return buffer.getvalue()


def style_for_status(status: str) -> str:
    """Theme style for an outcome status (``applied``, ``skipped``, ``failed``)."""
    return f"settable.status.{status}"
