"""Rich Console factory and theme for confline output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_error() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CONFLINE_THEME = Theme(
    {
        "confline.ok": "bold green",
        "confline.error": "bold red",
        "confline.op": "bold cyan",
        "confline.path": "bold",
        "confline.kind": "dim",
        "confline.location": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=CONFLINE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
