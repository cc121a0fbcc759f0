"""Rich Console factory and theme for feeld output.

Consoles render into a StringIO buffer so every renderer returns a string;
rich drops color codes when the output is not a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

FEELD_THEME = Theme(
    {
        "feeld.ok": "bold green",
        "feeld.error": "bold red",
        "feeld.warning": "bold yellow",
        "feeld.op": "bold cyan",
        "feeld.key": "dim",
        "feeld.field": "bold blue",
        "feeld.server": "green",
        "feeld.client": "magenta",
        "feeld.kind": "cyan",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """A Console writing to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=FEELD_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Text rendered so far into a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
