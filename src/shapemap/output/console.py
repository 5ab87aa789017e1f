"""Rich Console factory and theme for shapemap output.

Creates Console instances that render to a StringIO buffer, so renderers
return plain strings.  In non-TTY environments (tests, pipes) Rich
automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

SHAPEMAP_THEME = Theme(
    {
        "map.ok": "bold green",
        "map.error": "bold red",
        "map.warning": "bold yellow",
        "map.op": "bold cyan",
        "map.pair": "bold",
        "map.prop": "bold blue",
        "map.kind.direct_copy": "green",
        "map.kind.nullable_narrow": "cyan",
        "map.kind.nullable_widen": "cyan",
        "map.kind.nested_object": "magenta",
        "map.kind.nested_collection": "magenta",
        "map.kind.default": "yellow",
        "map.kind.skip": "dim",
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
        theme=SHAPEMAP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Return the Rich style name for a binding kind."""
    return f"map.kind.{kind}"
