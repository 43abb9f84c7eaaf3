"""
ANSI color helpers.

colorize() renders rich style strings ("bold cyan", "red on white", ...)
to raw ANSI escape codes so the result can go through any plain stream.
strip_color() removes them again.
"""

import functools as _functools
import re as _re

import rich.style as _rich_style

# SGR sequences, optionally wrapped in the \x01 / \x02 markers readline
# uses to exclude non-printing characters from prompt width.
_COLOR_PATTERN = _re.compile(r"\x01?\x1b\[[0-9;]*m\x02?")


@_functools.lru_cache(maxsize=64)
def _parse_style(style: str) -> _rich_style.Style:
    return _rich_style.Style.parse(style)


def colorize(text: str, style: str) -> str:
    """
    Wrap text in the ANSI codes for a rich style string.

    Example:
        >>> colorize("key", "bold cyan")
        '\\x1b[1;36mkey\\x1b[0m'

    Raises:
        rich.errors.StyleSyntaxError: If style cannot be parsed.
    """
    return _parse_style(style).render(text)


def strip_color(text: str) -> str:
    """Remove ANSI color sequences from text."""
    return _COLOR_PATTERN.sub("", text)
