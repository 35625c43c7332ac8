"""Coloured text blocks and size formatting for the terminal."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from wcwidth import wcswidth, wcwidth

_RESET = "\x1b[0m"
_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")

_COLOR_CODES = {
    "black": "30",
    "red": "31",
    "green": "32",
    "yellow": "33",
    "blue": "34",
    "magenta": "35",
    "cyan": "36",
    "white": "37",
    "bright_black": "90",
    "bright_red": "91",
    "bright_green": "92",
    "bright_yellow": "93",
    "bright_blue": "94",
    "bright_magenta": "95",
    "bright_cyan": "96",
    "bright_white": "97",
    "dimmed": "2",
}


class TextStyle(Enum):
    """Text emphasis, valued by its SGR code."""

    NORMAL = ""
    BOLD = "1"
    ITALIC = "3"
    UNDERLINE = "4"


def _wrap(text: str, code: str) -> str:
    start = f"\x1b[{code}m"
    return start + text.replace(_RESET, _RESET + start) + _RESET


def colorize(text: str, color: str) -> str:
    """Colour ``text`` by name; unknown names leave it unchanged."""
    code = _COLOR_CODES.get(color)
    return _wrap(text, code) if code else text


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences."""
    return _ANSI_RE.sub("", text)


def text_width(text: str) -> int:
    """Display width in terminal cells, ignoring escape sequences."""
    plain = strip_ansi(text)
    width = wcswidth(plain)
    if width >= 0:
        return width
    return sum(max(wcwidth(ch), 0) for ch in plain)


@dataclass
class TextBlock:
    """A piece of text with an optional colour and style."""

    content: str
    color: str | None = None
    style: TextStyle = TextStyle.NORMAL

    def build(self) -> str:
        """Render the text with escape sequences."""
        text = self.content
        if self.color is not None:
            text = colorize(text, self.color)
        if self.style is not TextStyle.NORMAL:
            text = _wrap(text, self.style.value)
        return text

    def __str__(self) -> str:
        return self.build()


_UNITS = (("TB", 1024**4), ("GB", 1024**3), ("MB", 1024**2), ("KB", 1024))


def format_size(size: int) -> str:
    """Human-readable byte count with binary units."""
    for unit, factor in _UNITS:
        if size >= factor:
            return f"{size / factor:.2f} {unit}"
    return f"{size} B"