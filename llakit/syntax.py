"""Terminal syntax highlighting."""

from __future__ import annotations

from pygments import highlight as _pygments_highlight
from pygments.formatters import TerminalTrueColorFormatter
from pygments.lexers import get_lexer_by_name, get_lexer_for_filename
from pygments.lexers.special import TextLexer
from pygments.styles import get_all_styles
from pygments.util import ClassNotFound

DEFAULT_THEME = "monokai"


def _lexer_for(language: str):
    try:
        return get_lexer_by_name(language, stripnl=False)
    except ClassNotFound:
        pass
    try:
        return get_lexer_for_filename(f"snippet.{language}", stripnl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False)


def _lines(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


class CodeHighlighter:
    """Highlights code with 24-bit terminal colours."""

    @staticmethod
    def highlight(code: str, language: str) -> str:
        """Highlight ``code``; unknown languages are treated as plain text."""
        formatter = TerminalTrueColorFormatter(style=DEFAULT_THEME)
        return _pygments_highlight(code, _lexer_for(language), formatter)

    @staticmethod
    def highlight_with_line_numbers(code: str, language: str, start_line: int) -> str:
        """Highlight ``code`` with numbered lines starting at ``start_line``."""
        highlighted = CodeHighlighter.highlight(code, language)
        return "".join(
            f"{number:4} │ {line}\n"
            for number, line in enumerate(_lines(highlighted), start=start_line)
        )


def get_available_themes() -> list[str]:
    """Names of the colour themes that can be used."""
    return sorted(get_all_styles())