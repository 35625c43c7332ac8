import pytest

from llakit.syntax import DEFAULT_THEME, CodeHighlighter, get_available_themes
from llakit.text import strip_ansi

PYTHON_CODE = "def add(a, b):\n    return a + b\n"


def test_highlight_keeps_text():
    result = CodeHighlighter.highlight(PYTHON_CODE, "python")
    assert strip_ansi(result) == PYTHON_CODE
    assert "\x1b[" in result


@pytest.mark.parametrize("language", ["py", "rs", "no-such-language"])
def test_highlight_other_tokens_keep_text(language):
    code = "let x = 1;\nprint(x)\n"
    assert strip_ansi(CodeHighlighter.highlight(code, language)) == code


def test_line_numbers():
    result = CodeHighlighter.highlight_with_line_numbers(PYTHON_CODE, "python", 10)
    lines = [strip_ansi(line) for line in result.split("\n") if line]
    assert len(lines) == 2
    assert lines[0].startswith("  10 │ ")
    assert lines[0].endswith("def add(a, b):")
    assert lines[1].endswith("return a + b")
    assert result.endswith("\n")


def test_line_numbers_empty_code():
    assert CodeHighlighter.highlight_with_line_numbers("", "python", 1) == ""


def test_themes_listed():
    themes = get_available_themes()
    assert DEFAULT_THEME in themes
    assert themes == sorted(themes)