import io

import pytest

from llakit.components import (
    BoxComponent,
    BoxStyle,
    HelpFormatter,
    KeyValue,
    List,
    LlaDialoguerTheme,
    Spinner,
)
from llakit.text import strip_ansi, text_width


def test_spinner_draws_status_and_stops():
    stream = io.StringIO()
    spinner = Spinner(stream=stream, enabled=True)
    spinner.set_status("Analyzing directory...")
    assert "Analyzing directory..." in strip_ansi(stream.getvalue())
    spinner.finish()
    assert spinner.running is False
    assert spinner.message == "Analyzing directory..."


def test_spinner_finish_with_message_leaves_line():
    stream = io.StringIO()
    spinner = Spinner(stream=stream, enabled=True)
    spinner.finish_with_message("done")
    assert strip_ansi(stream.getvalue()).endswith("done\n")
    spinner.finish()
    assert strip_ansi(stream.getvalue()).endswith("done\n")


def test_spinner_disabled_writes_nothing():
    stream = io.StringIO()
    with Spinner(stream=stream, enabled=False) as spinner:
        spinner.set_status("Clearing cache...")
    assert stream.getvalue() == ""
    assert spinner.running is False


def test_help_formatter_contains_commands_and_examples():
    help = HelpFormatter("Plugin")
    help.add_section("Actions").add_command("help", "Show help information", ["lla help"])
    text = strip_ansi(help.render({}))
    assert text.startswith("Plugin\n\nActions\n\n")
    assert "  help\n    Show help information\n" in text
    assert "    Examples:\n      • lla help\n" in text


def test_help_formatter_ignores_command_without_section():
    help = HelpFormatter("T")
    help.add_command("x", "y", [])
    assert strip_ansi(help.render({})) == "T\n\n"


def test_help_formatter_uses_colors():
    help = HelpFormatter("T").add_section("S")
    plain = help.render({"success": "nope", "info": "nope"})
    coloured = help.render({"success": "bright_green"})
    assert strip_ansi(coloured) == strip_ansi(plain)
    assert "\x1b[92m" in coloured


def test_key_value_pads_key():
    rendered = KeyValue("Files", "3", key_width=12).render()
    assert rendered.index("3") == 13
    assert rendered.startswith("Files ")


def test_key_value_color_does_not_change_layout():
    plain = KeyValue("Files", "3", key_width=12).render()
    coloured = KeyValue("Files", "3", key_color="bright_cyan", value_color="red", key_width=12).render()
    assert strip_ansi(coloured) == plain
    assert coloured != plain


def test_list_render():
    lst = List()
    lst.add_item("a").add_item("b")
    assert lst.render() == "┌─\n│ a\n│ b\n└─\n"


def test_box_lines_have_equal_width():
    box = BoxComponent("hello\nhi there", style=BoxStyle.DOUBLE, padding=2).render()
    lines = box.split("\n")
    assert lines[0] == ""
    body = [line for line in lines[1:] if line]
    widths = {text_width(line) for line in body}
    assert len(widths) == 1
    assert body[0][0] == "╔" and body[-1][-1] == "╝"
    assert len(body) == 2 + 2 * 2


def test_box_fixed_width_and_title():
    box = BoxComponent("x", width=20, title="Title").render()
    top = box.split("\n")[1]
    assert "Title" in top
    bottom = box.split("\n")[-2]
    assert text_width(bottom) == 22


def test_box_ignores_escape_codes_in_width():
    plain = BoxComponent("abc").render()
    coloured = BoxComponent("\x1b[31mabc\x1b[0m").render()
    assert strip_ansi(coloured) == plain


@pytest.mark.parametrize("style", list(BoxStyle))
def test_box_styles_use_their_corners(style):
    box = BoxComponent("z", style=style).render()
    assert box.split("\n")[1].startswith(style.chars.top_left)
    assert box.split("\n")[-2].endswith(style.chars.bottom_right)


def test_theme_confirm_prompt():
    theme = LlaDialoguerTheme.default()
    assert strip_ansi(theme.format_confirm_prompt("Go?", True)) == "⟩ Go? [Y/n] "
    assert "[y/N]" in strip_ansi(theme.format_confirm_prompt("Go?", False))
    assert "[y/n]" in strip_ansi(theme.format_confirm_prompt("Go?", None))


def test_theme_select_items():
    theme = LlaDialoguerTheme.default().with_padding(2)
    inactive = strip_ansi(theme.format_select_prompt_item("x", False))
    assert inactive == "  " + "   " + "x"
    active = strip_ansi(theme.format_select_prompt_item("x", True))
    assert active.startswith("  ➜")
    assert active.endswith("x")


def test_theme_multi_select_symbols():
    theme = LlaDialoguerTheme.default().with_symbols({"checked": "*"})
    checked = strip_ansi(theme.format_multi_select_prompt_item("a", True, False))
    unchecked = strip_ansi(theme.format_multi_select_prompt_item("a", False, False))
    assert "*·" in checked
    assert "◯" in unchecked


def test_theme_prompt_and_error():
    theme = LlaDialoguerTheme.default()
    assert strip_ansi(theme.format_prompt("Pick")).startswith("⟩ Pick ")
    assert strip_ansi(theme.format_error("bad")).startswith("✘ ")
    assert strip_ansi(theme.format_error("bad")).endswith("bad")