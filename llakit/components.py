"""Terminal widgets: spinner, help text, key/value lines, lists, boxes and prompt styling."""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, TextIO

from llakit.text import TextBlock, TextStyle, colorize, text_width

_TICK_CHARS = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
_TICK_INTERVAL = 0.08
_CLEAR_LINE = "\r\x1b[2K"


def _lines(text: str) -> list[str]:
    """Split like a line iterator: no trailing empty line, CR before LF dropped."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _bold(text: str) -> str:
    return TextBlock(text, style=TextStyle.BOLD).build()


class Spinner:
    """An animated status line drawn on a terminal stream."""

    def __init__(self, stream: TextIO | None = None, enabled: bool | None = None) -> None:
        self._stream = stream if stream is not None else sys.stderr
        if enabled is None:
            isatty = getattr(self._stream, "isatty", None)
            enabled = bool(isatty and isatty())
        self.enabled = enabled
        self.message = ""
        self._frame = 0
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._finished = False
        self._thread: threading.Thread | None = None
        if self.enabled:
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()

    @property
    def running(self) -> bool:
        """Whether the spinner has not been finished yet."""
        return not self._finished

    def _draw(self) -> None:
        if not self.enabled or self._finished:
            return
        frame = colorize(_TICK_CHARS[self._frame % len(_TICK_CHARS)], "green")
        self._stream.write(f"{_CLEAR_LINE}{frame} {self.message}")
        self._stream.flush()

    def _run(self) -> None:
        while not self._stop.wait(_TICK_INTERVAL):
            with self._lock:
                self._frame += 1
                self._draw()

    def _stop_thread(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()

    def set_status(self, status: str) -> None:
        """Change the message shown next to the spinner."""
        with self._lock:
            self.message = str(status)
            self._draw()

    def finish(self) -> None:
        """Stop the spinner and clear its line."""
        self._stop_thread()
        with self._lock:
            if self._finished:
                return
            if self.enabled:
                self._stream.write(_CLEAR_LINE)
                self._stream.flush()
            self._finished = True

    def finish_with_message(self, msg: str) -> None:
        """Stop the spinner, leaving ``msg`` on its line."""
        self._stop_thread()
        with self._lock:
            if self._finished:
                return
            self.message = str(msg)
            self._draw()
            if self.enabled:
                self._stream.write("\n")
                self._stream.flush()
            self._finished = True

    def __enter__(self) -> Spinner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.finish()


class HelpFormatter:
    """Builds a titled help page of sections and commands."""

    def __init__(self, title: str) -> None:
        self.title = str(title)
        self.sections: list[tuple[str, list[tuple[str, str, list[str]]]]] = []

    def add_section(self, title: str) -> HelpFormatter:
        """Start a new section; later commands go into it."""
        self.sections.append((str(title), []))
        return self

    def add_command(self, command: str, description: str, examples: list[str]) -> HelpFormatter:
        """Add a command to the last section; ignored if there is none."""
        if self.sections:
            self.sections[-1][1].append((str(command), str(description), list(examples)))
        return self

    def render(self, colors: dict[str, str]) -> str:
        """Render the page, colouring with the ``success``, ``info`` and ``name`` entries."""
        title_color = colors.get("success", "white")
        section_color = colors.get("info", "white")
        cmd_color = colors.get("name", "white")

        parts = [TextBlock(self.title, title_color, TextStyle.BOLD).build(), "\n\n"]
        for section_title, commands in self.sections:
            parts += [TextBlock(section_title, section_color).build(), "\n\n"]
            for command, description, examples in commands:
                parts += [
                    "  ",
                    TextBlock(command, cmd_color, TextStyle.BOLD).build(),
                    "\n    ",
                    description,
                    "\n",
                ]
                if examples:
                    parts.append("\n    Examples:\n")
                    parts += [f"      • {example}\n" for example in examples]
                parts.append("\n")
        return "".join(parts)


@dataclass
class KeyValue:
    """A key and value on one line, the key optionally padded to a width."""

    key: str
    value: str
    key_color: str | None = None
    value_color: str | None = None
    key_width: int | None = None

    def render(self) -> str:
        key = colorize(self.key, self.key_color) if self.key_color else self.key
        value = colorize(self.value, self.value_color) if self.value_color else self.value
        if self.key_width is not None:
            key += " " * max(self.key_width - text_width(key), 0)
        return f"{key} {value}"


@dataclass
class List:
    """Items drawn with a bracket down their left side."""

    items: list[str] = field(default_factory=list)

    def add_item(self, item: str) -> List:
        self.items.append(str(item))
        return self

    def render(self) -> str:
        body = "".join(f"│ {item}\n" for item in self.items)
        return f"┌─\n{body}└─\n"


class _BoxChars(NamedTuple):
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str
    horizontal: str
    vertical: str
    left_t: str
    right_t: str
    top_t: str
    bottom_t: str
    cross: str


class BoxStyle(Enum):
    """Line-drawing character sets for boxes."""

    MINIMAL = _BoxChars("┌", "┐", "└", "┘", "─", "│", "├", "┤", "┬", "┴", "┼")
    ROUNDED = _BoxChars("╭", "╮", "╰", "╯", "─", "│", "├", "┤", "┬", "┴", "┼")
    DOUBLE = _BoxChars("╔", "╗", "╚", "╝", "═", "║", "╠", "╣", "╦", "╩", "╬")
    HEAVY = _BoxChars("┏", "┓", "┗", "┛", "━", "┃", "┣", "┫", "┳", "┻", "╋")
    DASHED = _BoxChars("┌", "┐", "└", "┘", "┄", "┆", "├", "┤", "┬", "┴", "┼")

    @property
    def chars(self) -> _BoxChars:
        return self.value


@dataclass
class BoxComponent:
    """Text framed by a box, with optional title, padding and fixed width."""

    content: str
    style: BoxStyle = BoxStyle.MINIMAL
    width: int | None = None
    padding: int = 0
    title: str | None = None

    def render(self) -> str:
        c = self.style.chars
        lines = _lines(self.content)
        content_width = max((text_width(line) for line in lines), default=0)
        title_width = text_width(self.title) if self.title is not None else 0
        inner_width = max(content_width, title_width) + self.padding * 2
        total = self.width if self.width is not None else inner_width

        out = ["\n", c.top_left]
        if self.title is not None:
            remaining = max(total - (title_width + 4), 0)
            out.append(f"{c.horizontal} {self.title} {c.horizontal * remaining}")
        else:
            out.append(c.horizontal * total)
        out.append(f"{c.top_right}\n")

        blank = f"{c.vertical}{' ' * total}{c.vertical}\n"
        out.append(blank * self.padding)
        pad = " " * self.padding
        for line in lines:
            fill = " " * max(total - (text_width(line) + self.padding), 0)
            out.append(f"{c.vertical}{pad}{line}{fill}{c.vertical}\n")
        out.append(blank * self.padding)

        out.append(f"{c.bottom_left}{c.horizontal * total}{c.bottom_right}\n")
        return "".join(out)


_DEFAULT_SYMBOLS = {
    "error": "✘",
    "success": "✔",
    "pointer": "➜",
    "unchecked": "◯",
    "checked": "◉",
    "separator": "•",
    "prompt": "⟩",
    "bullet": " ",
    "warning": "⚠",
    "info": "ℹ",
    "gradient_sep": "· · ·",
}

_DEFAULT_COLORS = {
    "success": "bright_green",
    "info": "cyan",
    "error": "red",
    "path": "yellow",
    "prompt": "bright_magenta",
    "highlight": "bright_white",
    "inactive": "bright_black",
    "separator": "bright_black",
    "warning": "yellow",
    "accent": "bright_blue",
    "gradient1": "bright_magenta",
    "gradient2": "magenta",
    "gradient3": "bright_black",
}


class LlaDialoguerTheme:
    """Styling for interactive prompts and selection lists."""

    def __init__(self, colors: dict[str, str]) -> None:
        self.colors = dict(colors)
        self.symbols = dict(_DEFAULT_SYMBOLS)
        self.padding = 1

    @classmethod
    def default(cls) -> LlaDialoguerTheme:
        """The theme with the standard colour set."""
        return cls(_DEFAULT_COLORS)

    def with_symbols(self, symbols: dict[str, str]) -> LlaDialoguerTheme:
        """Override some symbols; returns the theme."""
        self.symbols.update(symbols)
        return self

    def with_padding(self, padding: int) -> LlaDialoguerTheme:
        self.padding = padding
        return self

    def _color(self, key: str) -> str:
        return self.colors.get(key, "white")

    def _symbol(self, key: str) -> str:
        return self.symbols.get(key, "")

    def _paint(self, text: str, key: str) -> str:
        return colorize(text, self._color(key))

    def _gradient_separator(self) -> str:
        return " ".join(self._paint("·", key) for key in ("gradient1", "gradient2", "gradient3"))

    def _select_prefix(self, active: bool) -> str:
        if active:
            return f"{self._paint(self._symbol('pointer'), 'accent')} {self._paint(self._symbol('bullet'), 'prompt')}"
        return "   "

    def format_prompt(self, prompt: str) -> str:
        return (
            f"{self._paint(self._symbol('prompt'), 'accent')} "
            f"{_bold(self._paint(prompt, 'prompt'))} {self._gradient_separator()} "
        )

    def format_error(self, err: str) -> str:
        return (
            f"{self._paint(self._symbol('error'), 'error')} "
            f"{self._gradient_separator()} {_bold(self._paint(err, 'error'))}"
        )

    def format_confirm_prompt(self, prompt: str, default: bool | None) -> str:
        if default is True:
            options = f"[{_bold(self._paint('Y', 'accent'))}{self._paint('/n', 'inactive')}]"
        elif default is False:
            options = f"[{self._paint('y', 'inactive')}{_bold(self._paint('/N', 'accent'))}]"
        else:
            options = f"[{_bold(self._paint('y/n', 'accent'))}]"
        return (
            f"{self._paint(self._symbol('prompt'), 'accent')} "
            f"{_bold(self._paint(prompt, 'prompt'))} {options} "
        )

    def format_select_prompt_item(self, text: str, active: bool) -> str:
        label = _bold(self._paint(text, "highlight")) if active else self._paint(text, "inactive")
        return f"{' ' * self.padding}{self._select_prefix(active)}{label}"

    def format_multi_select_prompt_item(self, text: str, checked: bool, active: bool) -> str:
        if checked:
            check = self._paint(self._symbol("checked"), "success") + self._paint("·", "gradient2")
        else:
            check = self._paint(self._symbol("unchecked"), "inactive") + self._paint(" ", "gradient3")
        label = _bold(self._paint(text, "highlight")) if active else self._paint(text, "inactive")
        return f"{' ' * self.padding}{self._select_prefix(active)}{check} {label}"