"""Plugin that estimates the complexity of source files."""

from __future__ import annotations

import logging
import math
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w

from llakit.actions import PluginError
from llakit.components import BoxComponent, BoxStyle, HelpFormatter, KeyValue, List
from llakit.config import ConfigError, PluginConfig
from llakit.entry import DecoratedEntry
from llakit.plugin import Plugin
from llakit.text import TextBlock

log = logging.getLogger(__name__)

PLUGIN_NAME = "code_complexity"
STATE_FILE_NAME = "code_complexity.toml"

_THRESHOLDS_USAGE = "set-thresholds <low> <medium> <high> <very-high>"
_EXAMPLE_PREFIX = f"lla plugin --name {PLUGIN_NAME} --action"
_THRESHOLDS_EXAMPLE = f"{_EXAMPLE_PREFIX} set-thresholds --args 10 20 30 40"
_REPORT_EXAMPLE = f"{_EXAMPLE_PREFIX} show-report"
_HELP_EXAMPLE = f"{_EXAMPLE_PREFIX} help"


def _require(data: dict[str, Any], keys: tuple[str, ...], what: str) -> None:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a table")
    for key in keys:
        if key not in data:
            raise ValueError(f"missing field `{key}` in {what}")


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected a non-negative integer, got {value!r}")
    return value


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"expected a list of strings, got {value!r}")
    return [str(v) for v in value]


@dataclass
class LanguageRules:
    """Patterns that identify constructs in one language."""

    extensions: list[str] = field(default_factory=lambda: ["rs"])
    function_patterns: list[str] = field(default_factory=lambda: ["fn "])
    class_patterns: list[str] = field(default_factory=lambda: ["struct ", "impl ", "trait "])
    branch_patterns: list[str] = field(default_factory=lambda: ["if ", "match ", "else"])
    loop_patterns: list[str] = field(default_factory=lambda: ["for ", "while ", "loop"])
    comment_patterns: list[str] = field(default_factory=lambda: ["//", "/*"])
    max_line_length: int = 100
    max_function_lines: int = 50

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LanguageRules:
        """Build rules; every field must be present."""
        names = tuple(f.name for f in fields(cls))
        _require(data, names, "language rules")
        return cls(
            extensions=_strings(data["extensions"]),
            function_patterns=_strings(data["function_patterns"]),
            class_patterns=_strings(data["class_patterns"]),
            branch_patterns=_strings(data["branch_patterns"]),
            loop_patterns=_strings(data["loop_patterns"]),
            comment_patterns=_strings(data["comment_patterns"]),
            max_line_length=_count(data["max_line_length"]),
            max_function_lines=_count(data["max_function_lines"]),
        )


@dataclass
class ComplexityThresholds:
    """Score limits for the low, medium and high colour bands."""

    low: float = 10.0
    medium: float = 20.0
    high: float = 30.0
    very_high: float = 40.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComplexityThresholds:
        """Build thresholds; every field must be present."""
        _require(data, ("low", "medium", "high", "very_high"), "thresholds")
        return cls(
            low=float(data["low"]),
            medium=float(data["medium"]),
            high=float(data["high"]),
            very_high=float(data["very_high"]),
        )


_METRIC_COUNTS = (
    "lines",
    "functions",
    "classes",
    "branches",
    "loops",
    "comments",
    "long_lines",
    "cyclomatic_complexity",
    "cognitive_complexity",
)


@dataclass
class ComplexityMetrics:
    """Counts and scores measured for one file."""

    lines: int = 0
    functions: int = 0
    classes: int = 0
    branches: int = 0
    loops: int = 0
    comments: int = 0
    long_lines: int = 0
    long_functions: list[tuple[str, int]] = field(default_factory=list)
    cyclomatic_complexity: int = 0
    cognitive_complexity: int = 0
    maintainability_index: float = 100.0

    def to_toml(self) -> str:
        """Serialise the metrics as a TOML document."""
        return tomli_w.dumps(
            {
                "lines": self.lines,
                "functions": self.functions,
                "classes": self.classes,
                "branches": self.branches,
                "loops": self.loops,
                "comments": self.comments,
                "long_lines": self.long_lines,
                "long_functions": [[name, count] for name, count in self.long_functions],
                "cyclomatic_complexity": self.cyclomatic_complexity,
                "cognitive_complexity": self.cognitive_complexity,
                "maintainability_index": float(self.maintainability_index),
            }
        )

    @classmethod
    def from_toml(cls, text: str) -> ComplexityMetrics:
        """Parse metrics written by :meth:`to_toml`; raise ValueError if incomplete."""
        data = tomllib.loads(text)
        _require(data, (*_METRIC_COUNTS, "long_functions", "maintainability_index"), "metrics")
        long_functions = []
        for item in data["long_functions"]:
            if not isinstance(item, list) or len(item) != 2:
                raise ValueError(f"invalid long function entry: {item!r}")
            long_functions.append((str(item[0]), _count(item[1])))
        counts = {name: _count(data[name]) for name in _METRIC_COUNTS}
        return cls(
            **counts,
            long_functions=long_functions,
            maintainability_index=float(data["maintainability_index"]),
        )


def _default_languages() -> dict[str, LanguageRules]:
    return {"Rust": LanguageRules()}


def _default_colors() -> dict[str, str]:
    return {
        "low": "bright_green",
        "medium": "bright_yellow",
        "high": "bright_red",
        "very_high": "red",
        "success": "bright_green",
        "info": "bright_blue",
        "name": "bright_yellow",
    }


@dataclass
class ComplexityConfig(PluginConfig):
    """Language rules, score thresholds and colours."""

    languages: dict[str, LanguageRules] = field(default_factory=_default_languages)
    thresholds: ComplexityThresholds = field(default_factory=ComplexityThresholds)
    colors: dict[str, str] = field(default_factory=_default_colors)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComplexityConfig:
        """Build a configuration, using defaults for missing keys."""
        languages = (
            {str(name): LanguageRules.from_dict(rules) for name, rules in dict(data["languages"]).items()}
            if "languages" in data
            else _default_languages()
        )
        thresholds = (
            ComplexityThresholds.from_dict(data["thresholds"])
            if "thresholds" in data
            else ComplexityThresholds()
        )
        colors = (
            {str(k): str(v) for k, v in dict(data["colors"]).items()}
            if "colors" in data
            else _default_colors()
        )
        return cls(languages=languages, thresholds=thresholds, colors=colors)


def _default_state_path() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        base = Path(xdg)
    else:
        try:
            base = Path.home() / ".config"
        except RuntimeError:
            base = Path(".")
    return base / "lla" / STATE_FILE_NAME


def _ln(value: float) -> float:
    return math.log(value) if value > 0 else -math.inf


def _split_lines(data: bytes) -> list[bytes]:
    if not data:
        return []
    parts = data.split(b"\n")
    if parts[-1] == b"":
        parts.pop()
    return [p[:-1] if p.endswith(b"\r") else p for p in parts]


def _extension(path: Path | str) -> str | None:
    return DecoratedEntry(path=Path(path)).extension()


class ComplexityAnalyzer:
    """Measures files and keeps the results for a report."""

    def __init__(self, config_path: Path | str | None = None) -> None:
        self.config_path = Path(config_path) if config_path is not None else _default_state_path()
        self.config = self._load_config()
        self.stats: dict[str, list[tuple[Path, ComplexityMetrics]]] = {}

    def _load_config(self) -> ComplexityConfig:
        try:
            data = tomllib.loads(self.config_path.read_text(encoding="utf-8"))
            return ComplexityConfig.from_dict(data)
        except (OSError, UnicodeDecodeError, ValueError, TypeError, KeyError):
            return ComplexityConfig()

    def save_config(self) -> None:
        """Write the configuration, ignoring failures."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass
        try:
            self.config_path.write_text(tomli_w.dumps(self.config.to_dict()), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            log.debug("Failed to write %s: %s", self.config_path, exc)

    def set_thresholds(self, low: float, medium: float, high: float, very_high: float) -> None:
        """Replace the score thresholds and save them."""
        self.config.thresholds = ComplexityThresholds(
            low=low, medium=medium, high=high, very_high=very_high
        )
        self.save_config()

    def language_for(self, path: Path | str) -> str | None:
        """Name of the first language whose extensions include the path's extension."""
        extension = _extension(path)
        if extension is None:
            return None
        return next(
            (name for name, rules in self.config.languages.items() if extension in rules.extensions),
            None,
        )

    def analyze_file(self, path: Path | str) -> ComplexityMetrics | None:
        """Measure a file, or return None if its language is unknown or it cannot be read."""
        path = Path(path)
        language = self.language_for(path)
        if language is None:
            return None
        rules = self.config.languages[language]
        try:
            data = path.read_bytes()
        except OSError:
            return None

        metrics = ComplexityMetrics()
        current_function = ""
        current_function_lines = 0
        nesting = 0

        for raw in _split_lines(data):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError:
                break
            metrics.lines += 1
            trimmed = line.strip()
            if not trimmed:
                continue

            if len(raw) > rules.max_line_length:
                metrics.long_lines += 1

            if any(trimmed.startswith(p) for p in rules.comment_patterns):
                metrics.comments += 1
                continue

            if any(p in trimmed for p in rules.function_patterns):
                if current_function and current_function_lines > rules.max_function_lines:
                    metrics.long_functions.append((current_function, current_function_lines))
                current_function = trimmed
                current_function_lines = 0
                metrics.functions += 1
            current_function_lines += 1

            if any(p in trimmed for p in rules.class_patterns):
                metrics.classes += 1

            if any(p in trimmed for p in rules.branch_patterns):
                metrics.branches += 1
                metrics.cyclomatic_complexity += 1
                metrics.cognitive_complexity += nesting + 1

            if any(p in trimmed for p in rules.loop_patterns):
                metrics.loops += 1
                metrics.cyclomatic_complexity += 1
                metrics.cognitive_complexity += nesting + 1

            if trimmed.endswith("{"):
                nesting += 1
            elif trimmed.startswith("}"):
                nesting = max(nesting - 1, 0)

        volume = _ln(metrics.lines * (metrics.functions + metrics.classes))
        index = (
            171.0
            - 5.2 * volume
            - 0.23 * metrics.cyclomatic_complexity
            - 16.2 * _ln(metrics.lines)
        )
        metrics.maintainability_index = max(index, 0.0) * 100.0 / 171.0
        return metrics

    def record(self, language: str, path: Path | str, metrics: ComplexityMetrics) -> None:
        """Keep a file's metrics for the report."""
        self.stats.setdefault(language, []).append((Path(path), metrics))

    def complexity_color(self, metrics: ComplexityMetrics) -> str:
        """Colour name for the file's weighted complexity score."""
        score = (
            metrics.cyclomatic_complexity * 0.4
            + metrics.cognitive_complexity * 0.3
            + (100.0 - metrics.maintainability_index) * 0.3
        )
        thresholds = self.config.thresholds
        colors = self.config.colors
        if score < thresholds.low:
            return colors.get("low", "bright_green")
        if score < thresholds.medium:
            return colors.get("medium", "bright_yellow")
        if score < thresholds.high:
            return colors.get("high", "bright_red")
        return colors.get("very_high", "red")

    def format_metrics(self, metrics: ComplexityMetrics, detailed: bool) -> str:
        """A boxed summary, with every count and suggestions when ``detailed``."""
        items = List()
        items.add_item(
            KeyValue(
                "Complexity",
                f"{metrics.cyclomatic_complexity} (MI: {metrics.maintainability_index:.1f})",
                key_color=self.complexity_color(metrics),
                key_width=15,
            ).render()
        )

        if detailed:
            for label, value in (
                ("Lines", metrics.lines),
                ("Functions", metrics.functions),
                ("Classes", metrics.classes),
                ("Branches", metrics.branches),
                ("Loops", metrics.loops),
                ("Comments", metrics.comments),
                ("Long lines", metrics.long_lines),
            ):
                items.add_item(KeyValue(label, str(value), key_width=15).render())

            if metrics.long_functions:
                items.add_item("Long functions:")
                for name, lines in metrics.long_functions:
                    items.add_item(f"  {name} ({lines} lines)")

            if metrics.maintainability_index < 65.0:
                items.add_item("\nSuggestions:")
                if len(metrics.long_functions) > 2:
                    items.add_item("  - Consider breaking down long functions")
                if metrics.comments < metrics.lines // 10:
                    items.add_item("  - Add more documentation")
                if metrics.cyclomatic_complexity > 10:
                    items.add_item("  - Reduce nested conditionals")
                if metrics.cognitive_complexity > 15:
                    items.add_item("  - Simplify complex logic")

        return BoxComponent(items.render(), style=BoxStyle.MINIMAL, padding=1).render()

    def generate_report(self) -> str:
        """A boxed report of every recorded file, grouped by language."""
        items = List()
        items.add_item(TextBlock("Code Complexity Report", "bright_blue").build())

        for language, files in self.stats.items():
            items.add_item(TextBlock(language, "bright_cyan").build())
            total = ComplexityMetrics()
            for path, metrics in files:
                items.add_item(
                    KeyValue(
                        f"  {path}",
                        f"{metrics.cyclomatic_complexity} (MI: {metrics.maintainability_index:.1f})",
                        key_color=self.complexity_color(metrics),
                    ).render()
                )
                total.lines += metrics.lines
                total.functions += metrics.functions
                total.classes += metrics.classes
                total.branches += metrics.branches
                total.loops += metrics.loops
                total.comments += metrics.comments
                total.cyclomatic_complexity += metrics.cyclomatic_complexity
                total.cognitive_complexity += metrics.cognitive_complexity

            count = len(files)
            if count:
                items.add_item("\nAverage metrics:")
                items.add_item(f"  Lines per file: {total.lines / count:.1f}")
                items.add_item(
                    f"  Cyclomatic complexity: {total.cyclomatic_complexity / count:.1f}"
                )
                items.add_item(
                    f"  Maintainability index: {total.maintainability_index / count:.1f}\n"
                )

        return BoxComponent(items.render(), style=BoxStyle.MINIMAL, padding=1).render()


def _parse_threshold(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(text)
    return float(text)


def _render_help() -> str:
    page = HelpFormatter("Code Complexity Plugin")
    page.add_section("Description").add_command(
        "", "Analyzes code complexity using various metrics", []
    )
    (
        page.add_section("Actions")
        .add_command("set-thresholds", "Set complexity thresholds", [_THRESHOLDS_EXAMPLE])
        .add_command("show-report", "Show detailed complexity report", [_REPORT_EXAMPLE])
        .add_command("help", "Show this help information", [_HELP_EXAMPLE])
    )
    (
        page.add_section("Formats")
        .add_command("default", "Show basic complexity metrics", [])
        .add_command("long", "Show detailed complexity metrics and suggestions", [])
    )
    return BoxComponent(
        page.render(ComplexityConfig().colors), style=BoxStyle.MINIMAL, padding=2
    ).render()


class CodeComplexityEstimatorPlugin(Plugin[ComplexityConfig]):
    """Adds complexity metrics to source files in a listing."""

    version = "0.3.2"
    description = "Analyzes code complexity and provides metrics"
    supported_formats = ("default", "long")

    def __init__(self, config_root: Path | str | None = None) -> None:
        super().__init__(PLUGIN_NAME, ComplexityConfig, config_root)
        state_path = Path(config_root) / STATE_FILE_NAME if config_root is not None else None
        self.analyzer = ComplexityAnalyzer(state_path)
        try:
            self.save_config()
        except ConfigError as exc:
            log.warning("Failed to save config: %s", exc)
        self._register_actions()

    def _register_actions(self) -> None:
        self.actions.define(
            "set-thresholds",
            _THRESHOLDS_USAGE,
            "Set complexity thresholds",
            [_THRESHOLDS_EXAMPLE],
            self._set_thresholds_action,
        )
        self.actions.define(
            "show-report",
            "show-report",
            "Show detailed complexity report",
            [_REPORT_EXAMPLE],
            lambda _args: print(self.analyzer.generate_report()),
        )
        self.actions.define(
            "help",
            "help",
            "Show help information",
            [_HELP_EXAMPLE],
            lambda _args: print(_render_help()),
        )

    def _set_thresholds_action(self, args: list[str]) -> None:
        if len(args) != 4:
            raise PluginError(f"Usage: {_THRESHOLDS_USAGE}")
        try:
            low, medium, high, very_high = (_parse_threshold(a) for a in args)
        except ValueError:
            raise PluginError("Invalid threshold values") from None
        self.analyzer.set_thresholds(low, medium, high, very_high)
        print(TextBlock("Updated complexity thresholds", "bright_green").build())

    def decorate(self, entry: DecoratedEntry) -> DecoratedEntry:
        """Add a ``complexity_metrics`` field to readable source files."""
        if not entry.path.is_file():
            return entry
        metrics = self.analyzer.analyze_file(entry.path)
        if metrics is None:
            return entry
        try:
            entry.custom_fields["complexity_metrics"] = metrics.to_toml()
        except (TypeError, ValueError):
            entry.custom_fields["complexity_metrics"] = ""
        language = self.analyzer.language_for(entry.path)
        if language is not None:
            self.analyzer.record(language, entry.path, metrics)
        return entry

    def format_field(self, entry: DecoratedEntry, format: str) -> str | None:
        """Render stored metrics; the long format shows every count."""
        text = entry.custom_fields.get("complexity_metrics")
        if text is None:
            return None
        try:
            metrics = ComplexityMetrics.from_toml(text)
        except (ValueError, TypeError):
            return None
        return self.analyzer.format_metrics(metrics, format == "long")

    def perform_action(self, action: str, args: list[str]) -> Any:
        """Run one of the plugin's actions."""
        return self.actions.handle(action, args)