"""Plugin that sorts files into categories by extension and size."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from llakit.actions import PluginError
from llakit.components import BoxComponent, BoxStyle, HelpFormatter, KeyValue, List
from llakit.config import ConfigError, PluginConfig
from llakit.entry import DecoratedEntry
from llakit.plugin import Plugin
from llakit.text import TextBlock

log = logging.getLogger(__name__)

PLUGIN_NAME = "categorizer"

_ADD_CATEGORY_USAGE = "add-category <name> <color> <ext1,ext2,...> [description]"
_ADD_SUBCATEGORY_USAGE = "add-subcategory <category> <subcategory> <ext1,ext2,...>"
_EXAMPLE_PREFIX = f"lla plugin --name {PLUGIN_NAME} --action"
_ADD_CATEGORY_EXAMPLE = (
    f'{_EXAMPLE_PREFIX} add-category --args Documents blue txt,doc,pdf "Text documents"'
)
_ADD_SUBCATEGORY_EXAMPLE = f"{_EXAMPLE_PREFIX} add-subcategory --args Documents Text txt,md"
_LIST_EXAMPLE = f"{_EXAMPLE_PREFIX} list-categories"
_HELP_EXAMPLE = f"{_EXAMPLE_PREFIX} help"

_REQUIRED_RULE_KEYS = ("name", "color", "extensions", "subcategories", "description")


@dataclass
class CategoryRule:
    """A named category matched by extension and, optionally, size ranges."""

    name: str = ""
    color: str = "white"
    extensions: list[str] = field(default_factory=list)
    size_ranges: list[tuple[int, int]] | None = None
    subcategories: dict[str, list[str]] = field(default_factory=dict)
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CategoryRule:
        """Build a rule; every field but ``size_ranges`` must be present."""
        if not isinstance(data, dict):
            raise ValueError("category rule must be a table")
        missing = [key for key in _REQUIRED_RULE_KEYS if key not in data]
        if missing:
            raise ValueError(f"missing field `{missing[0]}` in category rule")
        ranges = data.get("size_ranges")
        return cls(
            name=str(data["name"]),
            color=str(data["color"]),
            extensions=[str(e) for e in data["extensions"]],
            size_ranges=None if ranges is None else [(int(lo), int(hi)) for lo, hi in ranges],
            subcategories={
                str(sub): [str(e) for e in exts] for sub, exts in dict(data["subcategories"]).items()
            },
            description=str(data["description"]),
        )


@dataclass
class CategoryStats:
    """Counts gathered for one category while decorating."""

    count: int = 0
    total_size: int = 0
    subcategory_counts: dict[str, int] = field(default_factory=dict)


def _default_colors() -> dict[str, str]:
    return {"success": "bright_green", "info": "bright_blue", "name": "bright_yellow"}


def _default_rules() -> list[CategoryRule]:
    return [
        CategoryRule(
            name="Document",
            color="bright_blue",
            extensions=["txt", "md", "doc", "docx", "pdf", "rtf", "odt"],
            size_ranges=[(0, 10_485_760)],
            subcategories={
                "Text": ["txt", "md"],
                "Office": ["doc", "docx", "xls", "xlsx", "ppt", "pptx"],
            },
            description="Text documents and office files",
        ),
        CategoryRule(
            name="Code",
            color="bright_cyan",
            extensions=[
                "rs", "py", "js", "ts", "java", "c", "cpp", "h", "hpp",
                "go", "rb", "php", "cs", "swift", "kt",
            ],
            size_ranges=[(0, 1_048_576)],
            subcategories={
                "Systems": ["rs", "c", "cpp", "h", "hpp"],
                "Web": ["js", "ts", "html", "css", "php"],
                "Scripts": ["py", "rb", "sh", "bash"],
            },
            description="Source code files",
        ),
    ]


@dataclass
class CategorizerConfig(PluginConfig):
    """Colours for help output and the category rules."""

    colors: dict[str, str] = field(default_factory=_default_colors)
    rules: list[CategoryRule] = field(default_factory=_default_rules)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CategorizerConfig:
        """Build a configuration, using defaults for missing keys."""
        colors = (
            {str(k): str(v) for k, v in dict(data["colors"]).items()}
            if "colors" in data
            else _default_colors()
        )
        rules = (
            [CategoryRule.from_dict(rule) for rule in data["rules"]]
            if "rules" in data
            else _default_rules()
        )
        return cls(colors=colors, rules=rules)


def category_info(
    rules: Iterable[CategoryRule], entry: DecoratedEntry
) -> tuple[str, str, str | None] | None:
    """Return ``(category, color, subcategory)`` for the first matching rule, or None."""
    extension = entry.extension()
    if extension is None:
        return None
    extension = extension.lower()
    size = entry.metadata.size

    for rule in rules:
        if extension not in rule.extensions:
            continue
        if rule.size_ranges is not None and not any(
            lo <= size <= hi for lo, hi in rule.size_ranges
        ):
            continue
        subcategory = next(
            (name for name, exts in rule.subcategories.items() if extension in exts), None
        )
        return rule.name, rule.color, subcategory
    return None


def _split_extensions(text: str) -> list[str]:
    return text.split(",")


class FileCategoryPlugin(Plugin[CategorizerConfig]):
    """Adds a category, its colour and a subcategory to listed files."""

    version = "0.3.2"
    description = "Categorizes files based on their extensions and metadata"
    supported_formats = ("default", "long")

    def __init__(self, config_root: Path | str | None = None) -> None:
        super().__init__(PLUGIN_NAME, CategorizerConfig, config_root)
        self.stats: dict[str, CategoryStats] = {}
        try:
            self.save_config()
        except ConfigError as exc:
            log.warning("Failed to save config: %s", exc)
        self._register_actions()

    def _register_actions(self) -> None:
        self.actions.define(
            "add-category",
            _ADD_CATEGORY_USAGE,
            "Add a new category",
            [_ADD_CATEGORY_EXAMPLE],
            self._add_category_action,
        )
        self.actions.define(
            "add-subcategory",
            _ADD_SUBCATEGORY_USAGE,
            "Add a subcategory to an existing category",
            [_ADD_SUBCATEGORY_EXAMPLE],
            self._add_subcategory_action,
        )
        self.actions.define(
            "list-categories",
            "list-categories",
            "List all categories and their details",
            [_LIST_EXAMPLE],
            lambda _args: print(self.render_categories()),
        )
        self.actions.define(
            "help",
            "help",
            "Show help information",
            [_HELP_EXAMPLE],
            lambda _args: print(self.render_help()),
        )

    def _add_category_action(self, args: Sequence[str]) -> None:
        if len(args) < 3:
            raise PluginError(f"Usage: {_ADD_CATEGORY_USAGE}")
        description = args[3] if len(args) > 3 else ""
        self.add_category(args[0], args[1], _split_extensions(args[2]), description)

    def _add_subcategory_action(self, args: Sequence[str]) -> None:
        if len(args) != 3:
            raise PluginError(f"Usage: {_ADD_SUBCATEGORY_USAGE}")
        self.add_subcategory(args[0], args[1], _split_extensions(args[2]))

    def _update_stats(self, entry: DecoratedEntry, category: str, subcategory: str | None) -> None:
        stats = self.stats.setdefault(category, CategoryStats())
        stats.count += 1
        stats.total_size += entry.metadata.size
        if subcategory is not None:
            stats.subcategory_counts[subcategory] = stats.subcategory_counts.get(subcategory, 0) + 1

    def decorate(self, entry: DecoratedEntry) -> DecoratedEntry:
        """Add ``category``, ``category_color`` and ``subcategory`` fields when a rule matches."""
        info = category_info(self.config.rules, entry)
        if info is not None:
            category, color, subcategory = info
            entry.custom_fields["category"] = category
            entry.custom_fields["category_color"] = color
            if subcategory is not None:
                entry.custom_fields["subcategory"] = subcategory
            self._update_stats(entry, category, subcategory)
        return entry

    def format_field(self, entry: DecoratedEntry, format: str) -> str | None:
        """Render ``[category]``, with the subcategory too in the long format."""
        fields = entry.custom_fields
        category = fields.get("category")
        color = fields.get("category_color")
        if category is None or color is None:
            return None
        if format not in ("default", "long"):
            return None
        base = TextBlock(f"[{category}]", color).build()
        subcategory = fields.get("subcategory")
        if format == "long" and subcategory is not None:
            return f"{base} ({TextBlock(subcategory, 'bright_black').build()})"
        return base

    def perform_action(self, action: str, args: list[str]) -> Any:
        """Run one of the plugin's actions."""
        return self.actions.handle(action, args)

    def add_category(
        self, name: str, color: str, extensions: Iterable[str], description: str = ""
    ) -> None:
        """Append a category rule and save the configuration."""
        rule = CategoryRule(
            name=name, color=color, extensions=list(extensions), description=description
        )
        self.config.rules.append(rule)
        self.save_config()

    def add_subcategory(self, category: str, subcategory: str, extensions: Iterable[str]) -> None:
        """Add or replace a subcategory of an existing category and save."""
        rule = next((r for r in self.config.rules if r.name == category), None)
        if rule is None:
            raise PluginError(f"Category '{category}' not found")
        rule.subcategories[subcategory] = list(extensions)
        self.save_config()

    def render_categories(self) -> str:
        """A boxed list of every category with its extensions and subcategories."""
        items = List()
        for rule in self.config.rules:
            details = [f"Extensions: {', '.join(rule.extensions)}"]
            if rule.subcategories:
                details.append("Subcategories:")
                details += [
                    f"  {sub}: {', '.join(exts)}" for sub, exts in rule.subcategories.items()
                ]
            items.add_item(
                KeyValue(rule.name, rule.description, key_color=rule.color, key_width=15).render()
            )
            for detail in details:
                items.add_item("  " + detail)
        return BoxComponent(items.render(), style=BoxStyle.MINIMAL, padding=1).render()

    def render_help(self) -> str:
        """The boxed help page."""
        help_page = HelpFormatter("File Categorizer Plugin")
        help_page.add_section("Description").add_command(
            "", "Categorizes files based on their extensions and metadata", []
        )
        (
            help_page.add_section("Actions")
            .add_command("add-category", "Add a new category", [_ADD_CATEGORY_EXAMPLE])
            .add_command(
                "add-subcategory",
                "Add a subcategory to an existing category",
                [_ADD_SUBCATEGORY_EXAMPLE],
            )
            .add_command(
                "list-categories", "List all categories and their details", [_LIST_EXAMPLE]
            )
            .add_command("help", "Show this help information", [_HELP_EXAMPLE])
        )
        return BoxComponent(
            help_page.render(self.config.colors), style=BoxStyle.MINIMAL, padding=2
        ).render()