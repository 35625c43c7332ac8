"""Plugin that finds files whose contents are identical."""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple

from llakit.components import BoxComponent, BoxStyle, HelpFormatter, KeyValue, List, Spinner
from llakit.config import ConfigError, PluginConfig
from llakit.entry import DecoratedEntry
from llakit.plugin import Plugin
from llakit.text import TextBlock

log = logging.getLogger(__name__)

PLUGIN_NAME = "duplicate_file_detector"

_EXAMPLE_PREFIX = f"lla plugin --name {PLUGIN_NAME} --action"
_CLEAR_EXAMPLE = f"{_EXAMPLE_PREFIX} clear-cache"
_HELP_EXAMPLE = f"{_EXAMPLE_PREFIX} help"

_KEY_WIDTH = 15
_CHUNK_SIZE = 8192


def _default_colors() -> dict[str, str]:
    return {
        "duplicate": "bright_red",
        "has_duplicates": "bright_yellow",
        "path": "bright_cyan",
        "success": "bright_green",
        "info": "bright_blue",
        "name": "bright_yellow",
    }


@dataclass
class DuplicateConfig(PluginConfig):
    """Colours used when showing duplicate information."""

    colors: dict[str, str] = field(default_factory=_default_colors)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DuplicateConfig:
        """Build a configuration, using the default colours if none are given."""
        colors = (
            {str(k): str(v) for k, v in dict(data["colors"]).items()}
            if "colors" in data
            else _default_colors()
        )
        return cls(colors=colors)


class _FileInfo(NamedTuple):
    path: Path
    modified: int


def file_hash(path: Path | str) -> str | None:
    """SHA-256 of a file's contents as lower-case hex, or None if it cannot be read."""
    hasher = hashlib.sha256()
    try:
        with open(path, "rb") as handle:
            while chunk := handle.read(_CHUNK_SIZE):
                hasher.update(chunk)
    except OSError:
        return None
    return hasher.hexdigest()


def _modified_ns(path: Path) -> int:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return time.time_ns()


def _render_help() -> str:
    page = HelpFormatter("Duplicate File Detector Plugin")
    page.add_section("Description").add_command(
        "", "Detects duplicate files by comparing their content hashes.", []
    )
    (
        page.add_section("Actions")
        .add_command(
            "clear-cache", "Clear the duplicate file detection cache", [_CLEAR_EXAMPLE]
        )
        .add_command("help", "Show this help information", [_HELP_EXAMPLE])
    )
    (
        page.add_section("Formats")
        .add_command("default", "Show basic duplicate information", [])
        .add_command("long", "Show detailed duplicate information including paths", [])
    )
    return BoxComponent(
        page.render(DuplicateConfig().colors), style=BoxStyle.MINIMAL, padding=2
    ).render()


class DuplicateFileDetectorPlugin(Plugin[DuplicateConfig]):
    """Marks files that share content with a file seen earlier in the listing."""

    version = "0.3.1"
    description = "Detects duplicate files by comparing their content hashes"
    supported_formats = ("default", "long")

    def __init__(self, config_root: Path | str | None = None) -> None:
        super().__init__(PLUGIN_NAME, DuplicateConfig, config_root)
        self._cache: dict[str, list[_FileInfo]] = {}
        try:
            self.save_config()
        except ConfigError as exc:
            log.warning("Failed to save config: %s", exc)
        self._register_actions()

    def _register_actions(self) -> None:
        self.actions.define(
            "clear-cache",
            "clear-cache",
            "Clear the duplicate file detection cache",
            [_CLEAR_EXAMPLE],
            self._clear_cache_action,
        )
        self.actions.define(
            "help",
            "help",
            "Show help information",
            [_HELP_EXAMPLE],
            lambda _args: print(_render_help()),
        )

    def _clear_cache_action(self, _args: list[str]) -> None:
        with Spinner() as spinner:
            spinner.set_status("Clearing cache...")
            self.clear_cache()
        message = TextBlock("Cache cleared successfully", "bright_green").build()
        print(BoxComponent(message, style=BoxStyle.MINIMAL, padding=1).render())

    def clear_cache(self) -> None:
        """Forget every file seen so far."""
        self._cache.clear()

    def decorate(self, entry: DecoratedEntry) -> DecoratedEntry:
        """Mark the oldest copy with ``has_duplicates`` and later copies with ``is_duplicate``."""
        if not entry.metadata.is_file:
            return entry

        with Spinner() as spinner:
            spinner.set_status("Checking for duplicates...")
            digest = file_hash(entry.path)
            if digest is None:
                return entry

            known = self._cache.setdefault(digest, [])
            if not any(info.path == entry.path for info in known):
                known.append(_FileInfo(Path(entry.path), _modified_ns(Path(entry.path))))

            if len(known) > 1:
                oldest = min(known, key=lambda info: info.modified)
                if oldest.path == entry.path:
                    entry.custom_fields["has_duplicates"] = "true"
                    entry.custom_fields["duplicate_paths"] = ", ".join(
                        str(info.path) for info in known if info.path != oldest.path
                    )
                else:
                    entry.custom_fields["is_duplicate"] = "true"
                    entry.custom_fields["original_path"] = str(oldest.path)
        return entry

    def _status_line(self, key: str, value: str, value_color: str) -> str:
        colors = self.config.colors
        return KeyValue(
            key,
            value,
            key_color=colors.get("info", "white"),
            value_color=colors.get(value_color, "white"),
            key_width=_KEY_WIDTH,
        ).render()

    def format_field(self, entry: DecoratedEntry, format: str) -> str | None:
        """Render the duplicate status; the long format puts the paths on their own line."""
        if format not in ("default", "long"):
            return None
        fields = entry.custom_fields
        items = List()

        if "has_duplicates" in fields:
            paths = fields.get("duplicate_paths")
            if format == "long":
                items.add_item(self._status_line("Status", "HAS DUPLICATES", "has_duplicates"))
                if paths is not None:
                    items.add_item(self._status_line("Duplicate Copies", paths, "path"))
            else:
                status = f"HAS DUPLICATES: {paths}" if paths is not None else "HAS DUPLICATES"
                items.add_item(self._status_line("Status", status, "has_duplicates"))
        elif "is_duplicate" in fields:
            original = fields.get("original_path")
            if format == "long":
                items.add_item(self._status_line("Status", "DUPLICATE", "duplicate"))
                if original is not None:
                    items.add_item(self._status_line("Original File", original, "path"))
            else:
                status = f"DUPLICATE of {original}" if original is not None else "DUPLICATE"
                items.add_item(self._status_line("Status", status, "duplicate"))
        else:
            return None

        return f"\n{items.render()}"

    def perform_action(self, action: str, args: list[str]) -> Any:
        """Run one of the plugin's actions."""
        return self.actions.handle(action, args)