"""Plugin that shows file counts and total sizes for directories."""

from __future__ import annotations

import logging
import os
import stat
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple

from llakit.actions import PluginError
from llakit.components import BoxComponent, BoxStyle, HelpFormatter, KeyValue, List, Spinner
from llakit.config import ConfigError, PluginConfig
from llakit.entry import DecoratedEntry
from llakit.plugin import Plugin
from llakit.text import TextBlock, format_size

log = logging.getLogger(__name__)

PLUGIN_NAME = "dirs_meta"

_EXAMPLE_PREFIX = f"lla plugin --name {PLUGIN_NAME} --action"
_CLEAR_EXAMPLE = f"{_EXAMPLE_PREFIX} clear-cache"
_STATS_EXAMPLE = f'{_EXAMPLE_PREFIX} stats --args "/path/to/dir"'
_HELP_EXAMPLE = f"{_EXAMPLE_PREFIX} help"

_KEY_WIDTH = 12


def _default_colors() -> dict[str, str]:
    return {
        "files": "bright_cyan",
        "dirs": "bright_green",
        "size": "bright_yellow",
        "time": "bright_magenta",
        "success": "bright_green",
        "info": "bright_blue",
        "name": "bright_yellow",
    }


def _non_negative(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected a non-negative integer, got {value!r}")
    return value


@dataclass
class DirsConfig(PluginConfig):
    """Cache size, colours and scan limits."""

    cache_size: int = 1000
    colors: dict[str, str] = field(default_factory=_default_colors)
    max_scan_depth: int = 100
    parallel_threshold: int = 1000

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DirsConfig:
        """Build a configuration, using defaults for missing keys."""
        defaults = cls()
        colors = (
            {str(k): str(v) for k, v in dict(data["colors"]).items()}
            if "colors" in data
            else _default_colors()
        )
        return cls(
            cache_size=_non_negative(data.get("cache_size", defaults.cache_size)),
            colors=colors,
            max_scan_depth=_non_negative(data.get("max_scan_depth", defaults.max_scan_depth)),
            parallel_threshold=_non_negative(
                data.get("parallel_threshold", defaults.parallel_threshold)
            ),
        )


class DirStats(NamedTuple):
    """File count, directory count and total file size under a path."""

    files: int
    dirs: int
    size: int


def _walk_stats(root: Path) -> DirStats:
    files = dirs = size = 0
    try:
        root_stat = root.stat()
    except OSError:
        return DirStats(0, 0, 0)
    if stat.S_ISREG(root_stat.st_mode):
        return DirStats(1, 0, root_stat.st_size)
    if not stat.S_ISDIR(root_stat.st_mode):
        return DirStats(0, 0, 0)

    dirs += 1
    pending = [root]
    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                children = list(entries)
        except OSError:
            continue
        for child in children:
            try:
                st = child.stat(follow_symlinks=False)
            except OSError:
                continue
            if stat.S_ISREG(st.st_mode):
                files += 1
                size += st.st_size
            elif stat.S_ISDIR(st.st_mode):
                dirs += 1
                pending.append(Path(child.path))
    return DirStats(files, dirs, size)


def _mtime_ns(path: Path) -> int | None:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return None


class DirectoryAnalyzer:
    """Counts what lies under directories, caching results by modification time."""

    def __init__(self, cache_size: int = 1000) -> None:
        self.cache_size = cache_size
        self._cache: dict[str, tuple[int, DirStats]] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def analyze(self, path: Path | str) -> DirStats:
        """Return the stats for ``path``, reusing a cached result if it is not stale."""
        path = Path(path)
        key = str(path)

        modified = _mtime_ns(path)
        if modified is not None:
            cached = self._cache.get(key)
            if cached is not None and cached[0] >= modified:
                return cached[1]

        result = _walk_stats(path)

        modified = _mtime_ns(path)
        if modified is not None:
            if len(self._cache) >= self.cache_size:
                self._cache.clear()
            self._cache[key] = (modified, result)
        return result

    def clear(self) -> None:
        """Forget every cached result."""
        self._cache.clear()


def format_elapsed(seconds: int) -> str:
    """Describe an age in whole seconds, minutes, hours or days."""
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds} secs ago"
    if seconds < 3600:
        return f"{seconds // 60} mins ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


def _modified_ago(path: Path) -> str:
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return "unknown time"
    elapsed = time.time() - mtime
    if elapsed < 0:
        return "unknown time"
    return format_elapsed(int(elapsed))


def _line(key: str, value: str, colors: dict[str, str], color_key: str) -> str:
    color = colors.get(color_key, "white")
    return KeyValue(key, value, key_color=color, value_color=color, key_width=_KEY_WIDTH).render()


def _render_help() -> str:
    page = HelpFormatter("Directory Metadata Plugin")
    page.add_section("Description").add_command(
        "",
        "Analyzes directories to provide information about their contents, including file "
        "count, subdirectory count, and total size.",
        [],
    )
    (
        page.add_section("Actions")
        .add_command("clear-cache", "Clear the directory analysis cache", [_CLEAR_EXAMPLE])
        .add_command("stats", "Show detailed statistics for a directory", [_STATS_EXAMPLE])
        .add_command("help", "Show this help information", [_HELP_EXAMPLE])
    )
    (
        page.add_section("Formats")
        .add_command(
            "default", "Show basic directory information (file count and total size)", []
        )
        .add_command(
            "long",
            "Show detailed directory information including subdirectories and modification time",
            [],
        )
    )
    return BoxComponent(
        page.render(DirsConfig().colors), style=BoxStyle.MINIMAL, padding=2
    ).render()


class DirsPlugin(Plugin[DirsConfig]):
    """Adds file counts, subdirectory counts and total sizes to directories."""

    version = "0.3.2"
    description = "Analyzes directories and shows metadata"
    supported_formats = ("default", "long")

    def __init__(self, config_root: Path | str | None = None) -> None:
        super().__init__(PLUGIN_NAME, DirsConfig, config_root)
        self.analyzer = DirectoryAnalyzer(DirsConfig().cache_size)
        try:
            self.save_config()
        except ConfigError as exc:
            log.warning("Failed to save config: %s", exc)
        self._register_actions()

    def _register_actions(self) -> None:
        self.actions.define(
            "clear-cache",
            "clear-cache",
            "Clear the directory analysis cache",
            [_CLEAR_EXAMPLE],
            self._clear_cache_action,
        )
        self.actions.define(
            "stats",
            "stats <path>",
            "Show detailed statistics for a directory",
            [_STATS_EXAMPLE],
            self._stats_action,
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
            self.analyzer.clear()
        message = TextBlock("Cache cleared successfully", "bright_green").build()
        print(BoxComponent(message, style=BoxStyle.MINIMAL, padding=1).render())

    def _stats_action(self, args: list[str]) -> None:
        if not args:
            raise PluginError("Path argument is required")
        print(self.render_stats(args[0]))

    def render_stats(self, path: Path | str) -> str:
        """A list of file count, directory count and total size for a directory."""
        path = Path(path)
        if not path.is_dir():
            raise PluginError("Path must be a directory")
        with Spinner() as spinner:
            spinner.set_status("Analyzing directory...")
            files, dirs, size = self.analyzer.analyze(path)

        colors = DirsConfig().colors
        items = List()
        items.add_item(_line("Files", str(files), colors, "files"))
        items.add_item(_line("Directories", str(dirs), colors, "dirs"))
        items.add_item(_line("Total Size", format_size(size), colors, "size"))
        return items.render()

    def decorate(self, entry: DecoratedEntry) -> DecoratedEntry:
        """Add count and size fields to directories."""
        if entry.metadata.is_dir:
            files, dirs, size = self.analyzer.analyze(entry.path)
            entry.custom_fields["dir_file_count"] = str(files)
            entry.custom_fields["dir_subdir_count"] = str(dirs)
            entry.custom_fields["dir_total_size"] = format_size(size)
        return entry

    def format_field(self, entry: DecoratedEntry, format: str) -> str | None:
        """Render a directory's stored counts; the long format adds subdirectories and age."""
        if not entry.metadata.is_dir:
            return None
        fields = entry.custom_fields
        file_count = fields.get("dir_file_count")
        dir_count = fields.get("dir_subdir_count")
        total_size = fields.get("dir_total_size")
        if file_count is None or dir_count is None or total_size is None:
            return None

        colors = self.config.colors
        if format == "long":
            items = List()
            items.add_item(_line("Files", file_count, colors, "files"))
            items.add_item(_line("Directories", dir_count, colors, "dirs"))
            items.add_item(_line("Total Size", total_size, colors, "size"))
            items.add_item(_line("Modified", _modified_ago(entry.path), colors, "time"))
            return f"\n{items.render()}"
        if format == "default":
            text = TextBlock(f"{file_count} files, {total_size}", colors.get("info", "white"))
            return f"\n{text.build()}\n"
        return None

    def perform_action(self, action: str, args: list[str]) -> Any:
        """Run one of the plugin's actions."""
        return self.actions.handle(action, args)