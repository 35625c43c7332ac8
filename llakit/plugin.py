"""Base classes for listing plugins."""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

from llakit.actions import ActionRegistry, PluginError
from llakit.config import ConfigManager, PluginConfig
from llakit.entry import (
    Decorate,
    DecoratedEntry,
    FormatField,
    GetDescription,
    GetName,
    GetSupportedFormats,
    GetVersion,
    PerformAction,
)

C = TypeVar("C", bound=PluginConfig)


class BasePlugin(Generic[C]):
    """Holds a plugin's name and its stored configuration."""

    def __init__(
        self,
        plugin_name: str,
        config_type: type[C],
        config_root: Path | str | None = None,
    ) -> None:
        self.plugin_name = plugin_name
        self._config_manager = ConfigManager(plugin_name, config_type, config_root)

    @property
    def config(self) -> C:
        """The current configuration."""
        return self._config_manager.config

    @property
    def config_path(self) -> Path:
        return self._config_manager.path

    def save_config(self) -> None:
        """Write the configuration to disk."""
        self._config_manager.save()


class Plugin(BasePlugin[C]):
    """A plugin that answers listing requests."""

    version: ClassVar[str] = "0.0.0"
    description: ClassVar[str] = ""
    supported_formats: ClassVar[tuple[str, ...]] = ("default", "long")

    def __init__(
        self,
        plugin_name: str,
        config_type: type[C],
        config_root: Path | str | None = None,
    ) -> None:
        super().__init__(plugin_name, config_type, config_root)
        self.actions = ActionRegistry()

    def handle(self, request: Any) -> Any:
        """Answer one request; raise PluginError for an unknown request."""
        match request:
            case GetName():
                return self.plugin_name
            case GetVersion():
                return self.version
            case GetDescription():
                return self.description
            case GetSupportedFormats():
                return list(self.supported_formats)
            case Decorate(entry=entry):
                return self.decorate(entry)
            case FormatField(entry=entry, format=fmt):
                return self.format_field(entry, fmt)
            case PerformAction(action=action, args=args):
                return self.perform_action(action, args)
            case _:
                raise PluginError("Invalid request type")

    def decorate(self, entry: DecoratedEntry) -> DecoratedEntry:
        """Add fields to an entry; the default adds none."""
        return entry

    def format_field(self, entry: DecoratedEntry, format: str) -> str | None:
        """Render this plugin's field; the default renders nothing."""
        return None

    def perform_action(self, action: str, args: list[str]) -> Any:
        """Run a registered action."""
        return self.actions.handle(action, args)