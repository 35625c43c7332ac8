"""Plugin configuration stored as TOML files."""

from __future__ import annotations

import dataclasses
import logging
import tomllib
from pathlib import Path
from typing import Any, Generic, TypeVar

import tomli_w

from llakit.actions import PluginError

log = logging.getLogger(__name__)


class ConfigError(PluginError):
    """Raised when a configuration cannot be read, written or validated."""


def _strip_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_strip_none(v) for v in value if v is not None]
    return value


class PluginConfig:
    """Base for dataclass configurations that can be stored as TOML."""

    def validate(self) -> None:
        """Raise ConfigError if the configuration is not usable."""

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as TOML-ready data."""
        return _strip_none(dataclasses.asdict(self))

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build a configuration, using defaults for missing keys."""
        known = {f.name for f in dataclasses.fields(cls) if f.init}
        return cls(**{k: v for k, v in data.items() if k in known})


C = TypeVar("C", bound=PluginConfig)


def default_config_root() -> Path:
    """Directory that holds one sub-directory per plugin."""
    try:
        home = Path.home()
    except RuntimeError:
        home = Path(".")
    return home / ".config" / "lla" / "plugins"


class ConfigManager(Generic[C]):
    """Loads, holds and saves one plugin's configuration file."""

    def __init__(self, plugin_name: str, config_type: type[C], root: Path | str | None = None):
        base = Path(root) if root is not None else default_config_root()
        self.plugin_name = plugin_name
        self.config_type = config_type
        self.path = base / plugin_name / "config.toml"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            log.warning("Failed to create config directory: %s", exc)

        if self.path.exists():
            try:
                self.config: C = self._load()
            except ConfigError as exc:
                log.warning("Failed to load config: %s, using default", exc)
                self.config = config_type()
        else:
            self.config = config_type()
            try:
                self.path.write_text(tomli_w.dumps(self.config.to_dict()), encoding="utf-8")
            except (OSError, TypeError, ValueError) as exc:
                log.warning("Failed to write initial config: %s", exc)

    def save(self) -> None:
        """Validate and write the configuration."""
        self.config.validate()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Failed to create config directory: {exc}") from exc
        try:
            content = tomli_w.dumps(self.config.to_dict())
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Failed to serialize config: {exc}") from exc
        try:
            self.path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to write config file: {exc}") from exc

    def reload(self) -> None:
        """Read the file again, replacing the held configuration."""
        try:
            self.config = self._load()
        except ConfigError as exc:
            raise ConfigError("Failed to reload configuration") from exc

    def _load(self) -> C:
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read config file: {exc}") from exc
        try:
            data = tomllib.loads(content)
            config = self.config_type.from_dict(data)
        except (tomllib.TOMLDecodeError, TypeError, ValueError) as exc:
            raise ConfigError(f"Failed to parse config file: {exc}") from exc
        config.validate()
        return config