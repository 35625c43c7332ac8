"""Directory entries and the requests a plugin answers."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class EntryMetadata:
    """File metadata as seen by the listing."""

    size: int = 0
    modified: int = 0
    accessed: int = 0
    created: int = 0
    is_dir: bool = False
    is_file: bool = False
    is_symlink: bool = False
    permissions: int = 0
    uid: int = 0
    gid: int = 0


@dataclass
class DecoratedEntry:
    """A path, its metadata and fields added by plugins."""

    path: Path
    metadata: EntryMetadata = field(default_factory=EntryMetadata)
    custom_fields: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    @classmethod
    def from_path(cls, path: Path | str) -> DecoratedEntry:
        """Build an entry from the file system, without following symlinks."""
        path = Path(path)
        st = os.lstat(path)
        metadata = EntryMetadata(
            size=st.st_size,
            modified=int(st.st_mtime),
            accessed=int(st.st_atime),
            created=int(getattr(st, "st_birthtime", st.st_ctime)),
            is_dir=stat.S_ISDIR(st.st_mode),
            is_file=stat.S_ISREG(st.st_mode),
            is_symlink=stat.S_ISLNK(st.st_mode),
            permissions=st.st_mode,
            uid=st.st_uid,
            gid=st.st_gid,
        )
        return cls(path=path, metadata=metadata)

    def extension(self) -> str | None:
        """Text after the last dot of the file name, or None if there is none."""
        name = self.path.name
        if name in ("", ".", ".."):
            return None
        index = name.rfind(".")
        if index <= 0:
            return None
        return name[index + 1 :]


@dataclass(frozen=True)
class GetName:
    """Ask for the plugin's name."""


@dataclass(frozen=True)
class GetVersion:
    """Ask for the plugin's version."""


@dataclass(frozen=True)
class GetDescription:
    """Ask for the plugin's description."""


@dataclass(frozen=True)
class GetSupportedFormats:
    """Ask which field formats the plugin renders."""


@dataclass
class Decorate:
    """Ask the plugin to add fields to an entry."""

    entry: DecoratedEntry


@dataclass
class FormatField:
    """Ask the plugin to render its field for an entry."""

    entry: DecoratedEntry
    format: str


@dataclass
class PerformAction:
    """Ask the plugin to run a named action."""

    action: str
    args: list[str] = field(default_factory=list)


Request = (
    GetName | GetVersion | GetDescription | GetSupportedFormats | Decorate | FormatField | PerformAction
)