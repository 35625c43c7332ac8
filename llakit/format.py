"""Field formatters and helpers for permissions, types and ownership."""

from __future__ import annotations

from collections.abc import Callable

from llakit.entry import DecoratedEntry

try:
    import grp
    import pwd
except ImportError:
    grp = None
    pwd = None

Formatter = Callable[[DecoratedEntry], "str | None"]


class CustomFieldFormatter:
    """Renders entries with a formatter chosen by format name."""

    def __init__(self, formatters: dict[str, Formatter]) -> None:
        self._formatters = dict(formatters)

    def format_field(self, entry: DecoratedEntry, format: str) -> str | None:
        """Render ``entry`` in ``format``, or None if the format is unknown."""
        formatter = self._formatters.get(format)
        return formatter(entry) if formatter else None


class FieldFormatterBuilder:
    """Collects formatters for a CustomFieldFormatter."""

    def __init__(self) -> None:
        self._formatters: dict[str, Formatter] = {}

    def add_formatter(self, format: str, formatter: Formatter) -> FieldFormatterBuilder:
        self._formatters[format] = formatter
        return self

    def build(self) -> CustomFieldFormatter:
        return CustomFieldFormatter(self._formatters)


_PERMISSION_BITS = (
    (0o400, "r"), (0o200, "w"), (0o100, "x"),
    (0o040, "r"), (0o020, "w"), (0o010, "x"),
    (0o004, "r"), (0o002, "w"), (0o001, "x"),
)


def format_permissions(permissions: int) -> str:
    """Render a mode as ``drwxr-xr-x`` style text."""
    kind = "d" if permissions & 0o040000 else "-"
    return kind + "".join(ch if permissions & bit else "-" for bit, ch in _PERMISSION_BITS)


def format_file_type(entry: DecoratedEntry) -> str:
    """Describe an entry's type, using the upper-case extension for files."""
    meta = entry.metadata
    if meta.is_dir:
        return "Directory"
    if meta.is_symlink:
        return "Symlink"
    if meta.is_file:
        ext = entry.extension()
        return ext.upper() if ext is not None else "File"
    return "Unknown"


def format_ownership(uid: int, gid: int) -> str:
    """``user:group`` names, falling back to the numeric ids."""
    user = str(uid)
    group = str(gid)
    if pwd is not None:
        try:
            user = pwd.getpwuid(uid).pw_name
        except (KeyError, OverflowError):
            pass
    if grp is not None:
        try:
            group = grp.getgrgid(gid).gr_name
        except (KeyError, OverflowError):
            pass
    return f"{user}:{group}"