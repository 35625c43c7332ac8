# llakit

A toolkit for writing plugins that decorate and format the entries of a
directory listing, together with four ready-made plugins.

## What it provides

- **Entries and requests** (`llakit.entry`): `DecoratedEntry` (a path, its
  `EntryMetadata` and a `custom_fields` dict), built from the file system with
  `DecoratedEntry.from_path`, and the request types a plugin answers:
  `GetName`, `GetVersion`, `GetDescription`, `GetSupportedFormats`,
  `Decorate`, `FormatField` and `PerformAction`.
- **Plugin base** (`llakit.plugin`): `Plugin.handle(request)` answers the
  request types above, passing on to `decorate`, `format_field` and
  `perform_action`; an unknown request raises `PluginError`. `BasePlugin`
  keeps a plugin's configuration in a TOML file.
- **Actions** (`llakit.actions`): `ActionRegistry` maps action names to
  handlers with usage, description and examples (`register`, `define`,
  `handle`, `get_help`). An unknown action raises `PluginError`.
- **Configuration** (`llakit.config`): `PluginConfig` for dataclass
  configurations and `ConfigManager`, which stores one plugin's
  configuration at `<root>/<plugin name>/config.toml` (by default under
  `~/.config/lla/plugins`), writes the defaults on first use, and validates on
  `save` and `reload`. Failures raise `ConfigError`.
- **Terminal text** (`llakit.text`): `TextBlock` with a colour name and a
  `TextStyle`, `colorize`, `strip_ansi`, `text_width` and `format_size`
  (binary units, e.g. `1.50 KB`).
- **Components** (`llakit.components`): `KeyValue`, `List`, `BoxComponent`
  in the `BoxStyle`s `MINIMAL`, `ROUNDED`, `DOUBLE`, `HEAVY` and `DASHED`,
  `HelpFormatter`, an animated `Spinner` (drawn only on a terminal, usable as a
  context manager), and `LlaDialoguerTheme`, which renders prompt, error,
  confirmation and selection-item lines as coloured strings.
- **Formatting helpers** (`llakit.format`): `format_permissions`
  (`drwxr-xr-x` style), `format_file_type`, `format_ownership` (`user:group`,
  falling back to numeric ids), and `FieldFormatterBuilder` /
  `CustomFieldFormatter` for format-name-to-function tables.
- **Syntax highlighting** (`llakit.syntax`): `CodeHighlighter.highlight` and
  `highlight_with_line_numbers` produce 24-bit terminal colours;
  `get_available_themes` lists the colour themes.

## Plugins

| Module | Plugin | What it adds | Actions |
| --- | --- | --- | --- |
| `llakit.categorizer` | `FileCategoryPlugin` | `category`, `category_color` and `subcategory` fields by extension and size | `add-category`, `add-subcategory`, `list-categories`, `help` |
| `llakit.complexity` | `CodeComplexityEstimatorPlugin` | a `complexity_metrics` field with counts, cyclomatic and cognitive complexity and a maintainability index | `set-thresholds`, `show-report`, `help` |
| `llakit.dirs_meta` | `DirsPlugin` | file count, subdirectory count and total size of directories | `clear-cache`, `stats`, `help` |
| `llakit.duplicates` | `DuplicateFileDetectorPlugin` | marks the oldest copy `has_duplicates` and later copies `is_duplicate`, by SHA-256 of the content | `clear-cache`, `help` |

Every plugin renders its fields in the `default` and `long` formats. Each
constructor takes a `config_root` directory for its configuration file.

## Example

```python
from pathlib import Path

from llakit.categorizer import FileCategoryPlugin
from llakit.entry import Decorate, DecoratedEntry, FormatField

plugin = FileCategoryPlugin(config_root=Path("/tmp/llakit-config"))
entry = plugin.handle(Decorate(DecoratedEntry.from_path(Path("notes.md"))))
print(plugin.handle(FormatField(entry, "long")))
```

Actions are run by name with a list of string arguments; those that show
something print it:

```python
plugin.perform_action("add-category", ["Images", "magenta", "png,jpg", "Pictures"])
plugin.perform_action("list-categories", [])
```

## What it does not do

- It has no command-line program and no listing program of its own: plugins
  are Python objects that you call with requests.
- It does not load plugins from shared libraries or exchange requests as
  encoded messages; requests and answers are plain Python objects.
- It does not ask the user anything. `LlaDialoguerTheme` only formats prompt
  and selection lines as strings; reading keys and choosing items is left to
  the caller.

## Installing

```
pip install llakit
```

To run the tests:

```
pip install "llakit[test]"
pytest
```