import math
from pathlib import Path

import pytest

from llakit.actions import PluginError
from llakit.complexity import (
    CodeComplexityEstimatorPlugin,
    ComplexityAnalyzer,
    ComplexityConfig,
    ComplexityMetrics,
    ComplexityThresholds,
    LanguageRules,
)
from llakit.entry import DecoratedEntry, GetName
from llakit.text import strip_ansi


@pytest.fixture
def analyzer(tmp_path):
    return ComplexityAnalyzer(tmp_path / "state" / "code_complexity.toml")


@pytest.fixture
def plugin(tmp_path):
    return CodeComplexityEstimatorPlugin(tmp_path / "cfg")


def _unit(i):
    return f"fn f{i}() {{\n    if x {{\n        for y in z {{\n        }}\n    }}\n}}\n"


def test_default_config_values():
    config = ComplexityConfig()
    assert config.thresholds == ComplexityThresholds(10.0, 20.0, 30.0, 40.0)
    assert list(config.languages) == ["Rust"]
    assert config.languages["Rust"].extensions == ["rs"]
    assert config.languages["Rust"].max_line_length == 100
    assert config.colors["very_high"] == "red"


def test_config_from_dict_uses_defaults_for_missing_keys():
    config = ComplexityConfig.from_dict({"colors": {"low": "blue"}})
    assert config.colors == {"low": "blue"}
    assert config.thresholds == ComplexityThresholds()
    assert config.languages == {"Rust": LanguageRules()}


def test_config_from_dict_rejects_incomplete_rules():
    with pytest.raises(ValueError):
        ComplexityConfig.from_dict({"languages": {"Python": {"extensions": ["py"]}}})


def test_config_dict_round_trip():
    config = ComplexityConfig()
    config.thresholds = ComplexityThresholds(1.5, 2.5, 3.5, 4.5)
    assert ComplexityConfig.from_dict(config.to_dict()) == config


def test_metrics_toml_round_trip():
    metrics = ComplexityMetrics(
        lines=12,
        functions=3,
        classes=1,
        branches=4,
        loops=2,
        comments=5,
        long_lines=1,
        long_functions=[("fn big() {", 60)],
        cyclomatic_complexity=6,
        cognitive_complexity=9,
        maintainability_index=42.5,
    )
    assert ComplexityMetrics.from_toml(metrics.to_toml()) == metrics


def test_metrics_toml_round_trip_infinite_index():
    metrics = ComplexityMetrics(maintainability_index=math.inf)
    assert ComplexityMetrics.from_toml(metrics.to_toml()) == metrics


def test_metrics_from_toml_missing_field():
    with pytest.raises(ValueError):
        ComplexityMetrics.from_toml("lines = 3\n")


def test_metrics_from_toml_invalid_document():
    with pytest.raises(ValueError):
        ComplexityMetrics.from_toml("this is = = not toml")


def test_language_for(analyzer):
    assert analyzer.language_for(Path("main.rs")) == "Rust"
    assert analyzer.language_for(Path("main.py")) is None
    assert analyzer.language_for(Path("Makefile")) is None


@pytest.mark.parametrize("count", [1, 3, 7])
def test_analyze_counts_constructs(tmp_path, analyzer, count):
    source = tmp_path / "code.rs"
    source.write_text("".join(_unit(i) for i in range(count)) + "\n// note\n")
    metrics = analyzer.analyze_file(source)
    assert metrics.functions == count
    assert metrics.branches == count
    assert metrics.loops == count
    assert metrics.classes == 0
    assert metrics.comments == 1
    assert metrics.lines == _unit(0).count("\n") * count + 2
    assert metrics.cyclomatic_complexity == metrics.branches + metrics.loops
    assert metrics.cognitive_complexity > metrics.cyclomatic_complexity
    assert 0.0 <= metrics.maintainability_index <= 100.0


@pytest.mark.parametrize("count", [0, 2, 5])
def test_analyze_long_lines(tmp_path, analyzer, count):
    limit = analyzer.config.languages["Rust"].max_line_length
    source = tmp_path / "long.rs"
    body = ("x" * (limit + 1) + "\n") * count + ("y" * limit + "\n")
    source.write_text(body)
    assert analyzer.analyze_file(source).long_lines == count


def test_analyze_long_function_recorded(tmp_path, analyzer):
    limit = analyzer.config.languages["Rust"].max_function_lines
    body = "    let a = b;\n" * (limit - 1)
    source = tmp_path / "long_fn.rs"
    source.write_text(f"fn big() {{\n{body}}}\nfn small() {{\n}}\n")
    metrics = analyzer.analyze_file(source)
    assert metrics.long_functions == [("fn big() {", limit + 1)]


def test_analyze_function_at_limit_not_recorded(tmp_path, analyzer):
    limit = analyzer.config.languages["Rust"].max_function_lines
    body = "    let a = b;\n" * (limit - 2)
    source = tmp_path / "ok_fn.rs"
    source.write_text(f"fn fine() {{\n{body}}}\nfn small() {{\n}}\n")
    assert analyzer.analyze_file(source).long_functions == []


def test_analyze_empty_file_has_infinite_index(tmp_path, analyzer):
    source = tmp_path / "empty.rs"
    source.write_text("")
    metrics = analyzer.analyze_file(source)
    assert metrics.lines == 0
    assert math.isinf(metrics.maintainability_index)


def test_analyze_unknown_or_missing(tmp_path, analyzer):
    other = tmp_path / "script.py"
    other.write_text("def f():\n    pass\n")
    assert analyzer.analyze_file(other) is None
    assert analyzer.analyze_file(tmp_path / "missing.rs") is None


def test_complexity_color_bands(analyzer):
    assert analyzer.complexity_color(ComplexityMetrics()) == "bright_green"
    heavy = ComplexityMetrics(cyclomatic_complexity=500, cognitive_complexity=500)
    assert analyzer.complexity_color(heavy) == "red"


def test_set_thresholds_persists(tmp_path):
    path = tmp_path / "state.toml"
    first = ComplexityAnalyzer(path)
    first.set_thresholds(1.0, 2.0, 3.0, 4.0)
    second = ComplexityAnalyzer(path)
    assert second.config.thresholds == ComplexityThresholds(1.0, 2.0, 3.0, 4.0)


def test_broken_state_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "state.toml"
    path.write_text("thresholds = 'nope'\n")
    assert ComplexityAnalyzer(path).config == ComplexityConfig()


def test_format_metrics_short_and_detailed(analyzer):
    metrics = ComplexityMetrics(long_functions=[("fn big() {", 80)])
    short = strip_ansi(analyzer.format_metrics(metrics, False))
    detailed = strip_ansi(analyzer.format_metrics(metrics, True))
    assert "(MI: 100.0)" in short
    assert "Lines" not in short
    assert "Lines" in detailed
    assert "Long functions:" in detailed
    assert "fn big() {" in detailed
    assert "Suggestions:" not in detailed


def test_format_metrics_suggestions(analyzer):
    metrics = ComplexityMetrics(
        lines=100,
        comments=0,
        long_functions=[("a", 60), ("b", 60), ("c", 60)],
        cyclomatic_complexity=11,
        cognitive_complexity=16,
        maintainability_index=50.0,
    )
    text = strip_ansi(analyzer.format_metrics(metrics, True))
    assert "Suggestions:" in text
    assert "Consider breaking down long functions" in text
    assert "Add more documentation" in text
    assert "Reduce nested conditionals" in text
    assert "Simplify complex logic" in text


def test_generate_report_lists_recorded_files(analyzer):
    analyzer.record("Rust", Path("a.rs"), ComplexityMetrics(lines=10))
    analyzer.record("Rust", Path("b.rs"), ComplexityMetrics(lines=20))
    report = strip_ansi(analyzer.generate_report())
    assert "Code Complexity Report" in report
    assert "a.rs" in report
    assert "b.rs" in report
    assert "Average metrics:" in report
    assert "Lines per file:" in report


def test_generate_report_empty(analyzer):
    report = strip_ansi(analyzer.generate_report())
    assert "Code Complexity Report" in report
    assert "Average metrics:" not in report


def test_plugin_decorates_source_file(tmp_path, plugin):
    source = tmp_path / "lib.rs"
    source.write_text(_unit(0))
    entry = plugin.decorate(DecoratedEntry(path=source))
    stored = ComplexityMetrics.from_toml(entry.custom_fields["complexity_metrics"])
    assert stored == plugin.analyzer.analyze_file(source)
    assert [p for p, _ in plugin.analyzer.stats["Rust"]] == [source]


def test_plugin_skips_directories_and_unknown_files(tmp_path, plugin):
    other = tmp_path / "notes.txt"
    other.write_text("hello\n")
    assert plugin.decorate(DecoratedEntry(path=other)).custom_fields == {}
    assert plugin.decorate(DecoratedEntry(path=tmp_path)).custom_fields == {}
    assert plugin.analyzer.stats == {}


def test_plugin_format_field(tmp_path, plugin):
    source = tmp_path / "lib.rs"
    source.write_text(_unit(0))
    entry = plugin.decorate(DecoratedEntry(path=source))
    long_text = strip_ansi(plugin.format_field(entry, "long"))
    short_text = strip_ansi(plugin.format_field(entry, "default"))
    assert "Functions" in long_text
    assert "Functions" not in short_text
    assert "Complexity" in short_text


def test_plugin_format_field_without_metrics(tmp_path, plugin):
    entry = DecoratedEntry(path=tmp_path / "x.rs")
    assert plugin.format_field(entry, "default") is None
    entry.custom_fields["complexity_metrics"] = "lines = 1\n"
    assert plugin.format_field(entry, "default") is None


def test_plugin_set_thresholds_action(plugin, capsys):
    plugin.perform_action("set-thresholds", ["1", "2", "3", "4"])
    assert plugin.analyzer.config.thresholds == ComplexityThresholds(1.0, 2.0, 3.0, 4.0)
    assert "Updated complexity thresholds" in strip_ansi(capsys.readouterr().out)


def test_plugin_set_thresholds_errors(plugin):
    with pytest.raises(PluginError, match="Usage: set-thresholds"):
        plugin.perform_action("set-thresholds", ["1", "2"])
    with pytest.raises(PluginError, match="Invalid threshold values"):
        plugin.perform_action("set-thresholds", ["1", "two", "3", "4"])


def test_plugin_help_and_report_actions(plugin, capsys):
    plugin.perform_action("help", [])
    plugin.perform_action("show-report", [])
    out = strip_ansi(capsys.readouterr().out)
    assert "Code Complexity Plugin" in out
    assert "set-thresholds" in out
    assert "Code Complexity Report" in out


def test_plugin_unknown_action(plugin):
    with pytest.raises(PluginError, match="Unknown action: nope"):
        plugin.perform_action("nope", [])


def test_plugin_name_and_config_file(tmp_path, plugin):
    assert plugin.handle(GetName()) == "code_complexity"
    assert (tmp_path / "cfg" / "code_complexity" / "config.toml").exists()