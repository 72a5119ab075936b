"""Tests for cssjit.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from cssjit.config import (
    DEFAULT_FILE_EXTENSIONS,
    ConfigError,
    CssJitConfig,
    load_config,
    parse_option_pairs,
    resolve_emission_config,
)
from cssjit.patterns import DEFAULT_PATTERN


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, CssJitConfig)
    assert config.root == tmp_path.resolve()
    assert config.pattern is None
    assert config.file_extensions == []
    assert config.helper_methods == []
    assert config.scanners.enabled == []
    assert config.emit.mode is None
    assert config.output_dir == tmp_path.resolve() / "Generated"
    assert config.exclude_paths == []
    assert config.options == {}


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".cssjit.yml").write_text(
        """
pattern: 'tw="(?<value>[^"]*)"'
file_extensions: ".razor|.html"
helper_methods: [CssClass, AddClass]
scanners:
  enabled: [helpers, files]
emit:
  mode: categories
  output_dir: "obj/css"
exclude_paths:
  - "wwwroot/lib/"
options:
  pattern_override: ""
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.pattern == 'tw="(?<value>[^"]*)"'
    assert config.file_extensions == [".razor", ".html"]
    assert config.helper_methods == ["CssClass", "AddClass"]
    assert config.scanners.enabled == ["helpers", "files"]
    assert config.emit.mode == "categories"
    assert config.output_dir == tmp_path.resolve() / "obj" / "css"
    assert config.exclude_paths == ["wwwroot/lib/"]
    assert config.options == {"pattern_override": ""}


def test_load_config_accepts_extension_list(tmp_path: Path) -> None:
    (tmp_path / ".cssjit.yml").write_text("file_extensions:\n  - .cshtml\n  - ' .razor '\n", encoding="utf-8")

    assert load_config(tmp_path).file_extensions == [".cshtml", ".razor"]


def test_load_config_rejects_malformed_yaml(tmp_path: Path) -> None:
    (tmp_path / ".cssjit.yml").write_text("pattern: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    (tmp_path / ".cssjit.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_resolve_uses_defaults_without_config() -> None:
    emission = resolve_emission_config()

    assert emission.pattern_source == DEFAULT_PATTERN
    assert emission.file_extensions == DEFAULT_FILE_EXTENSIONS
    assert emission.helper_methods == ("CssClass",)
    assert emission.mode == "combined"


def test_host_options_override_file_settings(tmp_path: Path) -> None:
    (tmp_path / ".cssjit.yml").write_text(
        "pattern: 'a=\"(?<value>[^\"]*)\"'\nfile_extensions: .razor\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path)

    emission = resolve_emission_config(
        config,
        {
            "fileparsergenerator_razor_regex": 'b="(?<value>[^"]*)"',
            "file_extension_filter": ".cshtml|.html",
        },
    )

    assert emission.pattern_source == 'b="(?<value>[^"]*)"'
    assert emission.file_extensions == (".cshtml", ".html")


def test_blank_options_are_treated_as_unset() -> None:
    emission = resolve_emission_config(options={"pattern_override": "  ", "file_extension_filter": ""})

    assert emission.pattern_source == DEFAULT_PATTERN
    assert emission.file_extensions == DEFAULT_FILE_EXTENSIONS


def test_invalid_override_is_a_config_error() -> None:
    with pytest.raises(ConfigError):
        resolve_emission_config(options={"pattern_override": "(?<value>["})


def test_unknown_mode_is_a_config_error() -> None:
    with pytest.raises(ConfigError):
        resolve_emission_config(mode="separate")


def test_accepts_matches_suffix_case_sensitively() -> None:
    emission = resolve_emission_config()

    assert emission.accepts("Pages/Index.razor")
    assert emission.accepts("Views/Home/Index.cshtml")
    assert not emission.accepts("Pages/Index.RAZOR")
    assert not emission.accepts("Program.cs")


def test_fingerprint_tracks_output_affecting_settings() -> None:
    base = resolve_emission_config()
    same = resolve_emission_config(mode="categories")
    other = resolve_emission_config(options={"file_extension_filter": ".razor"})

    assert base.fingerprint == same.fingerprint
    assert base.fingerprint != other.fingerprint


def test_parse_option_pairs() -> None:
    assert parse_option_pairs(["a=1", "b = x=y"]) == {"a": "1", "b": " x=y"}
    with pytest.raises(ConfigError):
        parse_option_pairs(["missing-separator"])
