"""Configuration loading for cssjit (.cssjit.yml and host options)."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .patterns import DEFAULT_PATTERN, ClassPattern, PatternError, compile_pattern

CONFIG_FILENAME = ".cssjit.yml"

DEFAULT_FILE_EXTENSIONS: Tuple[str, ...] = (".cshtml", ".razor")
DEFAULT_HELPER_METHODS: Tuple[str, ...] = ("CssClass",)

EMIT_MODES: Tuple[str, ...] = ("combined", "categories")
DEFAULT_EMIT_MODE = "combined"
DEFAULT_OUTPUT_DIR = "Generated"

# Host option names; the build-property spellings are accepted as aliases.
PATTERN_OPTION_KEYS = ("pattern_override", "fileparsergenerator_razor_regex")
EXTENSION_OPTION_KEYS = (
    "file_extension_filter",
    "fileparsergenerator_razor_file_extensions",
)


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be parsed or resolved."""


@dataclass
class ScannerConfig:
    """Scanner enablement."""

    enabled: List[str] = field(default_factory=list)


@dataclass
class EmitConfig:
    """Where and how generated sources are written."""

    mode: Optional[str] = None
    output_dir: Optional[str] = None


@dataclass
class CssJitConfig:
    """Represents the settings defined in .cssjit.yml."""

    root: Path
    pattern: Optional[str] = None
    file_extensions: List[str] = field(default_factory=list)
    helper_methods: List[str] = field(default_factory=list)
    scanners: ScannerConfig = field(default_factory=ScannerConfig)
    emit: EmitConfig = field(default_factory=EmitConfig)
    exclude_paths: List[str] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=dict)

    @property
    def output_dir(self) -> Path:
        return self.root / (self.emit.output_dir or DEFAULT_OUTPUT_DIR)


@dataclass(frozen=True)
class EmissionConfig:
    """Immutable settings for one generation pass."""

    pattern: ClassPattern
    file_extensions: Tuple[str, ...] = DEFAULT_FILE_EXTENSIONS
    helper_methods: Tuple[str, ...] = DEFAULT_HELPER_METHODS
    mode: str = DEFAULT_EMIT_MODE

    @property
    def pattern_source(self) -> str:
        return self.pattern.source

    def accepts(self, path: str) -> bool:
        """Return True when ``path`` ends with one of the configured suffixes."""
        return any(path.endswith(suffix) for suffix in self.file_extensions)

    @property
    def fingerprint(self) -> str:
        """Digest of every setting that changes scanner output."""
        digest = hashlib.sha256()
        for part in (self.pattern.source, *self.file_extensions, "\0", *self.helper_methods):
            digest.update(part.encode("utf-8"))
            digest.update(b"\0")
        return digest.hexdigest()


def default_emission_config() -> EmissionConfig:
    return EmissionConfig(pattern=compile_pattern(DEFAULT_PATTERN))


def load_config(config_path: Path) -> CssJitConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CssJitConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    scanner_data = _as_dict(data.get("scanners"))
    scanners = ScannerConfig()
    if scanner_data:
        scanners.enabled = _as_str_list(scanner_data.get("enabled"))

    emit_data = _as_dict(data.get("emit"))
    emit = EmitConfig()
    if emit_data:
        emit.mode = _as_str(emit_data.get("mode"))
        emit.output_dir = _as_str(emit_data.get("output_dir"))

    options = {
        str(key): str(value)
        for key, value in _as_dict(data.get("options")).items()
        if value is not None
    }

    return CssJitConfig(
        root=root,
        pattern=_as_str(data.get("pattern")),
        file_extensions=_split_extensions(data.get("file_extensions")),
        helper_methods=_as_str_list(data.get("helper_methods")),
        scanners=scanners,
        emit=emit,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        options=options,
    )


def resolve_emission_config(
    config: CssJitConfig | None = None,
    options: Mapping[str, str] | None = None,
    *,
    mode: str | None = None,
) -> EmissionConfig:
    """Merge file settings with host options and compile the class pattern.

    Host options (``options``) win over ``config.options``, which win over
    the top-level file settings. An unusable pattern is a configuration
    error; it never falls back to the default pattern.
    """

    merged: Dict[str, str] = {}
    if config is not None:
        merged.update(config.options)
    if options:
        merged.update(options)

    pattern_source = _first_option(merged, PATTERN_OPTION_KEYS)
    if pattern_source is None and config is not None and config.pattern:
        pattern_source = config.pattern
    if pattern_source is None:
        pattern_source = DEFAULT_PATTERN
    try:
        pattern = compile_pattern(pattern_source)
    except PatternError as exc:
        raise ConfigError(str(exc)) from exc

    extensions: Sequence[str] = ()
    extension_option = _first_option(merged, EXTENSION_OPTION_KEYS)
    if extension_option is not None:
        extensions = _split_extensions(extension_option)
    elif config is not None and config.file_extensions:
        extensions = config.file_extensions
    if not extensions:
        extensions = DEFAULT_FILE_EXTENSIONS

    helpers: Sequence[str] = ()
    if config is not None and config.helper_methods:
        helpers = config.helper_methods
    if not helpers:
        helpers = DEFAULT_HELPER_METHODS

    resolved_mode = mode or (config.emit.mode if config is not None else None) or DEFAULT_EMIT_MODE
    resolved_mode = resolved_mode.strip().lower()
    if resolved_mode not in EMIT_MODES:
        choices = ", ".join(EMIT_MODES)
        raise ConfigError(f"Unknown emit mode '{resolved_mode}' (expected one of: {choices})")

    return EmissionConfig(
        pattern=pattern,
        file_extensions=tuple(extensions),
        helper_methods=tuple(helpers),
        mode=resolved_mode,
    )


def parse_option_pairs(pairs: Sequence[str]) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` strings from the command line."""
    options: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigError(f"Expected KEY=VALUE, got '{pair}'")
        options[key] = value
    return options


def _first_option(options: Mapping[str, str], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = options.get(key)
        if value is not None and value.strip():
            return value
    return None


def _split_extensions(value: Any) -> List[str]:
    if isinstance(value, str):
        items = value.split("|")
    else:
        items = _as_str_list(value)
    return [item.strip() for item in items if item.strip()]


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "CssJitConfig",
    "DEFAULT_FILE_EXTENSIONS",
    "DEFAULT_HELPER_METHODS",
    "EMIT_MODES",
    "EmissionConfig",
    "EmitConfig",
    "ScannerConfig",
    "default_emission_config",
    "load_config",
    "parse_option_pairs",
    "resolve_emission_config",
]
