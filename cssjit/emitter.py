"""Rendering of aggregated class sets into C# source artifacts."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

from jinja2 import Environment, FileSystemLoader

from .config import DEFAULT_EMIT_MODE, EMIT_MODES, ConfigError
from .models import AggregatedClassSet, Artifact

COMBINED_ACCESSOR = "CssClassValues"
COMBINED_ARTIFACT = "monorail-css-jit.g.cs"

DEFAULT_ACCESSORS: Dict[str, str] = {
    "attributes": "AttributeClassValues",
    "markup": "MarkupClassValues",
    "helpers": "CssClassCallValues",
    "files": "FileClassValues",
}

_SIMPLE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\0": "\\0",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}
# C# treats these as line terminators inside a regular string literal.
_LINE_SEPARATORS = {"\u0085", "\u2028", "\u2029"}


def csharp_string(value: str) -> str:
    """Return ``value`` as a quoted C# regular string literal."""
    parts: List[str] = []
    for char in value:
        escaped = _SIMPLE_ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
        elif ord(char) < 0x20 or char in _LINE_SEPARATORS:
            parts.append(f"\\u{ord(char):04x}")
        else:
            parts.append(char)
    return '"' + "".join(parts) + '"'


@dataclass(frozen=True)
class AccessorModel:
    """A static method returning a literal string array."""

    namespace: str
    type_name: str
    modifiers: str
    accessor: str
    visibility: str
    literals: Tuple[str, ...]
    summary: str = ""
    remarks: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CombinerModel:
    """A static method returning the union of other accessors."""

    namespace: str
    type_name: str
    modifiers: str
    accessor: str
    sources: Tuple[str, ...] = field(default_factory=tuple)


def accessor_name(category: str) -> str:
    parts = [part for part in re.split(r"[^A-Za-z0-9]+", category) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts) + "ClassValues"


def category_artifact_name(category: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", category.lower()).strip("-")
    return f"monorail-css-{slug}-jit.g.cs"


def category_counts(class_set: AggregatedClassSet) -> Tuple[str, ...]:
    """One line per scanner category, e.g. ``markup: 3 classes``."""
    return tuple(
        f"{category}: {len(values)} {'class' if len(values) == 1 else 'classes'}"
        for category, values in class_set.categories.items()
    )


class Emitter:
    """Renders class sets through the templates shipped in ``templates/``.

    ``combined`` mode writes one file whose ``CssClassValues()`` returns the
    aggregated array. ``categories`` mode writes one private accessor per
    scanner category plus a ``CssClassValues()`` that unions them.
    """

    def __init__(
        self,
        mode: str = DEFAULT_EMIT_MODE,
        accessors: Mapping[str, str] | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        if mode not in EMIT_MODES:
            choices = ", ".join(EMIT_MODES)
            raise ConfigError(f"Unknown emit mode '{mode}' (expected one of: {choices})")
        self.mode = mode
        self._accessors = dict(DEFAULT_ACCESSORS)
        if accessors:
            self._accessors.update(accessors)
        self._env = self._create_env(templates_dir)

    def emit(self, class_set: AggregatedClassSet) -> List[Artifact]:
        if self.mode == "categories":
            return self._emit_categories(class_set)
        return [self._emit_combined(class_set)]

    def render_accessor(self, model: AccessorModel) -> str:
        return self._env.get_template("accessor.cs.j2").render(model=model)

    def render_combiner(self, model: CombinerModel) -> str:
        return self._env.get_template("combiner.cs.j2").render(model=model)

    def accessor_for(self, category: str) -> str:
        return self._accessors.get(category) or accessor_name(category)

    def _emit_combined(self, class_set: AggregatedClassSet) -> Artifact:
        marker = class_set.marker
        model = AccessorModel(
            namespace=class_set.namespace,
            type_name=marker.name,
            modifiers=marker.modifiers,
            accessor=COMBINED_ACCESSOR,
            visibility="public",
            literals=class_set.classes,
            summary="Returns every CSS class discovered in markup, render trees and marked calls.",
            remarks=category_counts(class_set),
        )
        return Artifact(name=COMBINED_ARTIFACT, text=self.render_accessor(model))

    def _emit_categories(self, class_set: AggregatedClassSet) -> List[Artifact]:
        marker = class_set.marker
        artifacts: List[Artifact] = []
        sources: List[str] = []
        for category, literals in class_set.categories.items():
            accessor = self.accessor_for(category)
            sources.append(accessor)
            model = AccessorModel(
                namespace=class_set.namespace,
                type_name=marker.name,
                modifiers=marker.modifiers,
                accessor=accessor,
                visibility="private",
                literals=literals,
            )
            artifacts.append(
                Artifact(name=category_artifact_name(category), text=self.render_accessor(model))
            )
        combiner = CombinerModel(
            namespace=class_set.namespace,
            type_name=marker.name,
            modifiers=marker.modifiers,
            accessor=COMBINED_ACCESSOR,
            sources=tuple(sources),
        )
        artifacts.append(Artifact(name=COMBINED_ARTIFACT, text=self.render_combiner(combiner)))
        return artifacts

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.filters["csharp_string"] = csharp_string
        return env


__all__ = [
    "AccessorModel",
    "COMBINED_ACCESSOR",
    "COMBINED_ARTIFACT",
    "CombinerModel",
    "DEFAULT_ACCESSORS",
    "Emitter",
    "accessor_name",
    "category_artifact_name",
    "category_counts",
    "csharp_string",
]
