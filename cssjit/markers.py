"""Discovery of the partial class that receives the generated accessors."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .logging import get_logger
from .models import MarkerDeclaration, SourceUnit, TypeDeclaration

MARKER_CLASS_NAME = "MonorailCSS"

_LOGGER = get_logger("markers")


def is_marker_candidate(declaration: TypeDeclaration) -> bool:
    """Return True for ``partial`` classes named MonorailCSS in any casing.

    Runs against every class declaration, so it only looks at syntax.
    """

    if not declaration.is_partial:
        return False
    return declaration.name.casefold() == MARKER_CLASS_NAME.casefold()


def to_marker(declaration: TypeDeclaration) -> MarkerDeclaration:
    return MarkerDeclaration(
        namespace=declaration.namespace,
        name=declaration.name,
        modifiers=declaration.modifier_text,
        is_static="static" in declaration.modifiers,
        path=declaration.path,
        line=declaration.line,
    )


def find_markers(unit: SourceUnit) -> List[MarkerDeclaration]:
    """Return the marker candidates of one unit in declaration order."""
    return [to_marker(decl) for decl in unit.declarations if is_marker_candidate(decl)]


def discover_markers(units: Iterable[SourceUnit]) -> List[MarkerDeclaration]:
    """Return every marker candidate across ``units``, in input order."""
    candidates: List[MarkerDeclaration] = []
    for unit in units:
        candidates.extend(find_markers(unit))
    return candidates


def select_marker(candidates: Sequence[MarkerDeclaration]) -> Optional[MarkerDeclaration]:
    """Pick the marker to generate into: the first candidate, or None.

    Later candidates are ignored with a warning; generation still proceeds
    into the first one.
    """

    if not candidates:
        return None
    chosen = candidates[0]
    if len(candidates) > 1:
        ignored = ", ".join(_describe(marker) for marker in candidates[1:])
        _LOGGER.warning(
            "Found %d %s declarations; using %s and ignoring %s",
            len(candidates),
            MARKER_CLASS_NAME,
            _describe(chosen),
            ignored,
        )
    return chosen


def _describe(marker: MarkerDeclaration) -> str:
    qualified = f"{marker.namespace}.{marker.name}" if marker.namespace else marker.name
    if marker.path:
        return f"{qualified} ({marker.path}:{marker.line})"
    return qualified


__all__ = [
    "MARKER_CLASS_NAME",
    "discover_markers",
    "find_markers",
    "is_marker_candidate",
    "select_marker",
    "to_marker",
]
