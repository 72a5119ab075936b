"""Merging of scanner results into the class set of the marker."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import AggregatedClassSet, MarkerDeclaration, ScannerResult

ROOT_NAMESPACE = "Root"
GLOBAL_NAMESPACE = "<global namespace>"

_LOGGER = get_logger("aggregator")


def resolve_namespace(namespace: str | None) -> str:
    """Return the namespace to emit into; the global namespace maps to ``Root``."""
    if namespace is None or not namespace.strip() or namespace == GLOBAL_NAMESPACE:
        return ROOT_NAMESPACE
    return namespace.strip()


def union_classes(groups: Iterable[Sequence[str]]) -> Tuple[str, ...]:
    """Exact-match union of ``groups``, keeping first-occurrence order.

    No case folding, trimming or whitespace normalization: ``"a b"`` and
    ``"a  b"`` are different entries.
    """

    return tuple(dict.fromkeys(value for group in groups for value in group))


def aggregate(
    marker: MarkerDeclaration | None,
    results: Iterable[ScannerResult],
    categories: Sequence[str] = (),
) -> Optional[AggregatedClassSet]:
    """Union every scanner result under ``marker``.

    Returns None when there is no marker. ``categories`` fixes the order of
    the per-category groups (and therefore of the combined tuple); categories
    not listed follow in the order they first appear.
    """

    if marker is None:
        _LOGGER.debug("No marker declaration; skipping aggregation")
        return None

    grouped: Dict[str, List[Tuple[str, ...]]] = {name: [] for name in categories}
    for result in results:
        grouped.setdefault(result.category, []).append(result.classes)

    per_category = {name: union_classes(groups) for name, groups in grouped.items()}
    classes = union_classes(per_category.values())
    _LOGGER.debug(
        "Aggregated %d unique classes (%s)",
        len(classes),
        ", ".join(f"{name}={len(values)}" for name, values in per_category.items()) or "none",
    )
    return AggregatedClassSet(
        marker=marker,
        namespace=resolve_namespace(marker.namespace),
        classes=classes,
        categories=per_category,
    )


__all__ = [
    "GLOBAL_NAMESPACE",
    "ROOT_NAMESPACE",
    "aggregate",
    "resolve_namespace",
    "union_classes",
]
