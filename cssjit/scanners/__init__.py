"""Scanner plugin implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .attributes import AttributeScanner
from .base import FILE_INPUT, SOURCE_INPUT, FileScanner, Scanner, SourceScanner
from .files import MarkupFileScanner
from .helper_calls import HelperCallScanner
from .markup import MarkupScanner

_ENTRY_POINT_GROUP = "cssjit.scanners"

# Registration order is the category order of the aggregated output.
_BUILTIN_FACTORIES: dict[str, Callable[[], Scanner]] = {
    "attributes": AttributeScanner,
    "markup": MarkupScanner,
    "helpers": HelperCallScanner,
    "files": MarkupFileScanner,
}


def discover_scanners(enabled: Sequence[str] | None = None) -> List[Scanner]:
    """Return instantiated scanners, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    scanners: List[Scanner] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Scanner]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Scanner):
            raise TypeError(f"Scanner factory for '{name}' did not return a Scanner instance")
        scanners.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load scanner entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Scanner:
            return _coerce_scanner(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown scanners requested: {missing}")

    return scanners


def _coerce_scanner(obj: object) -> Scanner:
    if isinstance(obj, Scanner):
        return obj
    if isinstance(obj, type) and issubclass(obj, Scanner):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Scanner):
            return instance
    raise TypeError("Scanner entry point must be a Scanner subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "AttributeScanner",
    "FILE_INPUT",
    "FileScanner",
    "HelperCallScanner",
    "MarkupFileScanner",
    "MarkupScanner",
    "SOURCE_INPUT",
    "Scanner",
    "SourceScanner",
    "discover_scanners",
]
