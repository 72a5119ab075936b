"""Pure generation stages: scan, discover the marker, aggregate, emit.

Nothing here touches the filesystem or keeps state between calls; the
orchestrator wraps these stages with caching for incremental runs.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .aggregator import aggregate
from .config import EmissionConfig
from .emitter import Emitter
from .markers import discover_markers, select_marker
from .models import (
    AdditionalFile,
    AggregatedClassSet,
    Artifact,
    MarkerDeclaration,
    ScannerResult,
    SourceUnit,
)
from .scanners import FileScanner, Scanner, SourceScanner, discover_scanners


@dataclass
class PipelineResult:
    """Outcome of one generation pass."""

    marker: Optional[MarkerDeclaration]
    class_set: Optional[AggregatedClassSet]
    artifacts: List[Artifact] = field(default_factory=list)
    results: List[ScannerResult] = field(default_factory=list)


def scan_unit(
    scanner: Scanner,
    unit: SourceUnit,
    config: EmissionConfig,
    cancel: threading.Event | None = None,
) -> List[ScannerResult]:
    if not isinstance(scanner, SourceScanner):
        return []
    return scanner.scan(unit, config, cancel)


def scan_file(
    scanner: Scanner,
    file: AdditionalFile,
    config: EmissionConfig,
    cancel: threading.Event | None = None,
) -> List[ScannerResult]:
    if not isinstance(scanner, FileScanner) or not scanner.supports(file, config):
        return []
    result = scanner.scan(file, config, cancel)
    return [result] if result is not None else []


def collect_results(
    scanners: Sequence[Scanner],
    units: Sequence[SourceUnit],
    files: Sequence[AdditionalFile],
    config: EmissionConfig,
    cancel: threading.Event | None = None,
) -> List[ScannerResult]:
    """Run every scanner over its inputs, grouped by scanner then input order."""
    results: List[ScannerResult] = []
    for scanner in scanners:
        for unit in units:
            results.extend(scan_unit(scanner, unit, config, cancel))
        for file in files:
            results.extend(scan_file(scanner, file, config, cancel))
    return results


def generate(
    units: Iterable[SourceUnit],
    files: Iterable[AdditionalFile],
    config: EmissionConfig,
    *,
    scanners: Sequence[Scanner] | None = None,
    emitter: Emitter | None = None,
    cancel: threading.Event | None = None,
) -> PipelineResult:
    """Run the full pass over already-parsed inputs.

    Without a marker declaration the result carries no class set and no
    artifacts.
    """

    unit_list = list(units)
    file_list = list(files)
    active = list(scanners) if scanners is not None else discover_scanners()
    results = collect_results(active, unit_list, file_list, config, cancel)
    marker = select_marker(discover_markers(unit_list))
    return finish(marker, results, active, config, emitter=emitter)


def finish(
    marker: MarkerDeclaration | None,
    results: Sequence[ScannerResult],
    scanners: Sequence[Scanner],
    config: EmissionConfig,
    *,
    emitter: Emitter | None = None,
) -> PipelineResult:
    """Aggregate ``results`` under ``marker`` and render the artifacts."""
    class_set = aggregate(marker, results, [scanner.category for scanner in scanners])
    if class_set is None:
        return PipelineResult(marker=None, class_set=None, results=list(results))
    if emitter is None:
        emitter = Emitter(
            config.mode,
            accessors={scanner.category: scanner.accessor for scanner in scanners if scanner.accessor},
        )
    return PipelineResult(
        marker=marker,
        class_set=class_set,
        artifacts=emitter.emit(class_set),
        results=list(results),
    )


__all__ = [
    "PipelineResult",
    "collect_results",
    "finish",
    "generate",
    "scan_file",
    "scan_unit",
]
