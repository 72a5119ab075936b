"""Incremental generation runs over a project directory."""

from __future__ import annotations

import hashlib
import inspect
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from . import __version__
from .aggregator import union_classes
from .config import CssJitConfig, EmissionConfig, load_config, resolve_emission_config
from .emitter import Emitter
from .logging import get_logger
from .markers import MARKER_CLASS_NAME, find_markers, select_marker
from .models import (
    AdditionalFile,
    AggregatedClassSet,
    Artifact,
    FileMeta,
    MarkerDeclaration,
    RepoManifest,
    ScannerResult,
    SourceUnit,
)
from .pipeline import finish, scan_file, scan_unit
from .repo_scanner import SOURCE_KIND, RepoScanner
from .scanners import FILE_INPUT, Scanner, discover_scanners
from .stores import ResultCache
from .syntax import CSharpSyntaxReader

GENERATED_PREFIX = "monorail-css-"
GENERATED_SUFFIX = "-jit.g.cs"
GENERATED_COMBINED = "monorail-css-jit.g.cs"


@dataclass
class GenerationOutcome:
    """Result of a generation run."""

    marker: Optional[MarkerDeclaration]
    class_set: Optional[AggregatedClassSet]
    artifacts: List[Artifact]
    output_dir: Path
    written: List[Path] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)
    dry_run: bool = False
    reused: int = 0
    computed: int = 0


@dataclass
class _ScanOutcome:
    markers: List[MarkerDeclaration]
    results: List[ScannerResult]
    reused: int
    computed: int


class Orchestrator:
    """Coordinates the scan, aggregate and emit stages with per-unit caching."""

    def __init__(
        self,
        scanner: RepoScanner | None = None,
        scanners: Optional[Iterable[Scanner]] = None,
        reader: CSharpSyntaxReader | None = None,
        emitter: Emitter | None = None,
    ) -> None:
        self.scanner = scanner or RepoScanner()
        self._scanner_overrides = list(scanners) if scanners is not None else None
        self.reader = reader or CSharpSyntaxReader()
        self.emitter = emitter
        self.logger = get_logger("orchestrator")

    def run(
        self,
        path: str,
        *,
        output_dir: str | Path | None = None,
        mode: str | None = None,
        options: Mapping[str, str] | None = None,
        dry_run: bool = False,
        cancel: threading.Event | None = None,
    ) -> GenerationOutcome:
        """Scan the project at ``path`` and write the generated sources."""
        repo_path = Path(path).expanduser().resolve()
        self.logger.info("Starting generation for %s", repo_path)
        config = load_config(repo_path)
        emission = resolve_emission_config(config, options, mode=mode)
        scanners = self._select_scanners(config)
        manifest = self.scanner.scan(
            str(repo_path), exclude_paths=config.exclude_paths, persist=not dry_run
        )
        self.logger.debug("Scanner discovered %d files", len(manifest.files))

        scan = self._execute(manifest, scanners, emission, cancel, persist=not dry_run)
        marker = select_marker(scan.markers)
        target_dir = self._resolve_output_dir(repo_path, config, output_dir)

        result = finish(marker, scan.results, scanners, emission, emitter=self.emitter)
        outcome = GenerationOutcome(
            marker=result.marker,
            class_set=result.class_set,
            artifacts=result.artifacts,
            output_dir=target_dir,
            dry_run=dry_run,
            reused=scan.reused,
            computed=scan.computed,
        )
        if result.class_set is None:
            self.logger.info(
                "No partial %s class found; nothing to generate", MARKER_CLASS_NAME
            )
        else:
            self.logger.info(
                "Discovered %d CSS classes for %s",
                len(result.class_set.classes),
                result.class_set.marker.name,
            )
        if not dry_run:
            outcome.written = self._write_artifacts(target_dir, result.artifacts)
            outcome.removed = self._remove_stale(target_dir, result.artifacts)
        return outcome

    def collect(
        self,
        path: str,
        *,
        options: Mapping[str, str] | None = None,
        cancel: threading.Event | None = None,
    ) -> Tuple[str, ...]:
        """Return every discovered class name, whether or not a marker exists."""
        repo_path = Path(path).expanduser().resolve()
        config = load_config(repo_path)
        emission = resolve_emission_config(config, options)
        scanners = self._select_scanners(config)
        manifest = self.scanner.scan(
            str(repo_path), exclude_paths=config.exclude_paths, persist=False
        )
        scan = self._execute(manifest, scanners, emission, cancel, persist=False)
        return union_classes(result.classes for result in scan.results)

    # ------------------------------------------------------------------
    # Stages

    def _execute(
        self,
        manifest: RepoManifest,
        scanners: Sequence[Scanner],
        emission: EmissionConfig,
        cancel: threading.Event | None,
        *,
        persist: bool = True,
    ) -> _ScanOutcome:
        root = Path(manifest.root)
        cache = self._load_result_cache(root)
        sources = manifest.of_kind(SOURCE_KIND)
        additional = [meta for meta in manifest.files if emission.accepts(meta.path)]
        units: Dict[str, Optional[SourceUnit]] = {}
        texts: Dict[str, Optional[AdditionalFile]] = {}

        def load_unit(meta: FileMeta) -> Optional[SourceUnit]:
            if meta.path not in units:
                source = self._read_text(root, meta)
                units[meta.path] = (
                    None
                    if source is None
                    else self.reader.read(meta.path, source, file_hash=meta.hash)
                )
            return units[meta.path]

        def load_file(meta: FileMeta) -> Optional[AdditionalFile]:
            if meta.path not in texts:
                text = self._read_text(root, meta)
                texts[meta.path] = (
                    None if text is None else AdditionalFile(path=meta.path, text=text, hash=meta.hash)
                )
            return texts[meta.path]

        used_keys: List[str] = []
        reused = 0
        computed = 0

        markers: List[MarkerDeclaration] = []
        marker_signature = self._marker_signature()
        for meta in sources:
            key = f"markers:{meta.path}"
            used_keys.append(key)
            cached_markers = cache.get_markers(key, signature=marker_signature, fingerprint=meta.hash)
            if cached_markers is not None:
                markers.extend(cached_markers)
                continue
            unit = load_unit(meta)
            found = find_markers(unit) if unit is not None else []
            cache.store_markers(key, signature=marker_signature, fingerprint=meta.hash, markers=found)
            markers.extend(found)

        results: List[ScannerResult] = []
        for scanner in scanners:
            scanner_key = self._scanner_cache_key(scanner)
            signature = f"{self._scanner_signature(scanner)}:{emission.fingerprint}"
            inputs = additional if scanner.input_kind == FILE_INPUT else sources
            for meta in inputs:
                key = f"{scanner_key}:{meta.path}"
                used_keys.append(key)
                cached = cache.get(key, signature=signature, fingerprint=meta.hash)
                if cached is not None:
                    reused += 1
                    results.extend(cached)
                    continue
                computed += 1
                if scanner.input_kind == FILE_INPUT:
                    file = load_file(meta)
                    found_results = [] if file is None else scan_file(scanner, file, emission, cancel)
                else:
                    unit = load_unit(meta)
                    found_results = [] if unit is None else scan_unit(scanner, unit, emission, cancel)
                cache.store(key, signature=signature, fingerprint=meta.hash, results=found_results)
                results.extend(found_results)

        self.logger.debug("Scanner results: %d reused, %d computed", reused, computed)
        cache.prune(used_keys)
        if persist:
            cache.persist()
        return _ScanOutcome(markers=markers, results=results, reused=reused, computed=computed)

    def _write_artifacts(self, output_dir: Path, artifacts: Sequence[Artifact]) -> List[Path]:
        written: List[Path] = []
        for artifact in artifacts:
            target = output_dir / artifact.name
            if target.exists() and target.read_text(encoding="utf-8") == artifact.text:
                self.logger.debug("%s is up to date", target)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(artifact.text, encoding="utf-8")
            self.logger.info("Wrote %s", target)
            written.append(target)
        return written

    def _remove_stale(self, output_dir: Path, artifacts: Sequence[Artifact]) -> List[Path]:
        if not output_dir.is_dir():
            return []
        current = {artifact.name for artifact in artifacts}
        removed: List[Path] = []
        for candidate in sorted(output_dir.iterdir()):
            name = candidate.name
            owned = name == GENERATED_COMBINED or (
                name.startswith(GENERATED_PREFIX) and name.endswith(GENERATED_SUFFIX)
            )
            if owned and name not in current and candidate.is_file():
                candidate.unlink()
                self.logger.info("Removed stale %s", candidate)
                removed.append(candidate)
        return removed

    # ------------------------------------------------------------------
    # Helpers

    def _select_scanners(self, config: CssJitConfig) -> List[Scanner]:
        if self._scanner_overrides is not None:
            return list(self._scanner_overrides)
        enabled = config.scanners.enabled or None
        try:
            return discover_scanners(enabled)
        except ValueError as exc:
            raise RuntimeError(str(exc)) from exc

    @staticmethod
    def _resolve_output_dir(
        repo_path: Path, config: CssJitConfig, output_dir: str | Path | None
    ) -> Path:
        if output_dir is None:
            return config.output_dir
        candidate = Path(output_dir).expanduser()
        return candidate if candidate.is_absolute() else repo_path / candidate

    def _read_text(self, root: Path, meta: FileMeta) -> Optional[str]:
        try:
            return (root / meta.path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.debug("Skipping unreadable file %s: %s", meta.path, exc)
            return None

    def _load_result_cache(self, repo_path: Path) -> ResultCache:
        return ResultCache(repo_path / ".cssjit" / "cache.json")

    @staticmethod
    def _scanner_cache_key(scanner: Scanner) -> str:
        return f"{scanner.__class__.__module__}.{scanner.__class__.__qualname__}"

    @staticmethod
    def _scanner_signature(scanner: Scanner) -> str:
        module = scanner.__class__.__module__
        qualname = scanner.__class__.__qualname__
        cache_version = getattr(scanner, "cache_version", None) or "1"
        return (
            f"{module}.{qualname}:{cache_version}:{__version__}:"
            f"{_source_hash(scanner.__class__)}"
        )

    @staticmethod
    def _marker_signature() -> str:
        return f"markers:{MARKER_CLASS_NAME}:{__version__}:{_source_hash(CSharpSyntaxReader)}"


def _source_hash(obj: Callable[..., object] | type) -> str:
    try:
        source = inspect.getsource(obj)
    except (OSError, TypeError):
        return f"{getattr(obj, '__module__', '')}:{getattr(obj, '__qualname__', '')}"
    return hashlib.sha256(source.encode("utf-8")).hexdigest()


__all__ = ["GenerationOutcome", "Orchestrator"]
