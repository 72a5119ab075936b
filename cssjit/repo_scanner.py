"""Project walking and manifest building for the scanners."""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import ConfigError, load_config
from .logging import get_logger
from .models import FileMeta, RepoManifest

SOURCE_KIND = "source"
GENERATED_KIND = "generated"
TEXT_KIND = "text"

# Build output, IDE state and VCS metadata never hold class names we want.
_SKIPPED_DIRS = frozenset(
    {
        ".cssjit",
        ".git",
        ".hg",
        ".idea",
        ".svn",
        ".vs",
        ".vscode",
        "__pycache__",
        "bin",
        "node_modules",
        "obj",
    }
)
_SKIPPED_FILES = frozenset({".DS_Store", "Thumbs.db"})

_STATE_DIR = ".cssjit"
_MANIFEST_CACHE = "manifest_cache.json"
_MANIFEST_CACHE_VERSION = 1

_LOGGER = get_logger("repo_scanner")


@dataclass(frozen=True)
class IgnoreRule:
    """One gitignore-style pattern."""

    pattern: str
    directory_only: bool = False
    anchored: bool = False
    negate: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["IgnoreRule"]:
        text = line.strip()
        if not text or text.startswith("#"):
            return None
        negate = text.startswith("!")
        text = text.lstrip("!")
        directory_only = text.endswith("/")
        anchored = text.startswith("/") or "/" in text.strip("/")
        text = text.strip("/")
        if not text:
            return None
        return cls(pattern=text, directory_only=directory_only, anchored=anchored, negate=negate)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.anchored:
            if fnmatchcase(rel_path, self.pattern):
                return not self.directory_only or is_dir
            # Files below an ignored directory are covered by the walk pruning.
            return False
        if self.directory_only and not is_dir:
            return False
        return fnmatchcase(rel_path.rsplit("/", 1)[-1], self.pattern)


class IgnoreRules:
    """Ordered rule list where the last matching rule decides."""

    def __init__(self, rules: Iterable[IgnoreRule] = ()) -> None:
        self._rules: Tuple[IgnoreRule, ...] = tuple(rules)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "IgnoreRules":
        return cls(rule for rule in map(IgnoreRule.parse, lines) if rule is not None)

    @classmethod
    def for_project(cls, root: Path, exclude_paths: Sequence[str]) -> "IgnoreRules":
        lines: List[str] = []
        gitignore = root / ".gitignore"
        if gitignore.is_file():
            lines.extend(gitignore.read_text(encoding="utf-8").splitlines())
        lines.extend(exclude_paths)
        return cls.from_lines(lines)

    def ignored(self, rel_path: str, is_dir: bool) -> bool:
        verdict = False
        for rule in self._rules:
            if rule.matches(rel_path, is_dir):
                verdict = not rule.negate
        return verdict


class ManifestCache:
    """Size/mtime keyed hash cache so unchanged files are not re-read."""

    def __init__(self, root: Path) -> None:
        self._path = root / _STATE_DIR / _MANIFEST_CACHE
        self._previous = self._load()
        self._current: Dict[str, Dict[str, object]] = {}

    def hash_for(self, rel_path: str, path: Path, size: int, mtime_ns: int) -> str:
        entry = self._previous.get(rel_path)
        if entry and entry.get("size") == size and entry.get("mtime_ns") == mtime_ns:
            file_hash = str(entry["hash"])
        else:
            file_hash = _hash_file(path)
        self._current[rel_path] = {"size": size, "mtime_ns": mtime_ns, "hash": file_hash}
        return file_hash

    def save(self) -> None:
        payload = {"version": _MANIFEST_CACHE_VERSION, "files": self._current}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            _LOGGER.debug("Could not store manifest cache: %s", exc)

    def _load(self) -> Dict[str, Dict[str, object]]:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        if not isinstance(payload, dict) or payload.get("version") != _MANIFEST_CACHE_VERSION:
            return {}
        files = payload.get("files")
        if not isinstance(files, dict):
            return {}
        return {
            rel_path: entry
            for rel_path, entry in files.items()
            if isinstance(entry, dict)
            and isinstance(entry.get("size"), int)
            and isinstance(entry.get("mtime_ns"), int)
            and isinstance(entry.get("hash"), str)
        }


def detect_kind(relative_path: str) -> str:
    """Classify a path as C# source, previously generated C#, or other text."""
    lower = relative_path.lower()
    if lower.endswith(".g.cs"):
        return GENERATED_KIND
    if lower.endswith(".cs"):
        return SOURCE_KIND
    return TEXT_KIND


def _hash_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


class RepoScanner:
    """Walks the project to produce a normalized manifest."""

    def scan(
        self,
        root: str,
        *,
        exclude_paths: Sequence[str] | None = None,
        persist: bool = True,
    ) -> RepoManifest:
        """Return a manifest of project files in sorted path order.

        ``exclude_paths`` defaults to the ``exclude_paths`` of the project's
        ``.cssjit.yml``. With ``persist=False`` the hash cache is only read.
        """

        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        if exclude_paths is None:
            exclude_paths = _configured_excludes(root_path)
        rules = IgnoreRules.for_project(root_path, exclude_paths)
        cache = ManifestCache(root_path)

        files: List[FileMeta] = []
        for path, rel_path in self._walk(root_path, rules):
            stat_result = path.stat()
            files.append(
                FileMeta(
                    path=rel_path,
                    size=stat_result.st_size,
                    kind=detect_kind(rel_path),
                    hash=cache.hash_for(rel_path, path, stat_result.st_size, stat_result.st_mtime_ns),
                )
            )
        if persist:
            cache.save()

        files.sort(key=lambda meta: meta.path)
        _LOGGER.debug("Manifest for %s holds %d files", root_path, len(files))
        return RepoManifest(root=str(root_path), files=files)

    @staticmethod
    def _walk(root: Path, rules: IgnoreRules) -> Iterator[Tuple[Path, str]]:
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            prefix = "" if current == root else current.relative_to(root).as_posix() + "/"
            dirnames[:] = sorted(
                name
                for name in dirnames
                if name not in _SKIPPED_DIRS and not rules.ignored(prefix + name, True)
            )
            for filename in sorted(filenames):
                rel_path = prefix + filename
                if filename in _SKIPPED_FILES or rules.ignored(rel_path, False):
                    continue
                yield current / filename, rel_path


def _configured_excludes(root: Path) -> List[str]:
    try:
        return load_config(root).exclude_paths
    except ConfigError:
        # The orchestrator reports configuration errors; walking still works.
        return []


__all__ = [
    "GENERATED_KIND",
    "IgnoreRule",
    "IgnoreRules",
    "ManifestCache",
    "RepoScanner",
    "SOURCE_KIND",
    "TEXT_KIND",
    "detect_kind",
]
