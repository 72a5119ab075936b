"""Persistent cache for per-unit scanner results and marker candidates."""

from __future__ import annotations

from dataclasses import asdict
from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from ..logging import get_logger
from ..models import MarkerDeclaration, ScannerResult

_FORMAT_VERSION = 1
_REQUIRED_FIELDS = ("signature", "fingerprint", "results")

_LOGGER = get_logger("stores.result_cache")

T = TypeVar("T")


class ResultCache:
    """Stores results keyed by scanner and unit, validated by signature and content hash.

    ``signature`` identifies the code and settings that produced an entry;
    ``fingerprint`` is the content hash of the input unit. A mismatch on
    either one is a miss. Entries whose payload no longer decodes are
    treated as misses as well.
    """

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, Any]] = self._read(path) if path is not None else {}
        self._changed = False

    def get(
        self, key: str, *, signature: str, fingerprint: str
    ) -> Optional[List[ScannerResult]]:
        return self._decode(key, signature, fingerprint, _result_from_dict)

    def store(
        self,
        key: str,
        *,
        signature: str,
        fingerprint: str,
        results: Sequence[ScannerResult],
    ) -> None:
        self._write(key, signature, fingerprint, [_result_to_dict(item) for item in results])

    def get_markers(
        self, key: str, *, signature: str, fingerprint: str
    ) -> Optional[List[MarkerDeclaration]]:
        return self._decode(key, signature, fingerprint, _marker_from_dict)

    def store_markers(
        self,
        key: str,
        *,
        signature: str,
        fingerprint: str,
        markers: Sequence[MarkerDeclaration],
    ) -> None:
        self._write(key, signature, fingerprint, [asdict(marker) for marker in markers])

    def prune(self, keys_to_keep: Iterable[str]) -> int:
        """Drop entries for units that no longer exist; return how many went."""
        keep = set(keys_to_keep)
        stale = [key for key in self._entries if key not in keep]
        for key in stale:
            del self._entries[key]
        if stale:
            self._changed = True
            _LOGGER.debug("Pruned %d stale cache entries", len(stale))
        return len(stale)

    def persist(self) -> None:
        if self._path is None or not self._changed:
            return
        document = {"version": _FORMAT_VERSION, "entries": self._entries}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        staging = self._path.with_name(self._path.name + ".tmp")
        staging.write_text(json.dumps(document, indent=2, sort_keys=True), encoding="utf-8")
        staging.replace(self._path)
        self._changed = False

    def clear(self) -> None:
        self._entries = {}
        self._changed = True

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Internal helpers

    def _decode(
        self,
        key: str,
        signature: str,
        fingerprint: str,
        decoder: Callable[[object], Optional[T]],
    ) -> Optional[List[T]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if (entry["signature"], entry["fingerprint"]) != (signature, fingerprint):
            return None
        payload = entry["results"]
        if not isinstance(payload, list):
            return None
        decoded = [decoder(item) for item in payload]
        if any(item is None for item in decoded):
            return None
        return decoded  # type: ignore[return-value]

    def _write(self, key: str, signature: str, fingerprint: str, payload: list) -> None:
        stamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        self._entries[key] = {
            "signature": signature,
            "fingerprint": fingerprint,
            "results": payload,
            "updated_at": stamp,
        }
        self._changed = True

    @staticmethod
    def _read(path: Path) -> Dict[str, Dict[str, Any]]:
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.debug("Ignoring unreadable cache %s: %s", path, exc)
            return {}
        if not isinstance(document, dict) or document.get("version") != _FORMAT_VERSION:
            return {}
        entries = document.get("entries")
        if not isinstance(entries, dict):
            return {}
        return {
            key: raw
            for key, raw in entries.items()
            if isinstance(key, str)
            and isinstance(raw, dict)
            and all(name in raw for name in _REQUIRED_FIELDS)
        }


def _result_to_dict(result: ScannerResult) -> Dict[str, object]:
    return {
        "category": result.category,
        "path": result.path,
        "line": result.line,
        "classes": list(result.classes),
    }


def _result_from_dict(payload: object) -> Optional[ScannerResult]:
    if not isinstance(payload, dict):
        return None
    category, path, line, classes = (
        payload.get("category"),
        payload.get("path"),
        payload.get("line", 0),
        payload.get("classes"),
    )
    if not (isinstance(category, str) and isinstance(path, str) and isinstance(line, int)):
        return None
    if not isinstance(classes, list) or not all(isinstance(item, str) for item in classes):
        return None
    return ScannerResult(category=category, path=path, line=line, classes=tuple(classes))


def _marker_from_dict(payload: object) -> Optional[MarkerDeclaration]:
    if not isinstance(payload, dict):
        return None
    try:
        marker = MarkerDeclaration(**payload)
    except TypeError:
        return None
    if not isinstance(marker.modifiers, str) or not isinstance(marker.is_static, bool):
        return None
    return marker


__all__ = ["ResultCache"]
