"""Base classes for scanner plugins."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..config import EmissionConfig
from ..logging import TRACE, get_logger
from ..models import AdditionalFile, CallSite, ScannerResult, SourceUnit

SOURCE_INPUT = "source"
FILE_INPUT = "file"

_LOGGER = get_logger("scanners")


class Scanner(ABC):
    """Contract shared by every scanner: a category and its generated accessor."""

    category: str = ""
    accessor: str = ""
    input_kind: str = SOURCE_INPUT
    cache_version = "1"


class SourceScanner(Scanner):
    """Scans the call sites of one compilation unit."""

    input_kind = SOURCE_INPUT

    @abstractmethod
    def matches(self, call: CallSite, config: EmissionConfig) -> bool:
        """Return True when ``call`` has the shape this scanner reads."""

    @abstractmethod
    def extract(
        self,
        call: CallSite,
        config: EmissionConfig,
        cancel: threading.Event | None = None,
    ) -> Optional[Tuple[str, ...]]:
        """Return the class literals of a matching call, or None to skip it."""

    def scan(
        self,
        unit: SourceUnit,
        config: EmissionConfig,
        cancel: threading.Event | None = None,
    ) -> List[ScannerResult]:
        results: List[ScannerResult] = []
        for call in unit.calls:
            if not self.matches(call, config):
                continue
            classes = self.extract(call, config, cancel)
            if classes is None:
                _LOGGER.log(
                    TRACE,
                    "%s: skipping %s call at %s:%d (argument is not a literal)",
                    self.category,
                    call.name,
                    call.path or unit.path,
                    call.line,
                )
                continue
            results.append(
                ScannerResult(
                    category=self.category,
                    path=unit.path,
                    line=call.line,
                    classes=classes,
                )
            )
        return results


class FileScanner(Scanner):
    """Scans the full text of one additional file."""

    input_kind = FILE_INPUT

    @abstractmethod
    def supports(self, file: AdditionalFile, config: EmissionConfig) -> bool:
        """Return True when this scanner should read ``file``."""

    @abstractmethod
    def scan(
        self,
        file: AdditionalFile,
        config: EmissionConfig,
        cancel: threading.Event | None = None,
    ) -> Optional[ScannerResult]:
        """Produce the classes referenced anywhere in ``file``."""
