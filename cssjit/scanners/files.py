"""Scanner for Razor views and other additional text files."""

from __future__ import annotations

import threading
from typing import Optional

from .base import FileScanner
from ..config import EmissionConfig
from ..models import AdditionalFile, ScannerResult
from ..patterns import extract


class MarkupFileScanner(FileScanner):
    """Runs the class pattern over every file matching the extension filter."""

    category = "files"
    accessor = "FileClassValues"

    def supports(self, file: AdditionalFile, config: EmissionConfig) -> bool:
        return config.accepts(file.path)

    def scan(
        self,
        file: AdditionalFile,
        config: EmissionConfig,
        cancel: threading.Event | None = None,
    ) -> Optional[ScannerResult]:
        if not self.supports(file, config):
            return None
        classes = extract(file.get_text(), config.pattern, cancel=cancel)
        return ScannerResult(
            category=self.category,
            path=file.path,
            line=0,
            classes=tuple(classes),
        )
