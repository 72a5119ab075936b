"""Scanner for literal markup blocks passed to ``AddMarkupContent``."""

from __future__ import annotations

import threading
from typing import Optional, Tuple

from .base import SourceScanner
from ..config import EmissionConfig
from ..models import CallSite
from ..recognizer import extract_markup_literals, is_markup_call


class MarkupScanner(SourceScanner):
    """Pattern-matches the markup literal of each markup-content call."""

    category = "markup"
    accessor = "MarkupClassValues"

    def matches(self, call: CallSite, config: EmissionConfig) -> bool:
        return is_markup_call(call)

    def extract(
        self,
        call: CallSite,
        config: EmissionConfig,
        cancel: threading.Event | None = None,
    ) -> Optional[Tuple[str, ...]]:
        return extract_markup_literals(call, config.pattern, cancel=cancel)
