"""Scanner for helper calls like ``CssClass("bg-red-200")``."""

from __future__ import annotations

import threading
from typing import Optional, Tuple

from .base import SourceScanner
from ..config import EmissionConfig
from ..models import CallSite
from ..recognizer import extract_helper_literal, is_helper_call


class HelperCallScanner(SourceScanner):
    """Collects the literal passed to a configured helper method."""

    category = "helpers"
    accessor = "CssClassCallValues"

    def matches(self, call: CallSite, config: EmissionConfig) -> bool:
        return is_helper_call(call, config.helper_methods)

    def extract(
        self,
        call: CallSite,
        config: EmissionConfig,
        cancel: threading.Event | None = None,
    ) -> Optional[Tuple[str, ...]]:
        return extract_helper_literal(call)
