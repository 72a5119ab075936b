"""Scanner for render-tree attribute calls such as ``AddAttribute(1, "class", "...")``."""

from __future__ import annotations

import threading
from typing import Optional, Tuple

from .base import SourceScanner
from ..config import EmissionConfig
from ..models import CallSite
from ..recognizer import extract_attribute_literal, is_attribute_call


class AttributeScanner(SourceScanner):
    """Reads the class value of ``class``/``cssclass`` attribute builder calls."""

    category = "attributes"
    accessor = "AttributeClassValues"

    def matches(self, call: CallSite, config: EmissionConfig) -> bool:
        return is_attribute_call(call)

    def extract(
        self,
        call: CallSite,
        config: EmissionConfig,
        cancel: threading.Event | None = None,
    ) -> Optional[Tuple[str, ...]]:
        return extract_attribute_literal(call)
