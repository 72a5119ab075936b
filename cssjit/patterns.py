"""Regex-based extraction of class names from markup and source text.

Patterns capture the class list in a group named ``value``. Patterns are
frequently copied from .NET projects, so the .NET spellings are accepted
as well: ``(?<value>...)`` groups, ``\\k<name>`` back-references, and the
same group name repeated across alternatives. Repeated names are renamed
to private aliases and the first alias that took part in a match wins.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

VALUE_GROUP = "value"

# class="..." / class='...', cssclass="..." and CssClass("..."). An attribute value
# closes on the quote that opened it, so `font-['Inter']` survives inside "...".
DEFAULT_PATTERN = (
    r"""(?:(?:css)?class\s*=\s*(?P<quote>['"])|(?P<call>CssClass\s*\(\s*"))"""
    r"""(?P<value>[^<]*?)"""
    r"""(?(call)"\s*\)|(?P=quote))"""
)

_FLAGS = re.IGNORECASE | re.MULTILINE

_GROUP_SYNTAX = re.compile(
    r"\\k<(?P<backref>[A-Za-z_]\w*)>"
    r"|\\."
    r"|\(\?P?<(?P<group>[A-Za-z_]\w*)>"
)


class PatternError(ValueError):
    """Raised when a class-name pattern cannot be used."""


class ScanCancelled(RuntimeError):
    """Raised when a scan is aborted through its cancellation event."""


@dataclass(frozen=True)
class ClassPattern:
    """A compiled class-name pattern and the aliases of its value group."""

    source: str
    regex: re.Pattern[str]
    value_groups: Tuple[str, ...]

    def value_of(self, match: re.Match[str]) -> Optional[str]:
        for group in self.value_groups:
            value = match.group(group)
            if value is not None:
                return value
        return None


def translate_pattern(pattern: str) -> Tuple[str, Dict[str, List[str]]]:
    """Rewrite .NET group syntax into Python ``re`` syntax.

    Returns the translated pattern and, for every group name, the list of
    Python group names it was expanded into.
    """

    aliases: Dict[str, List[str]] = {}

    def _replace(match: re.Match[str]) -> str:
        backref = match.group("backref")
        if backref is not None:
            return f"(?P={backref})"
        name = match.group("group")
        if name is None:
            return match.group(0)
        seen = aliases.setdefault(name, [])
        alias = name if not seen else f"{name}__{len(seen) + 1}"
        seen.append(alias)
        return f"(?P<{alias}>"

    return _GROUP_SYNTAX.sub(_replace, pattern), aliases


@lru_cache(maxsize=32)
def compile_pattern(pattern: str) -> ClassPattern:
    """Compile ``pattern`` or raise :class:`PatternError` describing why not."""
    if not pattern or not pattern.strip():
        raise PatternError("Class pattern is empty")
    translated, aliases = translate_pattern(pattern)
    try:
        regex = re.compile(translated, _FLAGS)
    except re.error as exc:
        raise PatternError(f"Invalid class pattern {pattern!r}: {exc}") from exc
    value_groups = tuple(aliases.get(VALUE_GROUP, []))
    if not value_groups:
        raise PatternError(
            f"Class pattern {pattern!r} does not define a capture group named '{VALUE_GROUP}'"
        )
    return ClassPattern(source=pattern, regex=regex, value_groups=value_groups)


def extract(
    text: str,
    pattern: str | ClassPattern = DEFAULT_PATTERN,
    *,
    cancel: threading.Event | None = None,
) -> List[str]:
    """Return every ``value`` capture of ``pattern`` in ``text``, in match order."""
    compiled = pattern if isinstance(pattern, ClassPattern) else compile_pattern(pattern)
    results: List[str] = []
    for match in compiled.regex.finditer(text):
        if cancel is not None and cancel.is_set():
            raise ScanCancelled("Class pattern scan cancelled")
        value = compiled.value_of(match)
        if value is not None:
            results.append(value)
    return results


__all__ = [
    "ClassPattern",
    "DEFAULT_PATTERN",
    "PatternError",
    "ScanCancelled",
    "VALUE_GROUP",
    "compile_pattern",
    "extract",
    "translate_pattern",
]
