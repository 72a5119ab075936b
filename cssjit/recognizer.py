"""Recognition of class-declaring call sites.

Three call shapes supply class names, told apart by arity and name:

* attribute builder: ``builder.AddAttribute(seq, "class", "a b")``
* markup content: ``builder.AddMarkupContent(seq, "<div class=\\"a\\">")``
* helper call: ``CssClass("a b")`` or ``Styles.CssClass("a b")``

Only literal arguments are read. A variable or interpolated string in a
position that must hold a literal makes the whole site contribute nothing.
"""

from __future__ import annotations

import threading
from typing import Optional, Sequence, Tuple

from .models import CallSite
from .patterns import DEFAULT_PATTERN, ClassPattern, extract

ATTRIBUTE_SHAPE = "attribute"
MARKUP_SHAPE = "markup"
HELPER_SHAPE = "helper"

ATTRIBUTE_BUILDER_METHODS: Tuple[str, ...] = ("AddAttribute",)
MARKUP_CONTENT_METHODS: Tuple[str, ...] = ("AddMarkupContent",)
CLASS_ATTRIBUTE_NAMES = frozenset({"class", "cssclass"})


def is_attribute_call(call: CallSite) -> bool:
    if not call.member_access or call.name not in ATTRIBUTE_BUILDER_METHODS:
        return False
    if len(call.arguments) != 3:
        return False
    attribute = call.arguments[1]
    return attribute.is_string_literal and attribute.value.lower() in CLASS_ATTRIBUTE_NAMES


def is_markup_call(call: CallSite) -> bool:
    if not call.member_access or call.name not in MARKUP_CONTENT_METHODS:
        return False
    return len(call.arguments) == 2 and call.arguments[1].is_string_literal


def is_helper_call(call: CallSite, helper_methods: Sequence[str]) -> bool:
    if call.name not in helper_methods:
        return False
    return len(call.arguments) == 1 and call.arguments[0].is_string_literal


def classify(call: CallSite, helper_methods: Sequence[str] = ("CssClass",)) -> Optional[str]:
    """Return the shape ``call`` matches, or None for ordinary calls."""
    if is_attribute_call(call):
        return ATTRIBUTE_SHAPE
    if is_markup_call(call):
        return MARKUP_SHAPE
    if is_helper_call(call, helper_methods):
        return HELPER_SHAPE
    return None


def is_class_declaring_call(call: CallSite, helper_methods: Sequence[str] = ("CssClass",)) -> bool:
    return classify(call, helper_methods) is not None


def extract_attribute_literal(call: CallSite) -> Optional[Tuple[str, ...]]:
    """Return the class value of an attribute-builder call.

    The value sits in the third argument; a single-argument form carries it
    in the first one.
    """

    arguments = call.arguments
    if not arguments:
        return None
    position = 0 if len(arguments) == 1 else 2
    if position >= len(arguments):
        return None
    argument = arguments[position]
    if not argument.is_string_literal:
        return None
    return (argument.value,)


def extract_markup_literals(
    call: CallSite,
    pattern: str | ClassPattern = DEFAULT_PATTERN,
    *,
    cancel: threading.Event | None = None,
) -> Optional[Tuple[str, ...]]:
    if len(call.arguments) < 2:
        return None
    content = call.arguments[1]
    if not content.is_string_literal:
        return None
    return tuple(extract(content.value, pattern, cancel=cancel))


def extract_helper_literal(call: CallSite) -> Optional[Tuple[str, ...]]:
    if not call.arguments:
        return None
    argument = call.arguments[0]
    if not argument.is_string_literal:
        return None
    return (argument.value,)


def extract_literals(
    call: CallSite,
    pattern: str | ClassPattern = DEFAULT_PATTERN,
    helper_methods: Sequence[str] = ("CssClass",),
) -> Optional[Tuple[str, ...]]:
    """Return the class literals supplied by ``call``, or None if it supplies none."""
    shape = classify(call, helper_methods)
    if shape == ATTRIBUTE_SHAPE:
        return extract_attribute_literal(call)
    if shape == MARKUP_SHAPE:
        return extract_markup_literals(call, pattern)
    if shape == HELPER_SHAPE:
        return extract_helper_literal(call)
    return None


__all__ = [
    "ATTRIBUTE_SHAPE",
    "HELPER_SHAPE",
    "MARKUP_SHAPE",
    "classify",
    "extract_attribute_literal",
    "extract_helper_literal",
    "extract_literals",
    "extract_markup_literals",
    "is_attribute_call",
    "is_class_declaring_call",
    "is_helper_call",
    "is_markup_call",
]
