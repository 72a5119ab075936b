"""Tests for cssjit.aggregator."""

from __future__ import annotations

from cssjit.aggregator import ROOT_NAMESPACE, aggregate, resolve_namespace, union_classes
from cssjit.models import MarkerDeclaration, ScannerResult


def _marker(namespace: str = "App.Styles") -> MarkerDeclaration:
    return MarkerDeclaration(
        namespace=namespace,
        name="MonorailCSS",
        modifiers="public static partial",
        is_static=True,
    )


def _result(category: str, *classes: str, path: str = "a.cs", line: int = 1) -> ScannerResult:
    return ScannerResult(category=category, path=path, line=line, classes=classes)


def test_union_keeps_first_occurrence_order() -> None:
    assert union_classes([("b", "a"), ("a", "c"), ("b",)]) == ("b", "a", "c")


def test_whitespace_variants_stay_distinct() -> None:
    assert union_classes([("a b", "a  b", " a b")]) == ("a b", "a  b", " a b")


def test_union_is_case_sensitive() -> None:
    assert union_classes([("Flex", "flex")]) == ("Flex", "flex")


def test_aggregate_without_marker_returns_none() -> None:
    assert aggregate(None, [_result("helpers", "x")]) is None


def test_aggregate_contains_every_result_value() -> None:
    results = [
        _result("helpers", "bg-red-200"),
        _result("files", "p-4", "bg-red-200"),
        _result("attributes", "text-lg"),
    ]

    class_set = aggregate(_marker(), results, ["attributes", "markup", "helpers", "files"])

    assert class_set is not None
    assert set(class_set.classes) == {"bg-red-200", "p-4", "text-lg"}
    assert len(class_set.classes) == 3


def test_aggregate_orders_by_category_registration() -> None:
    results = [
        _result("files", "from-file"),
        _result("helpers", "from-helper"),
        _result("attributes", "from-attribute"),
    ]

    class_set = aggregate(_marker(), results, ["attributes", "markup", "helpers", "files"])

    assert class_set is not None
    assert class_set.classes == ("from-attribute", "from-helper", "from-file")
    assert class_set.categories == {
        "attributes": ("from-attribute",),
        "markup": (),
        "helpers": ("from-helper",),
        "files": ("from-file",),
    }


def test_aggregate_is_idempotent() -> None:
    results = [_result("helpers", "a", "b"), _result("files", "b", "c")]
    categories = ["helpers", "files"]

    first = aggregate(_marker(), results, categories)
    second = aggregate(_marker(), results, categories)

    assert first == second


def test_aggregate_appends_unknown_categories_in_appearance_order() -> None:
    results = [_result("custom", "z"), _result("helpers", "a")]

    class_set = aggregate(_marker(), results, ["helpers"])

    assert class_set is not None
    assert list(class_set.categories) == ["helpers", "custom"]
    assert class_set.classes == ("a", "z")


def test_global_namespace_falls_back_to_root() -> None:
    assert resolve_namespace("") == ROOT_NAMESPACE
    assert resolve_namespace("<global namespace>") == ROOT_NAMESPACE
    assert resolve_namespace(None) == ROOT_NAMESPACE
    assert resolve_namespace("App.Styles") == "App.Styles"

    class_set = aggregate(_marker(""), [], [])

    assert class_set is not None
    assert class_set.namespace == "Root"
    assert class_set.classes == ()
