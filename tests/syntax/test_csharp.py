"""Tests for the tree-sitter C# reader."""

from __future__ import annotations

import textwrap

import pytest

from cssjit.models import EXPRESSION, OTHER_LITERAL, STRING_LITERAL
from cssjit.syntax import CSharpSyntaxReader, decode_string_literal

SAMPLE = textwrap.dedent(
    """
    using System;

    namespace Demo.Web
    {
        public static partial class MonorailCSS
        {
        }

        public class Page
        {
            public void Render(RenderTreeBuilder builder)
            {
                var a = MonorailCSS.CssClass("bg-red-300");
                var b = CssClass("bg-red-200");
                builder.AddAttribute(1, "class", "text-lg");
                builder.AddMarkupContent(2, "<div class=\\"p-4\\"></div>");
                var c = CssClass(someVariable);
            }
        }
    }
    """
).lstrip("\n")


@pytest.fixture
def reader() -> CSharpSyntaxReader:
    return CSharpSyntaxReader()


def test_reader_collects_call_sites_in_source_order(reader: CSharpSyntaxReader) -> None:
    unit = reader.read("Page.cs", SAMPLE, file_hash="abc")

    assert unit.path == "Page.cs"
    assert unit.hash == "abc"
    assert [call.name for call in unit.calls] == [
        "CssClass",
        "CssClass",
        "AddAttribute",
        "AddMarkupContent",
        "CssClass",
    ]


def test_reader_records_member_access_and_target(reader: CSharpSyntaxReader) -> None:
    qualified, plain, attribute, _, _ = reader.read("Page.cs", SAMPLE).calls

    assert qualified.member_access is True
    assert qualified.target == "MonorailCSS"
    assert qualified.line == 13
    assert plain.member_access is False
    assert plain.target is None
    assert attribute.target == "builder"


def test_reader_classifies_arguments(reader: CSharpSyntaxReader) -> None:
    calls = reader.read("Page.cs", SAMPLE).calls
    attribute, markup, variable = calls[2], calls[3], calls[4]

    assert [arg.kind for arg in attribute.arguments] == [OTHER_LITERAL, STRING_LITERAL, STRING_LITERAL]
    assert attribute.arguments[2].value == "text-lg"
    assert markup.arguments[1].value == '<div class="p-4"></div>'
    assert variable.arguments[0].kind == EXPRESSION
    assert variable.arguments[0].value is None


def test_reader_collects_declarations_with_namespace(reader: CSharpSyntaxReader) -> None:
    declarations = reader.read("Page.cs", SAMPLE).declarations

    assert [decl.name for decl in declarations] == ["MonorailCSS", "Page"]
    marker = declarations[0]
    assert marker.namespace == "Demo.Web"
    assert marker.modifiers == ("public", "static", "partial")
    assert marker.modifier_text == "public static partial"
    assert marker.is_partial
    assert marker.line == 5
    assert not declarations[1].is_partial


def test_reader_handles_file_scoped_namespace(reader: CSharpSyntaxReader) -> None:
    source = "namespace Demo.Files;\n\ninternal partial class MonorailCSS { }\n"

    (declaration,) = reader.read("Styles.cs", source).declarations

    assert declaration.namespace == "Demo.Files"
    assert declaration.modifier_text == "internal partial"


def test_reader_joins_nested_namespaces(reader: CSharpSyntaxReader) -> None:
    source = "namespace Outer { namespace Inner { partial class MonorailCSS { } } }\n"

    (declaration,) = reader.read("Styles.cs", source).declarations

    assert declaration.namespace == "Outer.Inner"


def test_reader_leaves_global_namespace_empty(reader: CSharpSyntaxReader) -> None:
    (declaration,) = reader.read("Styles.cs", "partial class MonorailCSS { }\n").declarations

    assert declaration.namespace == ""


def test_interpolated_strings_are_expressions(reader: CSharpSyntaxReader) -> None:
    source = 'class A { void M() { CssClass($"bg-{color}"); } }\n'

    (call,) = reader.read("A.cs", source).calls

    assert call.arguments[0].kind == EXPRESSION


def test_has_errors_detects_broken_source(reader: CSharpSyntaxReader) -> None:
    assert not reader.has_errors("class A { }\n")
    assert reader.has_errors("class A { void M( }\n")


def test_decode_regular_string_literal() -> None:
    assert decode_string_literal('"a\\"b"') == 'a"b'
    assert decode_string_literal('"tab\\there"') == "tab\there"
    assert decode_string_literal('"\\u0041\\x42"') == "AB"


def test_decode_verbatim_string_literal() -> None:
    assert decode_string_literal('@"c:\\temp ""quoted"""') == 'c:\\temp "quoted"'


def test_decode_raw_string_literal() -> None:
    assert decode_string_literal('"""a "quoted" b"""') == 'a "quoted" b'
    assert decode_string_literal('"""\n    flex\n    gap-2\n    """') == "flex\ngap-2"


def test_decode_utf8_suffix_and_non_strings() -> None:
    assert decode_string_literal('"p-4"u8') == "p-4"
    assert decode_string_literal("42") is None
