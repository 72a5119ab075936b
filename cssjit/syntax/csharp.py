"""Tree-sitter powered reader for C# compilation units."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

import tree_sitter_c_sharp
from tree_sitter import Language, Node, Parser

from ..models import (
    EXPRESSION,
    OTHER_LITERAL,
    STRING_LITERAL,
    Argument,
    CallSite,
    SourceUnit,
    TypeDeclaration,
)

_STRING_LITERAL_TYPES = {"string_literal", "verbatim_string_literal", "raw_string_literal"}
_FILE_SCOPED_NAMESPACE = "file_scoped_namespace_declaration"
_NAMESPACE = "namespace_declaration"

_ESCAPE = re.compile(r"\\(u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|x[0-9A-Fa-f]{1,4}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
    "'": "'",
    '"': '"',
    "\\": "\\",
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


def _unescape(body: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        token = match.group(1)
        if token[0] in "uUx" and len(token) > 1:
            try:
                return chr(int(token[1:], 16))
            except ValueError:
                return match.group(0)
        return _SIMPLE_ESCAPES.get(token, token)

    return _ESCAPE.sub(_replace, body)


def _decode_raw(text: str) -> Optional[str]:
    quotes = len(text) - len(text.lstrip('"'))
    if quotes < 3 or len(text) < 2 * quotes or not text.endswith('"' * quotes):
        return None
    body = text[quotes:-quotes]
    if "\n" not in body:
        return body
    lines = [line.rstrip("\r") for line in body.split("\n")]
    indent = lines[-1]
    content = lines[1:-1]
    return "\n".join(line[len(indent):] if line.startswith(indent) else line for line in content)


def decode_string_literal(text: str) -> Optional[str]:
    """Return the value of a C# string literal token, or None if it is not one."""
    text = text.strip()
    if text[-2:] in ("u8", "U8"):
        text = text[:-2]
    if text.startswith('"""'):
        return _decode_raw(text)
    if text.startswith('@"') and text.endswith('"') and len(text) >= 3:
        return text[2:-1].replace('""', '"')
    if text.startswith('"') and text.endswith('"') and len(text) >= 2:
        return _unescape(text[1:-1])
    return None


class CSharpSyntaxReader:
    """Extracts call sites and class declarations from C# source text."""

    def __init__(self) -> None:
        self._parser: Optional[Parser] = None

    def read(self, path: str, source: str, *, file_hash: str = "") -> SourceUnit:
        source_bytes = source.encode("utf-8")
        tree = self._get_parser().parse(source_bytes)

        calls: List[CallSite] = []
        declarations: List[TypeDeclaration] = []
        # Iterative walk: long string concatenations nest deeply.
        stack: List[Tuple[Node, str]] = [(tree.root_node, "")]
        while stack:
            node, namespace = stack.pop()
            if node.type == "invocation_expression":
                call = self._call_site(node, source_bytes, path)
                if call is not None:
                    calls.append(call)
            elif node.type == "class_declaration":
                declaration = self._declaration(node, source_bytes, path, namespace)
                if declaration is not None:
                    declarations.append(declaration)
            stack.extend(reversed(self._scoped_children(node, source_bytes, namespace)))

        return SourceUnit(
            path=path,
            hash=file_hash,
            calls=tuple(calls),
            declarations=tuple(declarations),
        )

    def has_errors(self, source: str) -> bool:
        """Return True when ``source`` does not parse cleanly."""
        tree = self._get_parser().parse(source.encode("utf-8"))
        return tree.root_node.has_error

    def _get_parser(self) -> Parser:
        if self._parser is None:
            self._parser = Parser(Language(tree_sitter_c_sharp.language()))
        return self._parser

    @staticmethod
    def _node_text(node: Node, source_bytes: bytes) -> str:
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def _scoped_children(
        self, node: Node, source_bytes: bytes, namespace: str
    ) -> List[Tuple[Node, str]]:
        scoped: List[Tuple[Node, str]] = []
        current = namespace
        for child in node.children:
            if child.type == _FILE_SCOPED_NAMESPACE:
                # Applies to the declarations that follow it as well as its own children.
                current = _join_namespace(namespace, self._namespace_name(child, source_bytes))
                scoped.append((child, current))
            elif child.type == _NAMESPACE:
                scoped.append(
                    (child, _join_namespace(current, self._namespace_name(child, source_bytes)))
                )
            else:
                scoped.append((child, current))
        return scoped

    def _namespace_name(self, node: Node, source_bytes: bytes) -> str:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return ""
        return "".join(self._node_text(name_node, source_bytes).split())

    def _declaration(
        self, node: Node, source_bytes: bytes, path: str, namespace: str
    ) -> Optional[TypeDeclaration]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        modifiers = [child for child in node.named_children if child.type == "modifier"]
        modifier_text = ""
        if modifiers:
            modifier_text = source_bytes[modifiers[0].start_byte : modifiers[-1].end_byte].decode(
                "utf-8", errors="ignore"
            )
        return TypeDeclaration(
            name=self._node_text(name_node, source_bytes),
            namespace=namespace,
            modifiers=tuple(self._node_text(item, source_bytes).strip() for item in modifiers),
            modifier_text=modifier_text,
            path=path,
            line=node.start_point[0] + 1,
        )

    def _call_site(self, node: Node, source_bytes: bytes, path: str) -> Optional[CallSite]:
        named = node.named_children
        function = node.child_by_field_name("function") or (named[0] if named else None)
        arguments_node = node.child_by_field_name("arguments") or next(
            (child for child in named if child.type == "argument_list"), None
        )
        if function is None or arguments_node is None:
            return None

        member_access = function.type == "member_access_expression"
        target: Optional[str] = None
        if member_access:
            name_node = function.child_by_field_name("name") or function.named_children[-1]
            expression = function.child_by_field_name("expression")
            name = self._node_text(name_node, source_bytes)
            if expression is not None:
                target = self._node_text(expression, source_bytes)
        else:
            name = self._node_text(function, source_bytes)

        arguments = tuple(
            self._argument(child, source_bytes)
            for child in arguments_node.named_children
            if child.type == "argument"
        )
        return CallSite(
            name=name.strip(),
            arguments=arguments,
            member_access=member_access,
            target=target,
            path=path,
            line=node.start_point[0] + 1,
        )

    def _argument(self, node: Node, source_bytes: bytes) -> Argument:
        values = [child for child in node.named_children if child.type != "name_colon"]
        if not values:
            return Argument(kind=EXPRESSION, text=self._node_text(node, source_bytes))
        expression = values[-1]
        while expression.type == "literal" and expression.named_child_count == 1:
            expression = expression.named_children[0]

        text = self._node_text(expression, source_bytes)
        if expression.type in _STRING_LITERAL_TYPES:
            value = decode_string_literal(text)
            if value is not None:
                return Argument(kind=STRING_LITERAL, text=text, value=value)
            return Argument(kind=EXPRESSION, text=text)
        if expression.type.endswith("_literal"):
            return Argument(kind=OTHER_LITERAL, text=text, value=text)
        return Argument(kind=EXPRESSION, text=text)


def _join_namespace(outer: str, inner: str) -> str:
    if not outer:
        return inner
    if not inner:
        return outer
    return f"{outer}.{inner}"


__all__ = ["CSharpSyntaxReader", "decode_string_literal"]
