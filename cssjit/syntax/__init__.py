"""Host syntax readers that turn source text into call sites and declarations."""

from .csharp import CSharpSyntaxReader, decode_string_literal

__all__ = ["CSharpSyntaxReader", "decode_string_literal"]
