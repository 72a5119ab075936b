"""Core data models shared across cssjit components."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

STRING_LITERAL = "string"
OTHER_LITERAL = "literal"
EXPRESSION = "expression"


@dataclass
class FileMeta:
    """Metadata for an individual project file."""

    path: str
    size: int
    kind: str
    hash: str


@dataclass
class RepoManifest:
    """Normalized view of the project for the scanners."""

    root: str
    files: List[FileMeta]

    def of_kind(self, kind: str) -> List[FileMeta]:
        return [meta for meta in self.files if meta.kind == kind]


@dataclass(frozen=True)
class Argument:
    """A single call argument as seen by the recognizer.

    ``kind`` is one of ``string`` (a string literal whose decoded text is in
    ``value``), ``literal`` (any other literal token) or ``expression``.
    """

    kind: str
    text: str
    value: Optional[str] = None

    @property
    def is_string_literal(self) -> bool:
        return self.kind == STRING_LITERAL and self.value is not None


@dataclass(frozen=True)
class CallSite:
    """An invocation expression, reduced to what class detection needs."""

    name: str
    arguments: Tuple[Argument, ...]
    member_access: bool = False
    target: Optional[str] = None
    path: str = ""
    line: int = 0


@dataclass(frozen=True)
class TypeDeclaration:
    """A class declaration with its enclosing namespace."""

    name: str
    namespace: str
    modifiers: Tuple[str, ...]
    modifier_text: str
    path: str = ""
    line: int = 0

    @property
    def is_partial(self) -> bool:
        return "partial" in self.modifiers


@dataclass(frozen=True)
class SourceUnit:
    """One compilation unit: its call sites and class declarations."""

    path: str
    hash: str
    calls: Tuple[CallSite, ...] = ()
    declarations: Tuple[TypeDeclaration, ...] = ()


@dataclass(frozen=True)
class AdditionalFile:
    """A non-source file (Razor view, component) with a text snapshot."""

    path: str
    text: str
    hash: str = ""

    def get_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class MarkerDeclaration:
    """The partial class that receives the generated accessors."""

    namespace: str
    name: str
    modifiers: str
    is_static: bool
    path: str = ""
    line: int = 0


@dataclass(frozen=True)
class ScannerResult:
    """Class-name literals found by one scanner at one site."""

    category: str
    path: str
    line: int
    classes: Tuple[str, ...]


@dataclass
class AggregatedClassSet:
    """Deduplicated union of all scanner results bound to a marker."""

    marker: MarkerDeclaration
    namespace: str
    classes: Tuple[str, ...]
    categories: Dict[str, Tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class Artifact:
    """A rendered source file ready to be written next to the project."""

    name: str
    text: str
