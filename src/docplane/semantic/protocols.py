"""Interfaces of the semantic engine consumed by the converter.

DocPlane does not type-check anything itself. A semantic engine (a compiler
front end, a language server, a pre-computed index) supplies syntax nodes,
bindings and a resolver through these protocols. ``docplane.semantic.memory``
is a table-driven implementation.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Protocol

SOURCE_FILE_KIND = "SourceFile"


class BindingKind(str, Enum):
    """Declaration kind of a binding, as reported by the engine."""

    MODULE = "module"
    NAMESPACE = "namespace"
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    ENUM_MEMBER = "enum_member"
    FUNCTION = "function"
    VARIABLE = "variable"
    PROPERTY = "property"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    ACCESSOR = "accessor"
    TYPE_ALIAS = "type_alias"
    ALIAS = "alias"  # re-export / import binding pointing at another binding


@dataclass(frozen=True, slots=True)
class RawComment:
    """Unparsed comment text exactly as it appears in source, markers included."""

    text: str
    kind: Literal["block", "line"]


class SyntaxNode(Protocol):
    """A node of a parsed source file."""

    kind: str
    pos: int
    parent: SyntaxNode | None
    binding: Binding | None  # the node's own declared binding, if it declares one
    name_node: SyntaxNode | None  # explicit name sub-node (identifier), if any
    leading_comments: Sequence[RawComment]

    @property
    def source_file(self) -> SourceFile: ...


class SourceFile(SyntaxNode, Protocol):
    """Root node of one parsed file. ``kind`` is ``SOURCE_FILE_KIND``."""

    file_name: str

    def line_and_character_of(self, pos: int) -> tuple[int, int]:
        """Zero-based (line, character) of an offset into the file."""
        ...


class TagDeclaration(Protocol):
    """A declaration made inside a documentation comment (``@typedef``, ``@callback``, ...)."""

    kind: str
    tag_name: str
    comment_text: str | None
    parent: SyntaxNode | None

    @property
    def source_file(self) -> SourceFile: ...


class Binding(Protocol):
    """A semantic entity: what a name refers to."""

    name: str
    escaped_name: str
    kind: BindingKind
    declarations: Sequence[SyntaxNode]
    members: Sequence[Binding]
    modifiers: frozenset[str]

    @property
    def is_alias(self) -> bool: ...


class SymbolResolver(Protocol):
    """Queries against a fully type-checked program.

    ``type_of`` may raise for nodes the engine cannot handle; callers treat
    that as "no type".
    """

    def type_of(self, node: SyntaxNode) -> Any | None: ...

    def binding_of(self, node: SyntaxNode) -> Binding | None: ...

    def declared_type_of(self, binding: Binding) -> Any | None: ...

    def aliased_binding_of(self, binding: Binding) -> Binding | None: ...

    def resolve_name(self, name: str, location: SyntaxNode | None) -> Binding | None: ...


class Program(Protocol):
    """One type-checked compilation unit."""

    @property
    def resolver(self) -> SymbolResolver: ...

    @property
    def source_files(self) -> Sequence[SourceFile]: ...

    @property
    def entry_points(self) -> Sequence[SourceFile]: ...

    def module_binding_of(self, source_file: SourceFile) -> Binding | None: ...
