"""Table-driven in-memory semantic engine.

For embedders that already hold resolved declarations (from an index, a
cache, another front end) and for tests. Nothing here parses source; nodes,
bindings and the answers the resolver gives are declared explicitly.

Usage::

    source = MemorySourceFile("src/index.ts", text="export class Foo {}\\n")
    foo = MemoryBinding("Foo", BindingKind.CLASS)
    node = MemoryNode("ClassDeclaration", source, pos=0, binding=foo)
    foo.declarations.append(node)

    resolver = MemoryResolver()
    resolver.bind_location(node.name_node or node, foo)
    program = MemoryProgram([source], resolver=resolver)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from docplane.semantic.protocols import SOURCE_FILE_KIND, BindingKind, RawComment


class EngineFailure(RuntimeError):
    """Raised by ``MemoryResolver.type_of`` when configured to fail."""

    pass


@dataclass(eq=False)
class MemoryBinding:
    """A binding. Hashes by identity, as engine symbols do."""

    name: str
    kind: BindingKind
    escaped_name: str = ""
    declarations: list[Any] = field(default_factory=list)
    members: list[MemoryBinding] = field(default_factory=list)
    modifiers: frozenset[str] = frozenset()
    alias_target: MemoryBinding | None = None
    declared_type: Any | None = None

    def __post_init__(self) -> None:
        if not self.escaped_name:
            self.escaped_name = self.name

    @property
    def is_alias(self) -> bool:
        return self.kind is BindingKind.ALIAS


@dataclass(eq=False)
class MemorySourceFile:
    """A source file node. ``leading_comments`` are the file's top-of-file comments."""

    file_name: str
    text: str = ""
    leading_comments: Sequence[RawComment] = ()
    binding: MemoryBinding | None = None
    kind: str = SOURCE_FILE_KIND
    pos: int = 0
    parent: None = None
    name_node: None = None

    @property
    def source_file(self) -> MemorySourceFile:
        return self

    def line_and_character_of(self, pos: int) -> tuple[int, int]:
        if pos < 0 or pos > len(self.text):
            raise ValueError(f"Position {pos} outside {self.file_name} (length {len(self.text)})")
        line = self.text.count("\n", 0, pos)
        line_start = self.text.rfind("\n", 0, pos) + 1
        return line, pos - line_start


@dataclass(eq=False)
class MemoryNode:
    """A syntax node inside a ``MemorySourceFile``."""

    kind: str
    file: MemorySourceFile
    pos: int = 0
    parent: Any | None = None
    binding: MemoryBinding | None = None
    name_node: MemoryNode | None = None
    leading_comments: Sequence[RawComment] = ()

    @property
    def source_file(self) -> MemorySourceFile:
        return self.file


@dataclass(eq=False)
class MemoryTagDeclaration:
    """A declaration written as a documentation tag (``@typedef Foo ...``)."""

    tag_name: str
    comment_text: str | None
    file: MemorySourceFile
    parent: Any | None = None
    kind: str = "JSDocTag"

    @property
    def source_file(self) -> MemorySourceFile:
        return self.file


class MemoryResolver:
    """Resolver answering from explicit tables.

    Args:
        fail_type_of: Make every ``type_of`` call raise ``EngineFailure``.
    """

    def __init__(self, *, fail_type_of: bool = False) -> None:
        self.fail_type_of = fail_type_of
        self._locations: dict[Any, MemoryBinding] = {}
        self._types: dict[Any, Any] = {}
        self._names: dict[str, MemoryBinding] = {}

    def bind_location(self, node: Any, binding: MemoryBinding) -> None:
        """Make ``binding_of(node)`` return ``binding``."""
        self._locations[node] = binding

    def set_type(self, node: Any, type_: Any) -> None:
        self._types[node] = type_

    def add_name(self, binding: MemoryBinding, name: str | None = None) -> None:
        """Make ``binding`` resolvable by name from any location."""
        self._names[name or binding.name] = binding

    def type_of(self, node: Any) -> Any | None:
        if self.fail_type_of:
            raise EngineFailure(f"type_of failed for {node.kind}")
        return self._types.get(node)

    def binding_of(self, node: Any) -> MemoryBinding | None:
        return self._locations.get(node)

    def declared_type_of(self, binding: MemoryBinding) -> Any | None:
        return binding.declared_type

    def aliased_binding_of(self, binding: MemoryBinding) -> MemoryBinding | None:
        return binding.alias_target

    def resolve_name(self, name: str, location: Any | None) -> MemoryBinding | None:  # noqa: ARG002
        return self._names.get(name)


class MemoryProgram:
    """A compilation unit over ``MemorySourceFile`` objects.

    Args:
        source_files: All files of the program.
        entry_points: Files converted as top-level modules. Defaults to all files.
        resolver: Resolver for the program. A fresh ``MemoryResolver`` if omitted.
    """

    def __init__(
        self,
        source_files: Sequence[MemorySourceFile],
        *,
        entry_points: Sequence[MemorySourceFile] | None = None,
        resolver: MemoryResolver | None = None,
    ) -> None:
        self._source_files = list(source_files)
        self._entry_points = list(entry_points) if entry_points is not None else list(source_files)
        self._resolver = resolver or MemoryResolver()

    @property
    def resolver(self) -> MemoryResolver:
        return self._resolver

    @property
    def source_files(self) -> list[MemorySourceFile]:
        return list(self._source_files)

    @property
    def entry_points(self) -> list[MemorySourceFile]:
        return list(self._entry_points)

    def module_binding_of(self, source_file: MemorySourceFile) -> MemoryBinding | None:
        return source_file.binding
