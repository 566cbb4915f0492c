"""Reflection model: the nodes of the documentation tree.

Node classes differ in what they can do, not only in what they hold. Each
class declares its ``capabilities`` once (see ``Capability``); callers ask
``can_hold_children`` / ``is_declaration`` instead of testing concrete types.

Hierarchy::

    Reflection
    +-- ContainerReflection          CONTAINER
    |   +-- DeclarationReflection    CONTAINER | DECLARATION
    |   +-- ProjectReflection        CONTAINER
    +-- ReferenceReflection          DECLARATION
"""

from __future__ import annotations

import itertools
from collections.abc import Hashable, Iterator
from typing import TYPE_CHECKING, Any, ClassVar

from docplane.models.kinds import Capability, ReflectionFlag, ReflectionKind
from docplane.models.registry import ReflectionRegistry

if TYPE_CHECKING:
    from docplane.models.comments import Comment

_reflection_ids = itertools.count(1)


class Reflection:
    """Base class of all documentation nodes."""

    capabilities: ClassVar[Capability] = Capability.NONE

    def __init__(
        self,
        name: str,
        kind: ReflectionKind,
        parent: Reflection | None = None,
    ) -> None:
        self.id: int = next(_reflection_ids)
        self.name = name
        self.kind = kind
        self.parent = parent
        self.comment: Comment | None = None
        self._flags = ReflectionFlag.NONE

    @property
    def can_hold_children(self) -> bool:
        return Capability.CONTAINER in self.capabilities

    @property
    def is_declaration(self) -> bool:
        return Capability.DECLARATION in self.capabilities

    @property
    def flags(self) -> ReflectionFlag:
        return self._flags

    def set_flag(self, flag: ReflectionFlag) -> None:
        """Add ``flag``. Flags are never removed once set."""
        self._flags |= flag

    def has_flag(self, flag: ReflectionFlag) -> bool:
        return flag in self._flags

    def kind_of(self, kind: ReflectionKind) -> bool:
        """True if this reflection's kind is in ``kind`` (which may be a group)."""
        return bool(self.kind & kind)

    def is_project(self) -> bool:
        return False

    def get_full_name(self, separator: str = ".") -> str:
        """Names from the outermost non-project ancestor down to this node."""
        names: list[str] = []
        node: Reflection | None = self
        while node is not None and not node.is_project():
            names.append(node.name)
            node = node.parent
        return separator.join(reversed(names))

    def traverse(self) -> Iterator[Reflection]:
        """Direct children, if any."""
        return iter(())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, name={self.name!r}, kind={self.kind.name})"


class ContainerReflection(Reflection):
    """A reflection holding an ordered, append-only list of children."""

    capabilities: ClassVar[Capability] = Capability.CONTAINER

    def __init__(
        self,
        name: str,
        kind: ReflectionKind,
        parent: Reflection | None = None,
    ) -> None:
        super().__init__(name, kind, parent)
        self._children: list[Reflection] = []

    @property
    def children(self) -> tuple[Reflection, ...]:
        return tuple(self._children)

    def add_child(self, child: Reflection) -> None:
        self._children.append(child)

    def get_child_by_name(self, name: str | list[str]) -> Reflection | None:
        """Find a descendant by name or dotted path (``"Outer.inner"``)."""
        parts = name.split(".") if isinstance(name, str) else list(name)
        if not parts:
            return None
        head, rest = parts[0], parts[1:]
        for child in self._children:
            if child.name != head:
                continue
            if not rest:
                return child
            if isinstance(child, ContainerReflection):
                found = child.get_child_by_name(rest)
                if found is not None:
                    return found
        return None

    def get_children_by_kind(self, kind: ReflectionKind) -> list[Reflection]:
        return [child for child in self._children if child.kind_of(kind)]

    def traverse(self) -> Iterator[Reflection]:
        return iter(self._children)


class DeclarationReflection(ContainerReflection):
    """A reflection produced from a declaration (class, function, variable, ...)."""

    capabilities: ClassVar[Capability] = Capability.CONTAINER | Capability.DECLARATION

    def __init__(
        self,
        name: str,
        kind: ReflectionKind,
        parent: Reflection | None = None,
    ) -> None:
        super().__init__(name, kind, parent)
        # Engine-internal name, kept to disambiguate members sharing a display name
        self.escaped_name: str | None = None
        # Filled in by enrichment listeners after creation
        self.type: Any | None = None
        self.default_value: str | None = None


class ReferenceReflection(Reflection):
    """A re-export of a reflection documented elsewhere in the project."""

    capabilities: ClassVar[Capability] = Capability.DECLARATION

    def __init__(
        self,
        name: str,
        target: Reflection,
        parent: Reflection | None = None,
    ) -> None:
        super().__init__(name, ReflectionKind.REFERENCE, parent)
        self.escaped_name: str | None = None
        self.target_id = target.id
        self._project = _find_project(parent)

    def get_target(self) -> Reflection | None:
        if self._project is None:
            return None
        return self._project.get_reflection_by_id(self.target_id)


class ProjectReflection(ContainerReflection):
    """Root of the documentation tree. Owns the binding registry."""

    def __init__(self, name: str) -> None:
        super().__init__(name, ReflectionKind.PROJECT)
        self.registry = ReflectionRegistry()
        self.registry.register(self)

    def is_project(self) -> bool:
        return True

    def register_reflection(self, reflection: Reflection, binding: Hashable | None) -> None:
        self.registry.register(reflection, binding)

    def get_reflection_from_binding(self, binding: Hashable) -> Reflection | None:
        return self.registry.get_reflection(binding)

    def get_binding_from_reflection(self, reflection: Reflection) -> Hashable | None:
        """The first binding ``reflection`` was registered under."""
        bindings = self.registry.get_bindings(reflection)
        return bindings[0] if bindings else None

    def get_reflection_by_id(self, reflection_id: int) -> Reflection | None:
        return self.registry.get_by_id(reflection_id)

    def get_reflections_by_kind(self, kind: ReflectionKind) -> list[Reflection]:
        return [r for r in self.registry if r.kind_of(kind)]


def _find_project(node: Reflection | None) -> ProjectReflection | None:
    while node is not None:
        if isinstance(node, ProjectReflection):
            return node
        node = node.parent
    return None
