"""Conversion context: the state of the converter at one point of a traversal.

A context knows where new reflections go (``scope``), which program is being
converted, and which traversal mode applies. Visitors never build
reflections themselves; they call ``create_declaration_reflection`` so that
naming, kind promotion, comment attachment, parent linkage, flags and
registration happen identically for every declaration kind.

Contexts are cheap and immutable in shape: descending into a declaration
derives a new context with ``with_scope`` instead of mutating the current
one, so sibling subtrees never observe each other's mode changes.

Usage::

    context = Context(converter, programs, project)
    context.set_active_program(program)
    module = context.create_declaration_reflection(
        ReflectionKind.MODULE, binding, None, name_override="index"
    )
    child_context = context.with_scope(module)
    ...
    context.finalize_declaration_reflection(module)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Protocol, cast

from docplane.comments import (
    get_comment,
    get_declaration_comment,
    get_file_comment,
    get_signature_comment,
)
from docplane.converter.errors import InactiveProgramError, MissingBindingError
from docplane.converter.events import ConverterEvents
from docplane.models.kinds import ReflectionFlag, ReflectionKind
from docplane.models.reflections import ContainerReflection, DeclarationReflection
from docplane.semantic.aliases import resolve_aliased_binding
from docplane.semantic.names import get_human_name

if TYPE_CHECKING:
    import structlog

    from docplane.config.models import CommentConfig, CommentStyle
    from docplane.models.comments import Comment
    from docplane.models.reflections import ProjectReflection, Reflection
    from docplane.semantic.protocols import (
        Binding,
        Program,
        SourceFile,
        SymbolResolver,
        SyntaxNode,
        TagDeclaration,
    )


class ConverterServices(Protocol):
    """What a context needs from the orchestrator, injected at construction."""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger: ...

    @property
    def comment_config(self) -> CommentConfig: ...

    @property
    def comment_style(self) -> CommentStyle: ...

    @property
    def use_link_resolution(self) -> bool: ...

    def is_external(self, binding: Binding) -> bool: ...

    def should_ignore(self, binding: Binding) -> bool: ...

    def trigger(self, name: str, *args: Any) -> None: ...


@dataclass(frozen=True, slots=True)
class TraversalMode:
    """Mode switches of a traversal step.

    ``converting_type_node`` carries over into derived scopes; the other two
    describe the current declaration only and reset in every derived scope.
    """

    converting_type_node: bool = False
    converting_class_or_interface: bool = False
    should_be_static: bool = False

    def derive(self) -> TraversalMode:
        return TraversalMode(converting_type_node=self.converting_type_node)


class Context:
    """The state the converter is in at one traversal step.

    Args:
        converter: Orchestrator capabilities (ignore policy, externality,
            events, logger, comment configuration).
        programs: Every program being converted.
        project: Root of the reflection tree.
        scope: Insertion point for new reflections. Defaults to ``project``.
        mode: Traversal mode. Defaults to all switches off.
    """

    def __init__(
        self,
        converter: ConverterServices,
        programs: Sequence[Program],
        project: ProjectReflection,
        scope: Reflection | None = None,
        *,
        mode: TraversalMode | None = None,
    ) -> None:
        self.converter = converter
        self.programs: tuple[Program, ...] = tuple(programs)
        self.project = project
        self.scope: Reflection = scope if scope is not None else project
        self.mode = mode or TraversalMode()
        self._program: Program | None = None

    # -- traversal mode ---------------------------------------------------

    @property
    def converting_type_node(self) -> bool:
        return self.mode.converting_type_node

    @converting_type_node.setter
    def converting_type_node(self, value: bool) -> None:
        self.mode = replace(self.mode, converting_type_node=value)

    @property
    def converting_class_or_interface(self) -> bool:
        return self.mode.converting_class_or_interface

    @converting_class_or_interface.setter
    def converting_class_or_interface(self, value: bool) -> None:
        self.mode = replace(self.mode, converting_class_or_interface=value)

    @property
    def should_be_static(self) -> bool:
        return self.mode.should_be_static

    @should_be_static.setter
    def should_be_static(self, value: bool) -> None:
        self.mode = replace(self.mode, should_be_static=value)

    # -- active program ---------------------------------------------------

    @property
    def active_program(self) -> Program | None:
        """The program being converted, or None outside a program pass."""
        return self._program

    def require_active_program(self) -> Program:
        if self._program is None:
            raise InactiveProgramError()
        return self._program

    @property
    def program(self) -> Program:
        """The program being converted. Raises ``InactiveProgramError`` if none is."""
        return self.require_active_program()

    @property
    def resolver(self) -> SymbolResolver:
        return self.require_active_program().resolver

    def set_active_program(self, program: Program | None) -> None:
        self._program = program

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return self.converter.logger

    # -- binding and type resolution --------------------------------------

    def get_type_at_location(self, node: SyntaxNode) -> Any | None:
        """Type of ``node``, falling back to the declared type of a nearby binding.

        Engine failures count as "no type". The fallback consults the first
        of node, parent, grandparent that declares a binding.
        """
        resolver = self.resolver
        node_type: Any | None = None
        try:
            node_type = resolver.type_of(node)
        except Exception as e:  # noqa: BLE001
            self.logger.debug("type_resolution_failed", node_kind=node.kind, error=str(e))

        if node_type is None:
            parent = node.parent
            grandparent = parent.parent if parent is not None else None
            if node.binding is not None:
                node_type = resolver.declared_type_of(node.binding)
            elif parent is not None and parent.binding is not None:
                node_type = resolver.declared_type_of(parent.binding)
            elif grandparent is not None and grandparent.binding is not None:
                node_type = resolver.declared_type_of(grandparent.binding)
        return node_type

    def get_binding_at_location(self, node: SyntaxNode) -> Binding | None:
        binding = self.resolver.binding_of(node)
        name_node = node.name_node
        if binding is None and name_node is not None:
            binding = self.resolver.binding_of(name_node)
        return binding

    def expect_binding_at_location(self, node: SyntaxNode) -> Binding:
        binding = self.get_binding_at_location(node)
        if binding is None:
            source = node.source_file
            line, _ = source.line_and_character_of(node.pos)
            raise MissingBindingError(node.kind, source.file_name, line + 1)
        return binding

    def resolve_aliased_binding(self, binding: Binding) -> Binding:
        return resolve_aliased_binding(binding, self.resolver)

    # -- reflection creation ----------------------------------------------

    def create_declaration_reflection(
        self,
        kind: ReflectionKind,
        binding: Binding | None,
        export_binding: Binding | None,
        # Modules don't always have bindings
        name_override: str | None = None,
    ) -> DeclarationReflection:
        if name_override is not None:
            raw_name = name_override
        elif export_binding is not None:
            raw_name = export_binding.name
        elif binding is not None:
            raw_name = binding.name
        else:
            raw_name = "unknown"
        name = get_human_name(raw_name)

        if self.converting_class_or_interface:
            if kind == ReflectionKind.FUNCTION:
                kind = ReflectionKind.METHOD
            elif kind == ReflectionKind.VARIABLE:
                kind = ReflectionKind.PROPERTY

        reflection = DeclarationReflection(name, kind, self.scope)
        self.post_reflection_creation(reflection, binding, export_binding)
        self.logger.debug(
            "reflection_created",
            reflection_id=reflection.id,
            name=name,
            kind=kind.name,
            scope=self.scope.name,
        )
        return reflection

    def post_reflection_creation(
        self,
        reflection: Reflection,
        binding: Binding | None,
        export_binding: Binding | None,
    ) -> None:
        """Shared steps for every new reflection, in a fixed order."""
        if export_binding is not None and reflection.kind_of(
            ReflectionKind.SOME_MODULE | ReflectionKind.REFERENCE
        ):
            reflection.comment = self.get_comment(export_binding, reflection.kind)
        if binding is not None and reflection.comment is None:
            reflection.comment = self.get_comment(binding, reflection.kind)

        if self.should_be_static:
            reflection.set_flag(ReflectionFlag.STATIC)

        if reflection.is_declaration:
            reflection.escaped_name = binding.escaped_name if binding is not None else None  # type: ignore[attr-defined]
            self.add_child(reflection)

        if binding is not None and self.converter.is_external(binding):
            reflection.set_flag(ReflectionFlag.EXTERNAL)

        if export_binding is not None:
            self.register_reflection(reflection, export_binding)
        self.register_reflection(reflection, binding)

    def finalize_declaration_reflection(self, reflection: Reflection) -> None:
        """Announce a structurally complete reflection to enrichment listeners."""
        self.converter.trigger(ConverterEvents.CREATE_DECLARATION, self, reflection)

    def add_child(self, reflection: Reflection) -> None:
        if self.scope.can_hold_children:
            cast(ContainerReflection, self.scope).add_child(reflection)

    def should_ignore(self, binding: Binding) -> bool:
        return self.converter.should_ignore(binding)

    def register_reflection(self, reflection: Reflection, binding: Binding | None) -> None:
        """Make ``reflection`` reachable from the project registry (and from ``binding``)."""
        self.project.register_reflection(reflection, binding)

    def trigger(self, name: str, reflection: Reflection, node: SyntaxNode | None = None) -> None:
        """Fire ``name`` on the converter with this context as the first argument."""
        self.converter.trigger(name, self, reflection, node)

    # -- comments ---------------------------------------------------------

    def _link_resolver(self) -> SymbolResolver | None:
        return self.resolver if self.converter.use_link_resolution else None

    def get_comment(self, binding: Binding, kind: ReflectionKind) -> Comment | None:
        return get_comment(
            binding,
            kind,
            self.converter.comment_config,
            self.logger,
            self.converter.comment_style,
            self._link_resolver(),
        )

    def get_file_comment(self, node: SourceFile) -> Comment | None:
        return get_file_comment(
            node,
            self.converter.comment_config,
            self.logger,
            self.converter.comment_style,
            self._link_resolver(),
        )

    def get_declaration_comment(self, declaration: TagDeclaration) -> Comment | None:
        return get_declaration_comment(
            declaration,
            self.converter.comment_config,
            self.logger,
            self._link_resolver(),
        )

    def get_signature_comment(self, declaration: SyntaxNode) -> Comment | None:
        return get_signature_comment(
            declaration,
            self.converter.comment_config,
            self.logger,
            self.converter.comment_style,
            self._link_resolver(),
        )

    # -- scope derivation -------------------------------------------------

    def with_scope(self, scope: Reflection) -> Context:
        """A context inserting into ``scope``, for converting its members.

        Shares converter, programs and project; keeps the active program and
        ``converting_type_node``; resets the per-declaration switches.
        """
        context = Context(
            self.converter,
            self.programs,
            self.project,
            scope,
            mode=self.mode.derive(),
        )
        context.set_active_program(self._program)
        return context
