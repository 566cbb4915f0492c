"""Baseline visitors: turn each kind of binding into reflections.

Visitors are registered per ``BindingKind`` with ``VisitorRegistry.register``.
Each receives the converter (to recurse through ``convert_binding``), the
context whose scope the new reflection goes into, the binding, and the
binding it is exported under, if different.

These visitors build the structural tree only: containers, members, kinds,
flags and comments. Signatures, types and other details are attached by
listeners of ``ConverterEvents.CREATE_DECLARATION``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from docplane.models.kinds import ReflectionKind
from docplane.models.reflections import ReferenceReflection
from docplane.semantic.names import get_human_name
from docplane.semantic.protocols import BindingKind

if TYPE_CHECKING:
    from docplane.converter.context import Context
    from docplane.models.reflections import Reflection
    from docplane.semantic.protocols import Binding


class BindingConverter(Protocol):
    def convert_binding(
        self,
        context: Context,
        binding: Binding,
        export_binding: Binding | None = None,
    ) -> Reflection | None: ...


Visitor = Callable[["BindingConverter", "Context", "Binding", "Binding | None"], "Reflection | None"]


class VisitorRegistry:
    """Visitors keyed by binding kind, registered with a decorator."""

    def __init__(self) -> None:
        self._visitors: dict[BindingKind, Visitor] = {}

    def register(self, *kinds: BindingKind) -> Callable[[Visitor], Visitor]:
        """Decorator to register a visitor for one or more binding kinds.

        Usage:
            @visitors.register(BindingKind.FUNCTION)
            def convert_function(converter, context, binding, export_binding):
                ...
        """

        def decorator(fn: Visitor) -> Visitor:
            for kind in kinds:
                self._visitors[kind] = fn
            return fn

        return decorator

    def get(self, kind: BindingKind) -> Visitor | None:
        return self._visitors.get(kind)

    def copy(self) -> VisitorRegistry:
        """Independent registry starting with the same visitors."""
        clone = VisitorRegistry()
        clone._visitors = dict(self._visitors)
        return clone

    def clear(self) -> None:
        self._visitors.clear()


default_visitors = VisitorRegistry()

_LEAF_KINDS: dict[BindingKind, ReflectionKind] = {
    BindingKind.FUNCTION: ReflectionKind.FUNCTION,
    BindingKind.VARIABLE: ReflectionKind.VARIABLE,
    BindingKind.PROPERTY: ReflectionKind.PROPERTY,
    BindingKind.METHOD: ReflectionKind.METHOD,
    BindingKind.CONSTRUCTOR: ReflectionKind.CONSTRUCTOR,
    BindingKind.ACCESSOR: ReflectionKind.ACCESSOR,
    BindingKind.TYPE_ALIAS: ReflectionKind.TYPE_ALIAS,
    BindingKind.ENUM_MEMBER: ReflectionKind.ENUM_MEMBER,
}


def create_reference(
    context: Context,
    target: Reflection,
    binding: Binding,
    export_binding: Binding | None,
) -> ReferenceReflection:
    """A reference to an already documented reflection, named after the export."""
    name = get_human_name(export_binding.name if export_binding is not None else binding.name)
    reflection = ReferenceReflection(name, target, context.scope)
    context.post_reflection_creation(reflection, None, export_binding)
    context.finalize_declaration_reflection(reflection)
    return reflection


@default_visitors.register(BindingKind.MODULE, BindingKind.NAMESPACE)
def convert_namespace(
    converter: BindingConverter,
    context: Context,
    binding: Binding,
    export_binding: Binding | None,
) -> Reflection:
    kind = ReflectionKind.MODULE if binding.kind is BindingKind.MODULE else ReflectionKind.NAMESPACE
    reflection = context.create_declaration_reflection(kind, binding, export_binding)
    member_context = context.with_scope(reflection)
    for member in binding.members:
        converter.convert_binding(member_context, member)
    context.finalize_declaration_reflection(reflection)
    return reflection


@default_visitors.register(BindingKind.CLASS, BindingKind.INTERFACE)
def convert_class_or_interface(
    converter: BindingConverter,
    context: Context,
    binding: Binding,
    export_binding: Binding | None,
) -> Reflection:
    kind = ReflectionKind.CLASS if binding.kind is BindingKind.CLASS else ReflectionKind.INTERFACE
    reflection = context.create_declaration_reflection(kind, binding, export_binding)

    member_context = context.with_scope(reflection)
    member_context.converting_class_or_interface = True
    for member in binding.members:
        member_context.should_be_static = "static" in member.modifiers
        converter.convert_binding(member_context, member)

    context.finalize_declaration_reflection(reflection)
    return reflection


@default_visitors.register(BindingKind.ENUM)
def convert_enum(
    converter: BindingConverter,
    context: Context,
    binding: Binding,
    export_binding: Binding | None,
) -> Reflection:
    reflection = context.create_declaration_reflection(ReflectionKind.ENUM, binding, export_binding)
    member_context = context.with_scope(reflection)
    for member in binding.members:
        converter.convert_binding(member_context, member)
    context.finalize_declaration_reflection(reflection)
    return reflection


@default_visitors.register(*_LEAF_KINDS)
def convert_leaf(
    converter: BindingConverter,  # noqa: ARG001
    context: Context,
    binding: Binding,
    export_binding: Binding | None,
) -> Reflection:
    reflection = context.create_declaration_reflection(
        _LEAF_KINDS[binding.kind], binding, export_binding
    )
    context.finalize_declaration_reflection(reflection)
    return reflection


@default_visitors.register(BindingKind.ALIAS)
def convert_alias(
    converter: BindingConverter,
    context: Context,
    binding: Binding,
    export_binding: Binding | None,
) -> Reflection | None:
    target = context.resolve_aliased_binding(binding)
    if target.is_alias:
        context.logger.warning("unresolved_alias", name=binding.name, scope=context.scope.name)
        return None
    return converter.convert_binding(context, target, export_binding or binding)
