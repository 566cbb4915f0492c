"""Tests for the conversion context."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from docplane.converter.context import Context, TraversalMode
from docplane.converter.errors import InactiveProgramError, MissingBindingError
from docplane.converter.events import ConverterEvents
from docplane.models.errors import RegistrationConflictError
from docplane.models.kinds import ReflectionFlag, ReflectionKind
from docplane.models.reflections import (
    DeclarationReflection,
    ProjectReflection,
    ReferenceReflection,
)
from docplane.semantic.memory import (
    MemoryBinding,
    MemoryNode,
    MemoryProgram,
    MemoryResolver,
    MemorySourceFile,
    MemoryTagDeclaration,
)
from docplane.semantic.protocols import BindingKind, RawComment

if TYPE_CHECKING:
    from tests.converter.conftest import FakeServices

MakeBinding = Callable[..., MemoryBinding]


class TestTraversalMode:
    def test_defaults_off(self) -> None:
        mode = TraversalMode()

        assert not mode.converting_type_node
        assert not mode.converting_class_or_interface
        assert not mode.should_be_static

    def test_derive_keeps_only_type_node(self) -> None:
        mode = TraversalMode(
            converting_type_node=True,
            converting_class_or_interface=True,
            should_be_static=True,
        )

        assert mode.derive() == TraversalMode(converting_type_node=True)


class TestWithScope:
    """Derived contexts."""

    @pytest.mark.parametrize("type_node", [True, False])
    def test_given_any_mode_when_derived_then_per_declaration_switches_reset(
        self, context: Context, project: ProjectReflection, type_node: bool
    ) -> None:
        # Given
        scope = DeclarationReflection("ns", ReflectionKind.NAMESPACE, project)
        context.converting_type_node = type_node
        context.converting_class_or_interface = True
        context.should_be_static = True

        # When
        derived = context.with_scope(scope)

        # Then
        assert derived.converting_type_node is type_node
        assert derived.converting_class_or_interface is False
        assert derived.should_be_static is False
        assert derived.active_program is context.active_program
        assert derived.scope is scope
        assert derived.project is context.project
        assert derived.converter is context.converter
        assert derived.programs == context.programs

    def test_later_changes_do_not_leak_between_contexts(
        self, context: Context, project: ProjectReflection
    ) -> None:
        # Given
        derived = context.with_scope(project)

        # When
        context.converting_type_node = True
        derived.should_be_static = True

        # Then
        assert derived.converting_type_node is False
        assert context.should_be_static is False

    def test_inactive_program_carried(
        self, services: FakeServices, program: MemoryProgram, project: ProjectReflection
    ) -> None:
        context = Context(services, [program], project)

        derived = context.with_scope(project)

        assert derived.active_program is None


class TestActiveProgram:
    def test_given_lifecycle_when_accessed_then_fails_only_while_unset(
        self,
        services: FakeServices,
        program: MemoryProgram,
        resolver: MemoryResolver,
        project: ProjectReflection,
    ) -> None:
        # Given
        context = Context(services, [program], project)

        # Then - before any program is set
        assert context.active_program is None
        with pytest.raises(InactiveProgramError):
            _ = context.program
        with pytest.raises(InactiveProgramError):
            _ = context.resolver

        # When - a program is activated
        context.set_active_program(program)

        # Then
        assert context.program is program
        assert context.require_active_program() is program
        assert context.resolver is resolver

        # When - deactivated again
        context.set_active_program(None)

        # Then
        with pytest.raises(InactiveProgramError):
            context.require_active_program()

    def test_error_message(self) -> None:
        assert str(InactiveProgramError()) == (
            "Tried to access Context.program when not converting a source file"
        )


class TestTypeResolution:
    """get_type_at_location and its fallback chain."""

    def test_direct_type(
        self, context: Context, source: MemorySourceFile, resolver: MemoryResolver
    ) -> None:
        node = MemoryNode("Identifier", source)
        resolver.set_type(node, "string")

        assert context.get_type_at_location(node) == "string"

    def test_falls_back_to_node_binding(self, context: Context, source: MemorySourceFile) -> None:
        binding = MemoryBinding("x", BindingKind.VARIABLE, declared_type="number")
        node = MemoryNode("VariableDeclaration", source, binding=binding)

        assert context.get_type_at_location(node) == "number"

    def test_falls_back_to_parent_binding(self, context: Context, source: MemorySourceFile) -> None:
        binding = MemoryBinding("f", BindingKind.FUNCTION, declared_type="() => void")
        parent = MemoryNode("FunctionDeclaration", source, binding=binding)
        node = MemoryNode("Identifier", source, parent=parent)

        assert context.get_type_at_location(node) == "() => void"

    def test_falls_back_to_grandparent_binding(
        self, context: Context, source: MemorySourceFile
    ) -> None:
        binding = MemoryBinding("C", BindingKind.CLASS, declared_type="typeof C")
        grandparent = MemoryNode("ClassDeclaration", source, binding=binding)
        parent = MemoryNode("HeritageClause", source, parent=grandparent)
        node = MemoryNode("Identifier", source, parent=parent)

        assert context.get_type_at_location(node) == "typeof C"

    def test_stops_at_great_grandparent(self, context: Context, source: MemorySourceFile) -> None:
        binding = MemoryBinding("C", BindingKind.CLASS, declared_type="typeof C")
        top = MemoryNode("ClassDeclaration", source, binding=binding)
        grandparent = MemoryNode("Block", source, parent=top)
        parent = MemoryNode("ExpressionStatement", source, parent=grandparent)
        node = MemoryNode("Identifier", source, parent=parent)

        assert context.get_type_at_location(node) is None

    def test_only_first_binding_consulted(self, context: Context, source: MemorySourceFile) -> None:
        """The nearest binding answers even when it has no declared type."""
        outer = MemoryBinding("outer", BindingKind.FUNCTION, declared_type="() => void")
        inner = MemoryBinding("inner", BindingKind.VARIABLE)
        parent = MemoryNode("FunctionDeclaration", source, binding=outer)
        node = MemoryNode("VariableDeclaration", source, parent=parent, binding=inner)

        assert context.get_type_at_location(node) is None

    def test_given_engine_failure_when_resolving_then_falls_back(
        self, services: FakeServices, source: MemorySourceFile, project: ProjectReflection
    ) -> None:
        # Given
        program = MemoryProgram([source], resolver=MemoryResolver(fail_type_of=True))
        context = Context(services, [program], project)
        context.set_active_program(program)
        binding = MemoryBinding("x", BindingKind.VARIABLE, declared_type="number")
        node = MemoryNode("VariableDeclaration", source, binding=binding)

        # When
        result = context.get_type_at_location(node)

        # Then
        assert result == "number"
        assert services.logger.debug.call_args.args[0] == "type_resolution_failed"

    def test_engine_failure_without_fallback_is_none(
        self, services: FakeServices, source: MemorySourceFile, project: ProjectReflection
    ) -> None:
        program = MemoryProgram([source], resolver=MemoryResolver(fail_type_of=True))
        context = Context(services, [program], project)
        context.set_active_program(program)

        assert context.get_type_at_location(MemoryNode("Identifier", source)) is None

    def test_inactive_program_not_swallowed(
        self,
        services: FakeServices,
        program: MemoryProgram,
        project: ProjectReflection,
        source: MemorySourceFile,
    ) -> None:
        context = Context(services, [program], project)

        with pytest.raises(InactiveProgramError):
            context.get_type_at_location(MemoryNode("Identifier", source))


class TestBindingResolution:
    def test_direct(
        self, context: Context, source: MemorySourceFile, resolver: MemoryResolver
    ) -> None:
        binding = MemoryBinding("foo", BindingKind.VARIABLE)
        node = MemoryNode("Identifier", source)
        resolver.bind_location(node, binding)

        assert context.get_binding_at_location(node) is binding
        assert context.expect_binding_at_location(node) is binding

    def test_through_name_node(
        self, context: Context, source: MemorySourceFile, resolver: MemoryResolver
    ) -> None:
        binding = MemoryBinding("Foo", BindingKind.CLASS)
        name = MemoryNode("Identifier", source)
        declaration = MemoryNode("ClassDeclaration", source, name_node=name)
        resolver.bind_location(name, binding)

        assert context.get_binding_at_location(declaration) is binding

    def test_missing(self, context: Context, source: MemorySourceFile) -> None:
        assert context.get_binding_at_location(MemoryNode("Identifier", source)) is None

    def test_given_name_node_bound_to_other_binding_then_node_binding_wins(
        self, context: Context, source: MemorySourceFile, resolver: MemoryResolver
    ) -> None:
        # Given
        own = MemoryBinding("Foo", BindingKind.CLASS)
        other = MemoryBinding("Bar", BindingKind.CLASS)
        name = MemoryNode("Identifier", source)
        declaration = MemoryNode("ClassDeclaration", source, name_node=name)
        resolver.bind_location(declaration, own)
        resolver.bind_location(name, other)

        # When / Then
        assert context.get_binding_at_location(declaration) is own

    def test_source_file_without_name_node(
        self, context: Context, source: MemorySourceFile
    ) -> None:
        assert source.name_node is None
        assert context.get_binding_at_location(source) is None

    def test_given_unbound_node_when_expected_then_error_names_kind_and_line(
        self, context: Context, source: MemorySourceFile
    ) -> None:
        # Given - "class" sits on the third line of the file
        node = MemoryNode("ClassDeclaration", source, pos=source.text.index("class"))

        # When
        with pytest.raises(MissingBindingError) as exc_info:
            context.expect_binding_at_location(node)

        # Then
        error = exc_info.value
        assert str(error) == (
            "Expected a binding for node with kind ClassDeclaration at src/index.ts:3"
        )
        assert error.kind == "ClassDeclaration"
        assert error.line == 3

    def test_resolve_aliased_binding(self, context: Context) -> None:
        target = MemoryBinding("Foo", BindingKind.CLASS)
        alias = MemoryBinding("Bar", BindingKind.ALIAS, alias_target=target)

        assert context.resolve_aliased_binding(alias) is target


class TestCreateDeclarationReflection:
    """Node creation protocol."""

    def test_given_class_member_mode_when_creating_variable_then_static_property(
        self, context: Context, project: ProjectReflection, make_binding: MakeBinding
    ) -> None:
        # Given
        scope = DeclarationReflection("Widget", ReflectionKind.CLASS, project)
        member_context = context.with_scope(scope)
        member_context.converting_class_or_interface = True
        member_context.should_be_static = True
        foo = make_binding("foo", BindingKind.VARIABLE)

        # When
        reflection = member_context.create_declaration_reflection(
            ReflectionKind.VARIABLE, foo, None
        )

        # Then
        assert reflection.kind == ReflectionKind.PROPERTY
        assert reflection.name == "foo"
        assert reflection.has_flag(ReflectionFlag.STATIC)
        assert reflection.parent is scope
        assert scope.children == (reflection,)
        assert project.get_reflection_from_binding(foo) is reflection

    @pytest.mark.parametrize(
        ("kind", "in_class", "expected"),
        [
            (ReflectionKind.FUNCTION, True, ReflectionKind.METHOD),
            (ReflectionKind.VARIABLE, True, ReflectionKind.PROPERTY),
            (ReflectionKind.CLASS, True, ReflectionKind.CLASS),
            (ReflectionKind.FUNCTION, False, ReflectionKind.FUNCTION),
            (ReflectionKind.VARIABLE, False, ReflectionKind.VARIABLE),
        ],
    )
    def test_kind_promotion(
        self,
        context: Context,
        make_binding: MakeBinding,
        kind: ReflectionKind,
        in_class: bool,
        expected: ReflectionKind,
    ) -> None:
        context.converting_class_or_interface = in_class
        binding = make_binding("member", BindingKind.VARIABLE)

        reflection = context.create_declaration_reflection(kind, binding, None)

        assert reflection.kind == expected

    def test_name_override_wins(self, context: Context, make_binding: MakeBinding) -> None:
        binding = make_binding("impl", BindingKind.NAMESPACE)
        export = make_binding("api", BindingKind.ALIAS)

        reflection = context.create_declaration_reflection(
            ReflectionKind.MODULE, binding, export, name_override='"util"'
        )

        assert reflection.name == "util"

    def test_export_name_beats_binding_name(
        self, context: Context, make_binding: MakeBinding
    ) -> None:
        binding = make_binding("foo", BindingKind.FUNCTION)
        export = make_binding("bar", BindingKind.ALIAS)

        reflection = context.create_declaration_reflection(ReflectionKind.FUNCTION, binding, export)

        assert reflection.name == "bar"

    def test_unique_symbol_name_humanized(self, context: Context, make_binding: MakeBinding) -> None:
        binding = make_binding("__@iterator@12", BindingKind.METHOD)

        reflection = context.create_declaration_reflection(ReflectionKind.METHOD, binding, None)

        assert reflection.name == "[iterator]"

    def test_no_names_at_all(self, context: Context, project: ProjectReflection) -> None:
        reflection = context.create_declaration_reflection(ReflectionKind.MODULE, None, None)

        assert reflection.name == "unknown"
        assert reflection.escaped_name is None
        assert project.get_reflection_by_id(reflection.id) is reflection
        assert project.get_binding_from_reflection(reflection) is None

    def test_escaped_name_from_binding(self, context: Context, make_binding: MakeBinding) -> None:
        binding = make_binding("x", BindingKind.PROPERTY, escaped_name="__x")

        reflection = context.create_declaration_reflection(ReflectionKind.PROPERTY, binding, None)

        assert reflection.escaped_name == "__x"

    def test_external_flag(
        self, context: Context, services: FakeServices, make_binding: MakeBinding
    ) -> None:
        services.external.add("debounce")
        binding = make_binding("debounce", BindingKind.FUNCTION)

        reflection = context.create_declaration_reflection(ReflectionKind.FUNCTION, binding, None)

        assert reflection.has_flag(ReflectionFlag.EXTERNAL)
        assert not reflection.has_flag(ReflectionFlag.STATIC)

    def test_registered_under_export_and_binding(
        self, context: Context, project: ProjectReflection, make_binding: MakeBinding
    ) -> None:
        binding = make_binding("foo", BindingKind.FUNCTION)
        export = make_binding("bar", BindingKind.ALIAS)

        reflection = context.create_declaration_reflection(ReflectionKind.FUNCTION, binding, export)

        assert project.get_reflection_from_binding(binding) is reflection
        assert project.get_reflection_from_binding(export) is reflection
        assert project.get_binding_from_reflection(reflection) is export

    def test_binding_converted_twice_conflicts(
        self, context: Context, make_binding: MakeBinding
    ) -> None:
        binding = make_binding("foo", BindingKind.FUNCTION)
        context.create_declaration_reflection(ReflectionKind.FUNCTION, binding, None)

        with pytest.raises(RegistrationConflictError):
            context.create_declaration_reflection(ReflectionKind.FUNCTION, binding, None)

    def test_logs_creation(
        self, context: Context, services: FakeServices, make_binding: MakeBinding
    ) -> None:
        binding = make_binding("foo", BindingKind.VARIABLE)

        reflection = context.create_declaration_reflection(ReflectionKind.VARIABLE, binding, None)

        services.logger.debug.assert_any_call(
            "reflection_created",
            reflection_id=reflection.id,
            name="foo",
            kind="VARIABLE",
            scope="Docs",
        )


class TestCommentPriority:
    def test_given_module_with_both_comments_then_export_comment_wins(
        self, context: Context, make_binding: MakeBinding
    ) -> None:
        # Given
        binding = make_binding("impl", BindingKind.NAMESPACE, doc="Declared.")
        export = make_binding("api", BindingKind.ALIAS, doc="Exported.")

        # When
        reflection = context.create_declaration_reflection(
            ReflectionKind.NAMESPACE, binding, export
        )

        # Then
        assert reflection.comment is not None
        assert reflection.comment.summary_text() == "Exported."

    def test_module_without_export_comment_uses_binding(
        self, context: Context, make_binding: MakeBinding
    ) -> None:
        binding = make_binding("impl", BindingKind.NAMESPACE, doc="Declared.")
        export = make_binding("api", BindingKind.ALIAS)

        reflection = context.create_declaration_reflection(
            ReflectionKind.NAMESPACE, binding, export
        )

        assert reflection.comment is not None
        assert reflection.comment.summary_text() == "Declared."

    def test_non_module_ignores_export_comment(
        self, context: Context, make_binding: MakeBinding
    ) -> None:
        binding = make_binding("foo", BindingKind.FUNCTION, doc="Declared.")
        export = make_binding("bar", BindingKind.ALIAS, doc="Exported.")

        reflection = context.create_declaration_reflection(ReflectionKind.FUNCTION, binding, export)

        assert reflection.comment is not None
        assert reflection.comment.summary_text() == "Declared."

    def test_uncommented_binding(self, context: Context, make_binding: MakeBinding) -> None:
        binding = make_binding("foo", BindingKind.FUNCTION)

        reflection = context.create_declaration_reflection(ReflectionKind.FUNCTION, binding, None)

        assert reflection.comment is None


class TestNonContainerScope:
    def test_given_reference_scope_when_creating_then_not_added_anywhere(
        self,
        services: FakeServices,
        program: MemoryProgram,
        project: ProjectReflection,
        make_binding: MakeBinding,
    ) -> None:
        # Given
        target = DeclarationReflection("Foo", ReflectionKind.CLASS, project)
        reference = ReferenceReflection("Bar", target, project)
        context = Context(services, [program], project, reference)
        context.set_active_program(program)

        # When
        reflection = context.create_declaration_reflection(
            ReflectionKind.VARIABLE, make_binding("x", BindingKind.VARIABLE), None
        )

        # Then
        assert reflection.parent is reference
        assert project.children == ()

    def test_add_child_is_noop(
        self, services: FakeServices, program: MemoryProgram, project: ProjectReflection
    ) -> None:
        target = DeclarationReflection("Foo", ReflectionKind.CLASS, project)
        reference = ReferenceReflection("Bar", target, project)
        context = Context(services, [program], project, reference)

        context.add_child(DeclarationReflection("x", ReflectionKind.VARIABLE, reference))

        assert project.children == ()


class TestRegistration:
    def test_repeated_registration_is_idempotent(
        self, context: Context, project: ProjectReflection, make_binding: MakeBinding
    ) -> None:
        binding = make_binding("foo", BindingKind.VARIABLE)
        reflection = DeclarationReflection("foo", ReflectionKind.VARIABLE, project)

        context.register_reflection(reflection, binding)
        context.register_reflection(reflection, binding)

        assert project.get_reflection_from_binding(binding) is reflection
        assert project.registry.get_bindings(reflection) == [binding]


class TestEventsAndPolicy:
    def test_finalize_fires_create_declaration(
        self, context: Context, services: FakeServices, project: ProjectReflection
    ) -> None:
        reflection = DeclarationReflection("foo", ReflectionKind.VARIABLE, project)

        context.finalize_declaration_reflection(reflection)

        assert services.events == [(ConverterEvents.CREATE_DECLARATION, context, reflection)]

    def test_trigger_passes_context_reflection_node(
        self,
        context: Context,
        services: FakeServices,
        project: ProjectReflection,
        source: MemorySourceFile,
    ) -> None:
        reflection = DeclarationReflection("foo", ReflectionKind.VARIABLE, project)
        node = MemoryNode("Identifier", source)

        context.trigger("custom", reflection, node)
        context.trigger("custom", reflection)

        assert services.events == [
            ("custom", context, reflection, node),
            ("custom", context, reflection, None),
        ]

    def test_should_ignore_delegates(
        self, context: Context, services: FakeServices, make_binding: MakeBinding
    ) -> None:
        services.ignored.add("secret")

        assert context.should_ignore(make_binding("secret", BindingKind.VARIABLE))
        assert not context.should_ignore(make_binding("public", BindingKind.VARIABLE))

    def test_logger_is_converters(self, context: Context, services: FakeServices) -> None:
        assert context.logger is services.logger


class TestCommentDelegation:
    def test_links_bound_when_enabled(
        self,
        context: Context,
        services: FakeServices,
        resolver: MemoryResolver,
        make_binding: MakeBinding,
    ) -> None:
        # Given
        services.use_link_resolution = True
        target = MemoryBinding("Foo", BindingKind.CLASS)
        resolver.add_name(target)
        binding = make_binding("make", BindingKind.FUNCTION, doc="Builds a {@link Foo}.")

        # When
        comment = context.get_comment(binding, ReflectionKind.FUNCTION)

        # Then
        assert comment is not None
        assert comment.summary[1].target is target

    def test_links_unbound_when_disabled(
        self, context: Context, resolver: MemoryResolver, make_binding: MakeBinding
    ) -> None:
        resolver.add_name(MemoryBinding("Foo", BindingKind.CLASS))
        binding = make_binding("make", BindingKind.FUNCTION, doc="Builds a {@link Foo}.")

        comment = context.get_comment(binding, ReflectionKind.FUNCTION)

        assert comment is not None
        assert comment.summary[1].target is None

    def test_comment_style_from_services(
        self, context: Context, services: FakeServices, source: MemorySourceFile
    ) -> None:
        services.comment_style = "line"
        binding = MemoryBinding("count", BindingKind.VARIABLE)
        binding.declarations.append(
            MemoryNode(
                "VariableDeclaration",
                source,
                leading_comments=[RawComment("// How many.", "line")],
            )
        )

        comment = context.get_comment(binding, ReflectionKind.VARIABLE)

        assert comment is not None
        assert comment.summary_text() == "How many."

    def test_file_comment(self, context: Context) -> None:
        source = MemorySourceFile(
            "lib.ts", leading_comments=[RawComment("/** Library.\n * @module\n */", "block")]
        )

        comment = context.get_file_comment(source)

        assert comment is not None
        assert comment.summary_text() == "Library."

    def test_declaration_comment(self, context: Context, source: MemorySourceFile) -> None:
        declaration = MemoryTagDeclaration("@typedef", "A point.", source)

        comment = context.get_declaration_comment(declaration)

        assert comment is not None
        assert comment.summary_text() == "A point."

    def test_signature_comment(self, context: Context, source: MemorySourceFile) -> None:
        holder = MemoryNode(
            "VariableDeclaration",
            source,
            leading_comments=[RawComment("/** Doubles. */", "block")],
        )
        arrow = MemoryNode("ArrowFunction", source, parent=holder)

        comment = context.get_signature_comment(arrow)

        assert comment is not None
        assert comment.summary_text() == "Doubles."
