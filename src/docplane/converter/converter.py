"""Conversion orchestrator.

Owns the policy a ``Context`` consults (externality, exclusion, comment
configuration, logging, events) and drives the traversal: one pass per
program, one module per entry point, one visitor call per binding.

Usage::

    converter = Converter(load_config())
    converter.on(ConverterEvents.CREATE_DECLARATION, attach_signatures)
    project = converter.convert([program])
"""

from __future__ import annotations

import fnmatch
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from docplane.config.models import DocPlaneConfig
from docplane.converter.context import Context
from docplane.converter.events import ConverterEvents, EventBus, Listener
from docplane.converter.symbols import VisitorRegistry, create_reference, default_visitors
from docplane.core.errors import CodedError
from docplane.core.logging import clear_run_id, get_logger, set_run_id
from docplane.models.kinds import ReflectionKind
from docplane.models.reflections import ProjectReflection

if TYPE_CHECKING:
    import structlog

    from docplane.config.models import CommentConfig, CommentStyle
    from docplane.models.reflections import DeclarationReflection, Reflection
    from docplane.semantic.protocols import Binding, Program, SourceFile

_EXTENSION_RE = re.compile(r"(\.d)?\.[^./]+$")


def matches_glob(path: str, pattern: str) -> bool:
    """Check if a path matches a glob pattern, with ** support."""
    path = path.replace("\\", "/")
    if fnmatch.fnmatch(path, pattern):
        return True
    # Handle **/pattern for any-depth matching
    if pattern.startswith("**/"):
        return fnmatch.fnmatch(path, pattern[3:])
    return False


def module_name(file_name: str) -> str:
    """Display name of an entry point module: base name without extensions."""
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    return _EXTENSION_RE.sub("", base) or base


class Converter:
    """Builds a ``ProjectReflection`` from one or more programs.

    Args:
        config: Full configuration. Defaults to built-in defaults.
        logger: Logger threaded into every context. Defaults to ``docplane.converter``.
        events: Event bus listeners are registered on. A fresh one if omitted.
        visitors: Visitors per binding kind. Defaults to the baseline visitors.
    """

    def __init__(
        self,
        config: DocPlaneConfig | None = None,
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
        events: EventBus | None = None,
        visitors: VisitorRegistry | None = None,
    ) -> None:
        self.config = config or DocPlaneConfig()
        self._logger = logger or get_logger("docplane.converter")
        self.events = events or EventBus()
        self.visitors = visitors or default_visitors

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return self._logger

    @property
    def comment_config(self) -> CommentConfig:
        return self.config.comments

    @property
    def comment_style(self) -> CommentStyle:
        return self.config.comments.comment_style

    @property
    def use_link_resolution(self) -> bool:
        return self.config.converter.use_link_resolution

    # -- events -----------------------------------------------------------

    def on(self, name: str, listener: Listener, priority: int = 0) -> None:
        self.events.on(name, listener, priority)

    def off(self, name: str, listener: Listener) -> None:
        self.events.off(name, listener)

    def trigger(self, name: str, *args: Any) -> None:
        self.events.trigger(name, *args)

    # -- ignore policy ----------------------------------------------------

    def _declared_in(self, binding: Binding, patterns: Sequence[str]) -> bool:
        if not patterns:
            return False
        for declaration in binding.declarations:
            file_name = declaration.source_file.file_name
            if any(matches_glob(file_name, pattern) for pattern in patterns):
                return True
        return False

    def is_external(self, binding: Binding) -> bool:
        """True if any declaration of ``binding`` lives in an external file."""
        return self._declared_in(binding, self.config.converter.external_patterns)

    def is_excluded(self, binding: Binding) -> bool:
        return self._declared_in(binding, self.config.converter.exclude)

    def should_ignore(self, binding: Binding) -> bool:
        if self.is_excluded(binding):
            return True
        return self.config.converter.exclude_externals and self.is_external(binding)

    # -- traversal --------------------------------------------------------

    def convert(self, programs: Sequence[Program]) -> ProjectReflection:
        """Convert every entry point of every program into one project."""
        run_id = set_run_id()
        try:
            project = ProjectReflection(self.config.converter.project_name)
            context = Context(self, programs, project)
            entry_count = sum(len(program.entry_points) for program in programs)
            self.logger.info(
                "conversion_started",
                run_id=run_id,
                programs=len(programs),
                entry_points=entry_count,
            )

            self.trigger(ConverterEvents.CREATE_PROJECT, context, project)
            self.trigger(ConverterEvents.BEGIN, context)

            for program in programs:
                context.set_active_program(program)
                self.logger.debug("program_activated", entry_points=len(program.entry_points))
                try:
                    self.trigger(ConverterEvents.PROGRAM_BEGIN, context, program)
                    if entry_count == 1:
                        for source_file in program.entry_points:
                            self._convert_single_entry_point(context, program, source_file)
                    else:
                        # Every entry module is registered before any exports are
                        # converted, so a re-export of another entry point
                        # becomes a reference to its module.
                        modules = [
                            self._create_module(context, program, source_file)
                            for source_file in program.entry_points
                        ]
                        for source_file, binding, reflection in modules:
                            self._convert_module_exports(context, source_file, binding, reflection)
                    self.trigger(ConverterEvents.PROGRAM_END, context, program)
                finally:
                    context.set_active_program(None)

            self.trigger(ConverterEvents.END, context)
            self.logger.info("conversion_finished", reflections=len(project.registry))
            return project
        except CodedError as e:
            self.logger.error("conversion_failed", **e.to_dict())
            raise
        finally:
            clear_run_id()

    def _convert_single_entry_point(
        self,
        context: Context,
        program: Program,
        source_file: SourceFile,
    ) -> None:
        # The only module's exports become the project's children
        binding = program.module_binding_of(source_file)
        project = context.project
        if binding is not None:
            context.register_reflection(project, binding)
            project.comment = context.get_comment(binding, ReflectionKind.MODULE)
            for member in binding.members:
                self.convert_binding(context, member)
        else:
            project.comment = context.get_file_comment(source_file)

    def _create_module(
        self,
        context: Context,
        program: Program,
        source_file: SourceFile,
    ) -> tuple[SourceFile, Binding | None, DeclarationReflection]:
        binding = program.module_binding_of(source_file)
        reflection = context.create_declaration_reflection(
            ReflectionKind.MODULE,
            binding,
            None,
            name_override=module_name(source_file.file_name),
        )
        if binding is None:
            reflection.comment = context.get_file_comment(source_file)
        return source_file, binding, reflection

    def _convert_module_exports(
        self,
        context: Context,
        source_file: SourceFile,
        binding: Binding | None,
        reflection: Reflection,
    ) -> None:
        member_context = context.with_scope(reflection)
        for member in binding.members if binding is not None else ():
            self.convert_binding(member_context, member)
        context.finalize_declaration_reflection(reflection)
        self.logger.debug("entry_point_converted", file=source_file.file_name)

    def convert_binding(
        self,
        context: Context,
        binding: Binding,
        export_binding: Binding | None = None,
    ) -> Reflection | None:
        """Convert ``binding`` into ``context.scope`` with the matching visitor.

        Returns the created reflection, or None when the binding is ignored
        or no visitor handles its kind.
        """
        if context.should_ignore(binding):
            self.logger.debug("binding_ignored", name=binding.name)
            return None

        existing = context.project.get_reflection_from_binding(binding)
        if existing is not None:
            return create_reference(context, existing, binding, export_binding)

        visitor = self.visitors.get(binding.kind)
        if visitor is None:
            self.logger.warning("no_visitor", kind=binding.kind.value, name=binding.name)
            return None
        return visitor(self, context, binding, export_binding)
