"""Shared fixtures for converter tests.

``FakeServices`` stands in for the orchestrator: it records triggered events
and answers the ignore/externality questions from plain sets, so context
behavior can be tested without a ``Converter``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from docplane.config.models import CommentConfig, CommentStyle
from docplane.converter.context import Context
from docplane.models.reflections import ProjectReflection
from docplane.semantic.memory import (
    MemoryBinding,
    MemoryNode,
    MemoryProgram,
    MemoryResolver,
    MemorySourceFile,
)
from docplane.semantic.protocols import BindingKind, RawComment


class FakeServices:
    """Orchestrator capabilities backed by plain attributes."""

    def __init__(self) -> None:
        self.logger = MagicMock()
        self.comment_config = CommentConfig()
        self.comment_style: CommentStyle = "jsdoc"
        self.use_link_resolution = False
        self.external: set[str] = set()
        self.ignored: set[str] = set()
        self.events: list[tuple[Any, ...]] = []

    def is_external(self, binding: Any) -> bool:
        return binding.name in self.external

    def should_ignore(self, binding: Any) -> bool:
        return binding.name in self.ignored

    def trigger(self, name: str, *args: Any) -> None:
        self.events.append((name, *args))


@pytest.fixture
def services() -> FakeServices:
    return FakeServices()


@pytest.fixture
def source() -> MemorySourceFile:
    return MemorySourceFile("src/index.ts", text="export const foo = 1;\n\nexport class Foo {}\n")


@pytest.fixture
def resolver() -> MemoryResolver:
    return MemoryResolver()


@pytest.fixture
def program(source: MemorySourceFile, resolver: MemoryResolver) -> MemoryProgram:
    return MemoryProgram([source], resolver=resolver)


@pytest.fixture
def project() -> ProjectReflection:
    return ProjectReflection("Docs")


@pytest.fixture
def context(
    services: FakeServices, program: MemoryProgram, project: ProjectReflection
) -> Context:
    ctx = Context(services, [program], project)
    ctx.set_active_program(program)
    return ctx


@pytest.fixture
def make_binding(source: MemorySourceFile) -> Callable[..., MemoryBinding]:
    """Build a binding with one declaration node in ``source``."""

    def factory(
        name: str,
        kind: BindingKind,
        *,
        doc: str | None = None,
        node_kind: str = "VariableDeclaration",
        file: MemorySourceFile | None = None,
        **kwargs: Any,
    ) -> MemoryBinding:
        binding = MemoryBinding(name, kind, **kwargs)
        comments = [RawComment(f"/** {doc} */", "block")] if doc is not None else []
        node = MemoryNode(node_kind, file or source, binding=binding, leading_comments=comments)
        binding.declarations.append(node)
        return binding

    return factory
