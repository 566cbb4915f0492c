"""Semantic engine interfaces and helpers."""

from docplane.semantic.aliases import resolve_aliased_binding
from docplane.semantic.names import get_human_name
from docplane.semantic.protocols import (
    SOURCE_FILE_KIND,
    Binding,
    BindingKind,
    Program,
    RawComment,
    SourceFile,
    SymbolResolver,
    SyntaxNode,
    TagDeclaration,
)

__all__ = [
    "SOURCE_FILE_KIND",
    "Binding",
    "BindingKind",
    "Program",
    "RawComment",
    "SourceFile",
    "SymbolResolver",
    "SyntaxNode",
    "TagDeclaration",
    "get_human_name",
    "resolve_aliased_binding",
]
