"""Resolving the documentation comment of a binding, file, tag or signature.

Every function takes the comment configuration, a logger, and optionally a
resolver used to bind ``{@link}`` targets. They return ``None`` when no
documentation comment exists or when the comment has no content.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docplane.comments.discovery import discover_comment, discover_file_comment
from docplane.comments.parser import parse_comment
from docplane.models.kinds import ReflectionKind
from docplane.semantic.protocols import SOURCE_FILE_KIND

if TYPE_CHECKING:
    import structlog

    from docplane.config.models import CommentConfig, CommentStyle
    from docplane.models.comments import Comment
    from docplane.semantic.protocols import (
        Binding,
        SourceFile,
        SymbolResolver,
        SyntaxNode,
        TagDeclaration,
    )

# Nodes whose comment documents the function or arrow function they hold
_SIGNATURE_HOLDER_KINDS = frozenset(
    {
        "VariableDeclaration",
        "VariableDeclarationList",
        "VariableStatement",
        "PropertyDeclaration",
        "PropertyAssignment",
        "ExportAssignment",
    }
)


def _location(node: SyntaxNode | TagDeclaration) -> str:
    source = node.source_file
    pos = getattr(node, "pos", 0)
    line, _ = source.line_and_character_of(pos)
    return f"{source.file_name}:{line + 1}"


def _parse(
    text: str,
    node: SyntaxNode | TagDeclaration,
    config: CommentConfig,
    logger: structlog.stdlib.BoundLogger,
    resolver: SymbolResolver | None,
) -> Comment | None:
    comment = parse_comment(
        text,
        config,
        logger,
        location=_location(node),
        resolver=resolver,
        scope=node,
    )
    return None if comment.is_empty() else comment


def get_comment(
    binding: Binding,
    kind: ReflectionKind,
    config: CommentConfig,
    logger: structlog.stdlib.BoundLogger,
    comment_style: CommentStyle,
    resolver: SymbolResolver | None = None,
) -> Comment | None:
    """Comment documenting ``binding`` when converted as a reflection of ``kind``.

    Modules declared by a whole file take the file comment. Otherwise the
    first declaration carrying a documentation comment wins.
    """
    if kind & ReflectionKind.SOME_MODULE:
        for declaration in binding.declarations:
            if declaration.kind == SOURCE_FILE_KIND:
                return get_file_comment(
                    declaration,  # type: ignore[arg-type]
                    config,
                    logger,
                    comment_style,
                    resolver,
                )

    for declaration in binding.declarations:
        text = discover_comment(declaration.leading_comments, comment_style)
        if text is not None:
            return _parse(text, declaration, config, logger, resolver)
    return None


def get_file_comment(
    source_file: SourceFile,
    config: CommentConfig,
    logger: structlog.stdlib.BoundLogger,
    comment_style: CommentStyle,
    resolver: SymbolResolver | None = None,
) -> Comment | None:
    text = discover_file_comment(source_file.leading_comments, comment_style)
    if text is None:
        return None
    return _parse(text, source_file, config, logger, resolver)


def get_declaration_comment(
    declaration: TagDeclaration,
    config: CommentConfig,
    logger: structlog.stdlib.BoundLogger,
    resolver: SymbolResolver | None = None,
) -> Comment | None:
    """Comment of a declaration written as a documentation tag.

    The tag's own text is the comment; comment style does not apply.
    """
    if not declaration.comment_text:
        return None
    return _parse(declaration.comment_text, declaration, config, logger, resolver)


def get_signature_comment(
    declaration: SyntaxNode,
    config: CommentConfig,
    logger: structlog.stdlib.BoundLogger,
    comment_style: CommentStyle,
    resolver: SymbolResolver | None = None,
) -> Comment | None:
    """Comment of a call signature.

    Falls back to the variable or property holding the function
    (``const f = () => ...``), walking up through holder nodes.
    """
    node: SyntaxNode | None = declaration
    while node is not None:
        text = discover_comment(node.leading_comments, comment_style)
        if text is not None:
            return _parse(text, node, config, logger, resolver)
        parent = node.parent
        if parent is None or parent.kind not in _SIGNATURE_HOLDER_KINDS:
            return None
        node = parent
    return None
