"""Selecting documentation comments from raw source comments.

Which comments count depends on the configured comment style:

- ``jsdoc``: block comments opening with ``/**`` (``/***`` separators excluded)
- ``block``: any ``/* */`` comment
- ``line``: runs of consecutive ``//`` comments
- ``all``: any of the above
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docplane.config.models import CommentStyle
    from docplane.semantic.protocols import RawComment

FILE_COMMENT_TAGS = ("@module", "@packageDocumentation")


def _block_matches(text: str, style: CommentStyle) -> bool:
    if style == "jsdoc":
        return text.startswith("/**") and not text.startswith("/***") and text != "/**/"
    return style in ("block", "all") and text.startswith("/*")


def candidate_comments(comments: Sequence[RawComment], style: CommentStyle) -> list[str]:
    """Comments usable as documentation, in source order.

    Consecutive line comments are merged into one candidate.
    """
    candidates: list[str] = []
    line_run: list[str] = []

    def flush() -> None:
        if line_run:
            candidates.append("\n".join(line_run))
            line_run.clear()

    for comment in comments:
        if comment.kind == "line":
            if style in ("line", "all"):
                line_run.append(comment.text)
            else:
                flush()
            continue
        flush()
        if _block_matches(comment.text, style):
            candidates.append(comment.text)
    flush()
    return candidates


def is_file_comment(text: str) -> bool:
    return any(tag in text for tag in FILE_COMMENT_TAGS)


def discover_comment(comments: Sequence[RawComment], style: CommentStyle) -> str | None:
    """The documentation comment of a declaration: the last candidate before it.

    Comments that document the enclosing file are skipped.
    """
    for text in reversed(candidate_comments(comments, style)):
        if not is_file_comment(text):
            return text
    return None


def discover_file_comment(comments: Sequence[RawComment], style: CommentStyle) -> str | None:
    """The documentation comment of a file: its first candidate.

    A lone first comment is assumed to document the first declaration unless
    it is explicitly marked as a file comment.
    """
    candidates = candidate_comments(comments, style)
    if not candidates:
        return None
    first = candidates[0]
    if len(candidates) > 1 or is_file_comment(first):
        return first
    return None
