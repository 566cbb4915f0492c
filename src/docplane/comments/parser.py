"""Parsing raw comment text into ``Comment`` objects.

Handles:
- ``/** */``, ``/* */`` and ``//`` markers (and plain, marker-less text)
- summary followed by ``@block`` tag sections
- ``@modifier`` tags
- fenced code blocks (tags inside fences are not tags)
- inline code and ``{@link}``, ``{@linkcode}``, ``{@linkplain}`` inline tags
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from docplane.models.comments import Comment, CommentDisplayPart, CommentTag

if TYPE_CHECKING:
    import structlog

    from docplane.config.models import CommentConfig
    from docplane.semantic.protocols import SymbolResolver

_TAG_RE = re.compile(r"^\s*(@[A-Za-z][\w-]*)(?:\s+(.*))?$")
_FENCE_RE = re.compile(r"(```.*?```)", re.DOTALL)
_INLINE_RE = re.compile(
    r"`[^`\n]+`"
    r"|\{(?P<tag>@link(?:code|plain)?)\s+(?P<target>[^\s}|]+)(?:\s*\|\s*|\s+)?(?P<label>[^}]*)\}"
)
_PARAM_NAME_RE = re.compile(r"^\[?(?P<name>[\w$.]+)(?:=[^\]]*)?\]?\s*(?:-\s*)?(?P<rest>.*)$", re.DOTALL)

# Block tags whose first word is the name of what they document
NAMED_TAGS = frozenset({"@param", "@typeParam", "@template"})


def strip_markers(text: str) -> list[str]:
    """Comment body lines with ``/**``, ``*/``, leading ``*`` and ``//`` removed."""
    if text.startswith("/*"):
        body = text.removesuffix("*/")
        body = body[3:] if body.startswith("/**") else body[2:]
        lines: list[str] = []
        for line in body.split("\n"):
            stripped = line.lstrip()
            if stripped.startswith("*"):
                stripped = stripped[1:]
                if stripped.startswith(" "):
                    stripped = stripped[1:]
            lines.append(stripped.rstrip())
        return lines

    raw_lines = text.split("\n")
    if all(line.lstrip().startswith("//") for line in raw_lines if line.strip()):
        lines = []
        for line in raw_lines:
            stripped = line.lstrip().removeprefix("///").removeprefix("//")
            lines.append(stripped.removeprefix(" ").rstrip())
        return lines

    return [line.rstrip() for line in raw_lines]


def _trim(lines: list[str]) -> str:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def _inline_parts(
    text: str,
    resolver: SymbolResolver | None,
    scope: Any | None,
) -> list[CommentDisplayPart]:
    parts: list[CommentDisplayPart] = []
    last = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > last:
            parts.append(CommentDisplayPart("text", text[last : match.start()]))
        tag = match.group("tag")
        if tag is None:
            parts.append(CommentDisplayPart("code", match.group(0)))
        else:
            target_name = match.group("target")
            label = (match.group("label") or "").strip()
            target = resolver.resolve_name(target_name, scope) if resolver is not None else None
            parts.append(
                CommentDisplayPart("inline-tag", label or target_name, tag=tag, target=target)
            )
        last = match.end()
    if last < len(text):
        parts.append(CommentDisplayPart("text", text[last:]))
    return parts


def to_display_parts(
    text: str,
    resolver: SymbolResolver | None = None,
    scope: Any | None = None,
) -> list[CommentDisplayPart]:
    """Split text into text/code/inline-tag parts. Fenced blocks become single code parts."""
    parts: list[CommentDisplayPart] = []
    for i, chunk in enumerate(_FENCE_RE.split(text)):
        if not chunk:
            continue
        if i % 2 == 1:
            parts.append(CommentDisplayPart("code", chunk))
        else:
            parts.extend(_inline_parts(chunk, resolver, scope))
    return parts


def _make_tag(
    tag: str,
    lines: list[str],
    resolver: SymbolResolver | None,
    scope: Any | None,
) -> CommentTag:
    text = _trim(lines)
    name: str | None = None
    if tag in NAMED_TAGS:
        match = _PARAM_NAME_RE.match(text)
        if match:
            name = match.group("name")
            text = match.group("rest").strip()
    return CommentTag(tag=tag, content=to_display_parts(text, resolver, scope), name=name)


def parse_comment(
    text: str,
    config: CommentConfig,
    logger: structlog.stdlib.BoundLogger,
    *,
    location: str,
    resolver: SymbolResolver | None = None,
    scope: Any | None = None,
) -> Comment:
    """Parse one raw comment.

    Args:
        text: Raw comment, with or without comment markers.
        config: Known block and modifier tags.
        logger: Receives a warning per unknown block tag.
        location: ``file:line`` used in log records.
        resolver: When given, ``{@link}`` targets are bound through ``resolve_name``.
        scope: Node the link targets are resolved from.
    """
    block_tags = set(config.block_tags)
    modifier_tags = set(config.modifier_tags)

    summary: list[str] = []
    sections: list[tuple[str, list[str]]] = []
    modifiers: set[str] = set()
    current = summary
    in_fence = False

    for line in strip_markers(text):
        if line.lstrip().startswith("```"):
            in_fence = not in_fence
            current.append(line)
            continue
        match = None if in_fence else _TAG_RE.match(line)
        if match is None:
            current.append(line)
            continue

        tag, rest = match.group(1), match.group(2) or ""
        if tag in modifier_tags:
            modifiers.add(tag)
            if rest:
                current.append(rest)
            continue
        if tag not in block_tags:
            logger.warning("unknown_block_tag", tag=tag, location=location)
        current = [rest] if rest else []
        sections.append((tag, current))

    return Comment(
        summary=to_display_parts(_trim(summary), resolver, scope),
        block_tags=[_make_tag(tag, lines, resolver, scope) for tag, lines in sections],
        modifier_tags=modifiers,
    )
