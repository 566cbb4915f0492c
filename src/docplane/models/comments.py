"""Parsed documentation comments attached to reflections."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal

DisplayPartKind = Literal["text", "code", "inline-tag"]


@dataclass
class CommentDisplayPart:
    """One run of comment content.

    ``inline-tag`` parts carry the tag name (``@link``) and, once bound, the
    binding the link points at in ``target``.
    """

    kind: DisplayPartKind
    text: str
    tag: str | None = None
    target: Any | None = None


@dataclass
class CommentTag:
    """A block tag such as ``@param name description``."""

    tag: str
    content: list[CommentDisplayPart] = field(default_factory=list)
    name: str | None = None


@dataclass
class Comment:
    """A resolved documentation comment."""

    summary: list[CommentDisplayPart] = field(default_factory=list)
    block_tags: list[CommentTag] = field(default_factory=list)
    modifier_tags: set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return (
            not any(part.text.strip() for part in self.summary)
            and not self.block_tags
            and not self.modifier_tags
        )

    def has_modifier(self, tag: str) -> bool:
        return tag in self.modifier_tags

    def get_tag(self, tag: str) -> CommentTag | None:
        return next((t for t in self.block_tags if t.tag == tag), None)

    def get_tags(self, tag: str) -> list[CommentTag]:
        return [t for t in self.block_tags if t.tag == tag]

    def summary_text(self) -> str:
        return "".join(part.text for part in self.summary).strip()

    def clone(self) -> Comment:
        """Copy the comment structure. Link targets are shared, not copied."""
        return Comment(
            summary=[replace(part) for part in self.summary],
            block_tags=[
                CommentTag(tag=t.tag, content=[replace(part) for part in t.content], name=t.name)
                for t in self.block_tags
            ],
            modifier_tags=set(self.modifier_tags),
        )
