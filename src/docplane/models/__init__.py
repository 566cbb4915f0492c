"""Reflection model exports."""

from docplane.models.comments import Comment, CommentDisplayPart, CommentTag
from docplane.models.errors import ModelError, RegistrationConflictError
from docplane.models.kinds import Capability, ReflectionFlag, ReflectionKind
from docplane.models.reflections import (
    ContainerReflection,
    DeclarationReflection,
    ProjectReflection,
    ReferenceReflection,
    Reflection,
)
from docplane.models.registry import ReflectionRegistry

__all__ = [
    # Comments
    "Comment",
    "CommentDisplayPart",
    "CommentTag",
    # Errors
    "ModelError",
    "RegistrationConflictError",
    # Kinds
    "Capability",
    "ReflectionFlag",
    "ReflectionKind",
    # Reflections
    "ContainerReflection",
    "DeclarationReflection",
    "ProjectReflection",
    "ReferenceReflection",
    "Reflection",
    "ReflectionRegistry",
]
