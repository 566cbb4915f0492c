"""Reflection kinds, flags and node capabilities."""

from __future__ import annotations

import re
from enum import Flag, IntFlag, auto


class ReflectionKind(IntFlag):
    """Kind tag of a reflection.

    Values are single bits so related kinds can be tested together with the
    composite groups defined at the bottom of the class, e.g.
    ``kind & ReflectionKind.SOME_MODULE``.
    """

    PROJECT = 0x1
    MODULE = 0x2
    NAMESPACE = 0x4
    ENUM = 0x8
    ENUM_MEMBER = 0x10
    VARIABLE = 0x20
    FUNCTION = 0x40
    CLASS = 0x80
    INTERFACE = 0x100
    CONSTRUCTOR = 0x200
    PROPERTY = 0x400
    METHOD = 0x800
    CALL_SIGNATURE = 0x1000
    INDEX_SIGNATURE = 0x2000
    CONSTRUCTOR_SIGNATURE = 0x4000
    PARAMETER = 0x8000
    TYPE_LITERAL = 0x10000
    TYPE_PARAMETER = 0x20000
    ACCESSOR = 0x40000
    GET_SIGNATURE = 0x80000
    SET_SIGNATURE = 0x100000
    TYPE_ALIAS = 0x200000
    REFERENCE = 0x400000

    # Composite groups
    SOME_MODULE = MODULE | NAMESPACE
    CLASS_OR_INTERFACE = CLASS | INTERFACE
    SOME_SIGNATURE = (
        CALL_SIGNATURE | INDEX_SIGNATURE | CONSTRUCTOR_SIGNATURE | GET_SIGNATURE | SET_SIGNATURE
    )
    SOME_MEMBER = PROPERTY | METHOD | CONSTRUCTOR | ACCESSOR | ENUM_MEMBER
    SOME_EXPORT = (
        MODULE | NAMESPACE | ENUM | VARIABLE | FUNCTION | CLASS | INTERFACE | TYPE_ALIAS | REFERENCE
    )

    def singular_name(self) -> str:
        """Human readable name, e.g. ``ReflectionKind.ENUM_MEMBER`` -> ``"Enum Member"``."""
        if self.value.bit_count() != 1 or self.name is None:
            raise ValueError(f"No singular name for composite kind {int(self)}")
        return " ".join(part.capitalize() for part in self.name.split("_"))

    def plural_name(self) -> str:
        singular = self.singular_name()
        if singular.endswith("s"):
            return f"{singular}es"
        if re.search(r"[^aeiou]y$", singular):
            return f"{singular[:-1]}ies"
        return f"{singular}s"


class ReflectionFlag(Flag):
    """Boolean attributes of a reflection. Set at creation, only ever added to."""

    NONE = 0
    PRIVATE = auto()
    PROTECTED = auto()
    PUBLIC = auto()
    STATIC = auto()
    EXTERNAL = auto()
    OPTIONAL = auto()
    REST = auto()
    ABSTRACT = auto()
    CONST = auto()
    READONLY = auto()
    INHERITED = auto()


class Capability(Flag):
    """What a reflection class can do, fixed per class."""

    NONE = 0
    CONTAINER = auto()  # holds an ordered child list
    DECLARATION = auto()  # produced from a declaration; carries escaped_name
