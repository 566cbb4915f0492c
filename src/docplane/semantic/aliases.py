"""Alias (re-export) chain resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docplane.semantic.protocols import Binding, SymbolResolver


def resolve_aliased_binding(binding: Binding, resolver: SymbolResolver) -> Binding:
    """Follow alias bindings to the declaration they finally refer to.

    Stops at the first non-alias binding, at an alias the resolver cannot
    follow, or when the chain loops back to a binding already visited
    (declaration files can produce aliases that point at themselves).
    """
    seen: set[int] = {id(binding)}
    current = binding
    while current.is_alias:
        target = resolver.aliased_binding_of(current)
        if target is None:
            return current
        if id(target) in seen:
            return target
        seen.add(id(target))
        current = target
    return current
