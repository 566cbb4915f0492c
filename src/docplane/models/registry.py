"""Binding <-> reflection registry owned by the project reflection.

Every reflection created during conversion is recorded here by id. Those
produced from a binding are also reachable from that binding, which is how
later passes (reference resolution, link binding) find the documentation
node for a semantic entity.

A binding maps to at most one reflection. A reflection may be reachable
from several bindings: the declaration-site binding and the export binding
it is visible under are both registered to the same node.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from typing import TYPE_CHECKING

from docplane.models.errors import RegistrationConflictError

if TYPE_CHECKING:
    from docplane.models.reflections import Reflection


class ReflectionRegistry:
    """Bidirectional map between bindings and reflections.

    Bindings are used as dictionary keys, so they must hash by identity (or
    by a stable semantic identity). Reflections are keyed by ``id``.

    Usage::

        registry = ReflectionRegistry()
        registry.register(reflection, binding)
        registry.get_reflection(binding)  # -> reflection
    """

    def __init__(self) -> None:
        self._reflections: dict[int, Reflection] = {}
        self._binding_to_id: dict[Hashable, int] = {}
        self._id_to_bindings: dict[int, list[Hashable]] = {}

    def register(self, reflection: Reflection, binding: Hashable | None = None) -> None:
        """Record a reflection, and optionally the binding it was produced from.

        Repeating an identical registration is a no-op.

        Raises:
            RegistrationConflictError: ``binding`` already maps to another reflection.
        """
        self._reflections[reflection.id] = reflection
        if binding is None:
            return

        existing = self._binding_to_id.get(binding)
        if existing is not None:
            if existing != reflection.id:
                raise RegistrationConflictError(
                    getattr(binding, "name", repr(binding)), existing, reflection.id
                )
            return

        self._binding_to_id[binding] = reflection.id
        self._id_to_bindings.setdefault(reflection.id, []).append(binding)

    def get_reflection(self, binding: Hashable) -> Reflection | None:
        rid = self._binding_to_id.get(binding)
        return self._reflections.get(rid) if rid is not None else None

    def get_bindings(self, reflection: Reflection) -> list[Hashable]:
        """All bindings registered to ``reflection``, in registration order."""
        return list(self._id_to_bindings.get(reflection.id, ()))

    def get_by_id(self, reflection_id: int) -> Reflection | None:
        return self._reflections.get(reflection_id)

    def __contains__(self, binding: object) -> bool:
        return binding in self._binding_to_id

    def __iter__(self) -> Iterator[Reflection]:
        return iter(self._reflections.values())

    def __len__(self) -> int:
        return len(self._reflections)
