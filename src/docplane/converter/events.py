"""Named-event dispatch between the converter and enrichment listeners."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

Listener = Callable[..., None]


class ConverterEvents:
    """Event names fired during conversion.

    Listener arguments:
        BEGIN / END: (context)
        CREATE_PROJECT: (context, project)
        PROGRAM_BEGIN / PROGRAM_END: (context, program)
        CREATE_DECLARATION: (context, reflection)
    """

    BEGIN = "begin"
    END = "end"
    CREATE_PROJECT = "create_project"
    PROGRAM_BEGIN = "program_begin"
    PROGRAM_END = "program_end"
    CREATE_DECLARATION = "create_declaration"


@dataclass(order=True)
class _Subscription:
    sort_key: tuple[int, int]
    listener: Listener = field(compare=False)


class EventBus:
    """Synchronous event bus.

    Listeners run in descending priority, then registration order. A listener
    that raises stops dispatch and the error reaches the ``trigger`` caller.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[_Subscription]] = {}
        self._counter = 0

    def on(self, name: str, listener: Listener, priority: int = 0) -> None:
        self._counter += 1
        subs = self._subscriptions.setdefault(name, [])
        subs.append(_Subscription((-priority, self._counter), listener))
        subs.sort()

    def off(self, name: str, listener: Listener) -> None:
        subs = self._subscriptions.get(name, [])
        self._subscriptions[name] = [s for s in subs if s.listener is not listener]

    def listeners(self, name: str) -> list[Listener]:
        return [s.listener for s in self._subscriptions.get(name, [])]

    def trigger(self, name: str, *args: Any) -> None:
        # Copy so listeners may subscribe/unsubscribe while dispatching
        for listener in self.listeners(name):
            listener(*args)
