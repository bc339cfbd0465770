"""In-memory, process-wide named event hub."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class InMemoryEventHub:
    """Dispatch published payloads to subscribed listeners, synchronously.

    Listeners subscribed with a *key* replace any earlier listener with the
    same key for the same event name, so a command that registers its
    listeners on every invocation keeps exactly one subscription.
    Anonymous listeners (``key=None``) are always appended.

    Satisfies :class:`~cmdframe.core.protocols.EventHub`.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[tuple[str | None, Listener]]] = {}

    def subscribe(self, name: str, listener: Listener, *, key: str | None = None) -> None:
        entries = self._listeners.setdefault(name, [])
        if key is not None:
            for index, (existing_key, _) in enumerate(entries):
                if existing_key == key:
                    entries[index] = (key, listener)
                    return
        entries.append((key, listener))

    def unsubscribe(self, name: str, *, key: str) -> None:
        entries = self._listeners.get(name, [])
        self._listeners[name] = [entry for entry in entries if entry[0] != key]

    def publish(self, name: str, payload: Any) -> None:
        """Call every listener for *name* in subscription order.

        A listener that raises does not prevent later listeners from
        running; the failure is logged and re-raised after the rest.
        """
        failure: Exception | None = None
        for _, listener in list(self._listeners.get(name, ())):
            try:
                listener(payload)
            except Exception as exc:
                logger.debug("Listener for %r failed", name, exc_info=True)
                if failure is None:
                    failure = exc
        if failure is not None:
            raise failure

    def listener_count(self, name: str) -> int:
        return len(self._listeners.get(name, ()))

    def clear(self) -> None:
        self._listeners.clear()


default_event_hub = InMemoryEventHub()
"""The hub shared by every lifecycle that is not given one explicitly."""
