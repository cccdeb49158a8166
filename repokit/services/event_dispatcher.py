"""
Event dispatch: the notifier repositories publish lifecycle events to.

Repositories only need something with ``dispatch(topic, payload)``.
``EventDispatcher`` is a small in-process implementation with wildcard
listeners (``"*.entity.created"``) for wiring and tests.
"""

import logging
from fnmatch import fnmatchcase
from typing import Any, Callable, Dict, List, Protocol

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]

# Lifecycle actions emitted by repositories
EVENT_CREATED = 'created'
EVENT_UPDATED = 'updated'
EVENT_DELETED = 'deleted'
EVENT_RESTORED = 'restored'
EVENT_PERMANENTLY_DELETED = 'permanently_deleted'

ENTITY_EVENTS = (
    EVENT_CREATED,
    EVENT_UPDATED,
    EVENT_DELETED,
    EVENT_RESTORED,
    EVENT_PERMANENTLY_DELETED,
)


def entity_topic(prefix: str, action: str) -> str:
    """Topic name for an entity lifecycle event, e.g. ``articles.entity.created``."""
    return f"{prefix}.entity.{action}"


class Notifier(Protocol):
    def dispatch(self, topic: str, payload: Any) -> None:
        ...


class EventDispatcher:
    """Service class for registering listeners and dispatching events."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def listen(self, pattern: str, listener: Listener) -> None:
        """Register ``listener(topic, payload)`` for topics matching ``pattern``."""
        self._listeners.setdefault(pattern, []).append(listener)

    def forget(self, pattern: str) -> None:
        self._listeners.pop(pattern, None)

    def listeners_for(self, topic: str) -> List[Listener]:
        matched: List[Listener] = []
        for pattern, listeners in self._listeners.items():
            if pattern == topic or fnmatchcase(topic, pattern):
                matched.extend(listeners)
        return matched

    def has_listeners(self, topic: str) -> bool:
        return bool(self.listeners_for(topic))

    def dispatch(self, topic: str, payload: Any = None) -> None:
        """Call every matching listener; a failing listener does not stop the rest."""
        listeners = self.listeners_for(topic)
        logger.debug(f"Dispatching {topic} to {len(listeners)} listener(s)")
        for listener in listeners:
            try:
                listener(topic, payload)
            except Exception:
                logger.exception(f"Listener {listener!r} failed for {topic}")
