"""
Services used alongside repositories.
"""

from .event_dispatcher import EventDispatcher, Notifier, entity_topic

__all__ = ["EventDispatcher", "Notifier", "entity_topic"]
