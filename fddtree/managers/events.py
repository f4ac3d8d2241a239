"""
Event system for fddtree.

Allows decoupled communication between the editor core and its collaborators
(views, state trackers) via typed events and listeners.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import click


class EventType(str, Enum):
    """Types of events in fddtree."""
    NODE_ADDED = "node.added"
    NODE_REMOVED = "node.removed"
    NODE_MOVED = "node.moved"
    NODE_UPDATED = "node.updated"
    NODE_COMPLETED = "node.completed"
    HISTORY_CHANGED = "history.changed"


@dataclass
class Event:
    """Base event class."""
    type: EventType
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class NodeEvent(Event):
    """Event for node-related actions."""
    node_kind: str = ""
    node_name: str = ""
    node_seq: Optional[int] = None
    parent_name: Optional[str] = None
    index: int = -1


class EventListener(ABC):
    """Base class for event listeners."""

    @abstractmethod
    def handle(self, event: Event) -> None:
        """Handle an event.

        Args:
            event: The event to handle.
        """
        pass

    @property
    @abstractmethod
    def subscribed_events(self) -> List[EventType]:
        """Return list of event types this listener subscribes to."""
        pass


class EventBus:
    """
    Central event bus for publishing and subscribing to events.

    Singleton for global event access. Not thread-safe; all publishing
    happens on the editor's model thread.
    """

    _instance: Optional['EventBus'] = None
    _listeners: Dict[EventType, List[EventListener]] = {}

    def __new__(cls) -> 'EventBus':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def subscribe(self, listener: EventListener) -> None:
        """Subscribe a listener to events.

        Args:
            listener: The listener to subscribe.
        """
        for event_type in listener.subscribed_events:
            if event_type not in self._listeners:
                self._listeners[event_type] = []
            if listener not in self._listeners[event_type]:
                self._listeners[event_type].append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        """Unsubscribe a listener from all events.

        Args:
            listener: The listener to unsubscribe.
        """
        for event_type in self._listeners:
            if listener in self._listeners[event_type]:
                self._listeners[event_type].remove(listener)

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribed listeners.

        A failing listener is reported on stderr and does not stop the others.

        Args:
            event: The event to publish.
        """
        listeners = list(self._listeners.get(event.type, []))
        for listener in listeners:
            try:
                listener.handle(event)
            except Exception as e:
                click.echo(f"  ⚠ Listener {listener.__class__.__name__} failed: {e}", err=True)

    def clear(self) -> None:
        """Clear all listeners (useful for testing)."""
        self._listeners.clear()


def node_event(event_type: EventType, node, index: int = -1, **data: Any) -> NodeEvent:
    """Build a NodeEvent describing a node and its current parent."""
    parent = node.parent
    return NodeEvent(
        type=event_type,
        node_kind=node.kind.value if node.kind is not None else "",
        node_name=node.name,
        node_seq=getattr(node, "seq", None),
        parent_name=parent.name if parent is not None else None,
        index=index,
        data=data,
    )


# Convenience functions for global event bus access
def get_event_bus() -> EventBus:
    """Get the global event bus instance."""
    return EventBus()


def publish_event(event: Event) -> None:
    """Publish an event to the global event bus."""
    get_event_bus().publish(event)


def subscribe_listener(listener: EventListener) -> None:
    """Subscribe a listener to the global event bus."""
    get_event_bus().subscribe(listener)


def unsubscribe_listener(listener: EventListener) -> None:
    """Unsubscribe a listener from the global event bus."""
    get_event_bus().unsubscribe(listener)
