"""
ModelState listener.

Mirrors undo/redo availability and the dirty flag of one CommandStack for
views that enable menu items or mark a window title as modified.
"""
from typing import List

from fddtree.managers.events import Event, EventListener, EventType


class ModelState(EventListener):
    """Tracks the history state of one command stack via HISTORY_CHANGED."""

    def __init__(self, stack) -> None:
        self._stack = stack
        self.undo_available = stack.can_undo()
        self.redo_available = stack.can_redo()
        self.dirty = stack.dirty

    @property
    def subscribed_events(self) -> List[EventType]:
        return [EventType.HISTORY_CHANGED]

    def handle(self, event: Event) -> None:
        if event.data.get("stack") is not self._stack:
            return
        self.undo_available = event.data["can_undo"]
        self.redo_available = event.data["can_redo"]
        self.dirty = event.data["dirty"]
