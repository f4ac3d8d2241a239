"""
Command stack for undo/redo.

Every structural or field edit of the document runs through a Command so it
can be reverted and replayed exactly.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from fddtree.managers.events import Event, EventType, publish_event


class Command(ABC):
    """A reversible edit.

    apply() and revert() must be exact inverses: apply, revert, apply again
    leaves the document as after the first apply.
    """

    @property
    @abstractmethod
    def description(self) -> str:
        """Human readable summary shown in undo/redo menus."""

    @abstractmethod
    def apply(self) -> None:
        """Perform (or redo) the edit."""

    @abstractmethod
    def revert(self) -> None:
        """Undo the edit."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r})"


# Marks a saved state that can no longer be reached by undo/redo
_UNREACHABLE = object()


class CommandStack:
    """
    Undo and redo stacks of executed commands.

    Handles:
    - execute: apply, push on undo, clear redo
    - undo/redo: move one command between the stacks
    - dirty tracking: clean exactly when the undo top is the command that was
      on top when the document was last saved
    - an optional size bound that drops the oldest undo entries
    """

    def __init__(self, max_size: int = 0, emit_events: bool = True) -> None:
        """
        Initialize CommandStack.

        Args:
            max_size: Maximum number of undo entries, 0 for unbounded.
            emit_events: Whether to emit HISTORY_CHANGED events.
        """
        self.max_size = max(0, max_size)
        self._emit_events = emit_events
        self._undo: List[Command] = []
        self._redo: List[Command] = []
        self._saved: object = None

    def execute(self, command: Command) -> Command:
        """Apply a command and record it for undo.

        If apply() raises, nothing is recorded.
        """
        command.apply()
        self._undo.append(command)
        self._redo.clear()
        self._trim()
        self._changed()
        return command

    def undo(self) -> Optional[Command]:
        """Revert the most recent command.

        Returns:
            The reverted command, or None when there is nothing to undo.
        """
        if not self._undo:
            return None
        command = self._undo.pop()
        command.revert()
        self._redo.append(command)
        self._changed()
        return command

    def redo(self) -> Optional[Command]:
        """Re-apply the most recently undone command.

        Returns:
            The re-applied command, or None when there is nothing to redo.
        """
        if not self._redo:
            return None
        command = self._redo.pop()
        command.apply()
        self._undo.append(command)
        self._changed()
        return command

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_size(self) -> int:
        return len(self._undo)

    @property
    def redo_size(self) -> int:
        return len(self._redo)

    def peek_undo_description(self) -> Optional[str]:
        return self._undo[-1].description if self._undo else None

    def peek_redo_description(self) -> Optional[str]:
        return self._redo[-1].description if self._redo else None

    def mark_saved(self) -> None:
        """Record the current state as the saved one."""
        self._saved = self._undo[-1] if self._undo else None
        self._changed()

    @property
    def dirty(self) -> bool:
        """Whether the document differs from the last saved state."""
        top = self._undo[-1] if self._undo else None
        return top is not self._saved

    def clear(self) -> None:
        """Drop all history and treat the current state as saved."""
        self._undo.clear()
        self._redo.clear()
        self._saved = None
        self._changed()

    def _trim(self) -> None:
        if not self.max_size:
            return
        while len(self._undo) > self.max_size:
            dropped = self._undo.pop(0)
            if self._saved is None or self._saved is dropped:
                self._saved = _UNREACHABLE

    def _changed(self) -> None:
        if not self._emit_events:
            return
        publish_event(
            Event(
                type=EventType.HISTORY_CHANGED,
                data={
                    "stack": self,
                    "can_undo": self.can_undo(),
                    "can_redo": self.can_redo(),
                    "dirty": self.dirty,
                },
            )
        )
