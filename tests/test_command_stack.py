"""
Tests for CommandStack and ModelState.

Tests cover:
- execute/undo/redo bookkeeping
- Underflow behaviour
- Dirty tracking against the saved marker
- Size bound
- History events
"""

import pytest

from fddtree.managers.command_stack import Command, CommandStack
from fddtree.managers.events import subscribe_listener
from fddtree.managers.model_state import ModelState


class AppendCommand(Command):
    """Appends a value to a list; revert pops it."""

    def __init__(self, target: list, value):
        self.target = target
        self.value = value

    @property
    def description(self) -> str:
        return f"Append {self.value}"

    def apply(self) -> None:
        self.target.append(self.value)

    def revert(self) -> None:
        self.target.pop()


class FailingCommand(Command):
    @property
    def description(self) -> str:
        return "Fail"

    def apply(self) -> None:
        raise RuntimeError("boom")

    def revert(self) -> None:
        pass


class TestExecute:
    """Test executing commands."""

    def test_execute_applies_and_records(self):
        stack = CommandStack()
        values = []

        stack.execute(AppendCommand(values, 1))

        assert values == [1]
        assert stack.undo_size == 1
        assert stack.can_undo()
        assert not stack.can_redo()

    def test_execute_clears_redo(self):
        stack = CommandStack()
        values = []
        stack.execute(AppendCommand(values, 1))
        stack.undo()

        stack.execute(AppendCommand(values, 2))

        assert values == [2]
        assert stack.redo_size == 0

    def test_failed_apply_not_recorded(self):
        stack = CommandStack()

        with pytest.raises(RuntimeError):
            stack.execute(FailingCommand())

        assert stack.undo_size == 0


class TestUndoRedo:
    """Test undo and redo."""

    def test_undo_redo_round_trip(self):
        stack = CommandStack()
        values = []
        stack.execute(AppendCommand(values, 1))
        stack.execute(AppendCommand(values, 2))

        undone = stack.undo()

        assert undone.value == 2
        assert values == [1]
        assert stack.redo_size == 1

        redone = stack.redo()

        assert redone is undone
        assert values == [1, 2]
        assert stack.undo_size == 2

    def test_underflow_returns_none(self):
        stack = CommandStack()

        assert stack.undo() is None
        assert stack.redo() is None
        assert stack.undo_size == 0

    def test_descriptions(self):
        stack = CommandStack()
        values = []
        assert stack.peek_undo_description() is None

        stack.execute(AppendCommand(values, 1))
        assert stack.peek_undo_description() == "Append 1"

        stack.undo()
        assert stack.peek_undo_description() is None
        assert stack.peek_redo_description() == "Append 1"


class TestDirtyTracking:
    """Test dirty tracking via the saved marker."""

    def test_new_stack_is_clean(self):
        assert not CommandStack().dirty

    def test_execute_makes_dirty(self):
        stack = CommandStack()
        stack.execute(AppendCommand([], 1))

        assert stack.dirty

    def test_undo_to_saved_point_is_clean(self):
        stack = CommandStack()
        values = []
        stack.execute(AppendCommand(values, 1))
        stack.mark_saved()
        stack.execute(AppendCommand(values, 2))

        assert stack.dirty
        stack.undo()
        assert not stack.dirty
        stack.undo()
        assert stack.dirty
        stack.redo()
        assert not stack.dirty

    def test_saved_state_unreachable_after_new_branch(self):
        stack = CommandStack()
        values = []
        stack.execute(AppendCommand(values, 1))
        stack.mark_saved()
        stack.undo()
        stack.execute(AppendCommand(values, 2))

        assert stack.dirty
        stack.undo()
        assert stack.dirty

    def test_clear_resets(self):
        stack = CommandStack()
        stack.execute(AppendCommand([], 1))

        stack.clear()

        assert not stack.dirty
        assert stack.undo_size == 0
        assert stack.redo_size == 0


class TestMaxSize:
    """Test the history bound."""

    def test_unbounded_by_default(self):
        stack = CommandStack()
        values = []
        for i in range(250):
            stack.execute(AppendCommand(values, i))

        assert stack.undo_size == 250

    def test_oldest_dropped(self):
        stack = CommandStack(max_size=2)
        values = []
        for i in range(3):
            stack.execute(AppendCommand(values, i))

        assert stack.undo_size == 2
        stack.undo()
        stack.undo()
        assert stack.undo() is None
        assert values == [0]

    def test_trimmed_saved_state_stays_dirty(self):
        """Once the saved state is trimmed away, undo cannot make it clean."""
        stack = CommandStack(max_size=1)
        values = []
        stack.execute(AppendCommand(values, 1))
        stack.execute(AppendCommand(values, 2))

        stack.undo()

        assert stack.dirty


class TestModelState:
    """Test the ModelState listener."""

    def test_follows_stack(self):
        stack = CommandStack()
        state = ModelState(stack)
        subscribe_listener(state)

        stack.execute(AppendCommand([], 1))
        assert state.undo_available
        assert not state.redo_available
        assert state.dirty

        stack.undo()
        assert not state.undo_available
        assert state.redo_available
        assert not state.dirty

    def test_ignores_other_stacks(self):
        stack = CommandStack()
        other = CommandStack()
        state = ModelState(stack)
        subscribe_listener(state)

        other.execute(AppendCommand([], 1))

        assert not state.undo_available
        assert not state.dirty
