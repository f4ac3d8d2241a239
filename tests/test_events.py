"""
Tests for the event system.

Tests cover:
- Subscription and publishing
- Failing listeners
- Node events raised by editing commands
"""

from typing import List

from fddtree.managers.events import (
    Event,
    EventListener,
    EventType,
    get_event_bus,
    node_event,
    publish_event,
    subscribe_listener,
    unsubscribe_listener,
)


class RecordingListener(EventListener):
    """Listener that records every node event it sees."""

    def __init__(self, types=None):
        self.types = types or [
            EventType.NODE_ADDED,
            EventType.NODE_REMOVED,
            EventType.NODE_MOVED,
            EventType.NODE_UPDATED,
        ]
        self.events: List[Event] = []

    @property
    def subscribed_events(self):
        return self.types

    def handle(self, event):
        self.events.append(event)


class FailingListener(EventListener):
    @property
    def subscribed_events(self):
        return [EventType.NODE_ADDED]

    def handle(self, event):
        raise RuntimeError("listener broke")


class TestEventBus:
    """Test the event bus."""

    def test_singleton(self):
        assert get_event_bus() is get_event_bus()

    def test_publish_to_subscribers(self):
        listener = RecordingListener([EventType.HISTORY_CHANGED])
        subscribe_listener(listener)

        publish_event(Event(type=EventType.HISTORY_CHANGED))
        publish_event(Event(type=EventType.NODE_ADDED))

        assert [e.type for e in listener.events] == [EventType.HISTORY_CHANGED]

    def test_subscribe_twice_delivers_once(self):
        listener = RecordingListener([EventType.HISTORY_CHANGED])
        subscribe_listener(listener)
        subscribe_listener(listener)

        publish_event(Event(type=EventType.HISTORY_CHANGED))

        assert len(listener.events) == 1

    def test_unsubscribe(self):
        listener = RecordingListener([EventType.HISTORY_CHANGED])
        subscribe_listener(listener)
        unsubscribe_listener(listener)

        publish_event(Event(type=EventType.HISTORY_CHANGED))

        assert listener.events == []

    def test_failing_listener_does_not_stop_others(self, capsys):
        recorder = RecordingListener([EventType.NODE_ADDED])
        subscribe_listener(FailingListener())
        subscribe_listener(recorder)

        publish_event(Event(type=EventType.NODE_ADDED))

        assert len(recorder.events) == 1
        assert "listener broke" in capsys.readouterr().err


class TestNodeEvents:
    """Test events raised by editing."""

    def test_node_event_fields(self, sample_tree):
        event = node_event(EventType.NODE_UPDATED, sample_tree.f2, 1, extra="x")

        assert event.node_kind == "feature"
        assert event.node_name == "Pay by invoice"
        assert event.node_seq == 2
        assert event.parent_name == "Checkout"
        assert event.index == 1
        assert event.data == {"extra": "x"}

    def test_add_and_undo(self, editor):
        listener = RecordingListener()
        subscribe_listener(listener)

        editor.manager.add_node(editor.checkout, "feature", "Pay by voucher")
        editor.stack.undo()

        assert [e.type for e in listener.events] == [EventType.NODE_ADDED, EventType.NODE_REMOVED]
        assert listener.events[0].index == 2
        assert listener.events[0].parent_name == "Checkout"

    def test_move(self, editor):
        listener = RecordingListener()
        subscribe_listener(listener)

        editor.manager.move_node(editor.f3, editor.checkout, 0)

        event = listener.events[-1]
        assert event.type == EventType.NODE_MOVED
        assert event.parent_name == "Checkout"
        assert event.data == {"from_parent": "Returns", "from_index": 0}

    def test_edit(self, editor):
        listener = RecordingListener()
        subscribe_listener(listener)

        editor.manager.edit_node(editor.f1, name="Pay by debit card")

        assert [e.type for e in listener.events] == [EventType.NODE_UPDATED]
        assert listener.events[0].node_name == "Pay by debit card"

    def test_history_changed_data(self, editor):
        listener = RecordingListener([EventType.HISTORY_CHANGED])
        subscribe_listener(listener)

        editor.manager.delete_node(editor.f3)

        data = listener.events[-1].data
        assert data["stack"] is editor.stack
        assert data["can_undo"] is True
        assert data["can_redo"] is False
        assert data["dirty"] is True
