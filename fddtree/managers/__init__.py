"""
Managers for fddtree.

This package contains focused manager classes that handle specific aspects of editing:
- CompletionTracker: Bottom-up progress and target date aggregation
- CommandStack: Undo/redo history and dirty tracking
- NodeManager: Node creation and structural edits
- WorkPackageManager: Work package edits and pruning
- NavigationManager: Path resolution and node lookup
- StorageManager: JSON persistence of documents and config
- EventBus: Event-driven communication with views
- ModelState: Undo/redo availability and dirty flag for views
"""

from fddtree.managers.command_stack import Command, CommandStack
from fddtree.managers.completion_tracker import CompletionTracker
from fddtree.managers.events import (
    Event,
    EventBus,
    EventListener,
    EventType,
    NodeEvent,
    get_event_bus,
    publish_event,
    subscribe_listener,
    unsubscribe_listener,
)
from fddtree.managers.model_state import ModelState
from fddtree.managers.navigation_manager import NavigationManager
from fddtree.managers.node_manager import NodeManager
from fddtree.managers.storage_manager import StorageManager
from fddtree.managers.work_package_manager import WorkPackageManager

__all__ = [
    "Command",
    "CommandStack",
    "CompletionTracker",
    "Event",
    "EventBus",
    "EventListener",
    "EventType",
    "NodeEvent",
    "get_event_bus",
    "publish_event",
    "subscribe_listener",
    "unsubscribe_listener",
    "ModelState",
    "NavigationManager",
    "NodeManager",
    "StorageManager",
    "WorkPackageManager",
]
