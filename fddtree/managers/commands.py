"""
Concrete commands for editing a planning document.

Each command captures only what it touches when it is created and re-runs
aggregation along the affected ancestor chains on apply and revert.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from fddtree.exceptions import InvalidOperationError
from fddtree.managers.command_stack import Command
from fddtree.managers.completion_tracker import CompletionTracker
from fddtree.managers.events import EventType, node_event, publish_event
from fddtree.models.base import BaseNode, CompositeNode, NodeKind
from fddtree.models.document import SequenceAllocator
from fddtree.models.milestone import AspectInfo, Milestone, align_milestones
from fddtree.models.nodes import Aspect, Feature, Project
from fddtree.models.work_package import WorkPackage
from fddtree.move import move


def clone_node(node: BaseNode) -> BaseNode:
    """Deep-copy a node and its subtree, detached from any parent.

    External ids are cleared on every copy; sequences are kept.
    """
    clone = type(node).model_validate(node.model_dump())
    for copied in clone.walk():
        copied.id = None
    return clone


def _identity_index(items: list, item: object) -> int:
    for i, existing in enumerate(items):
        if existing is item:
            return i
    return -1


def work_package_of(feature: Feature) -> Optional[WorkPackage]:
    """Get the work package of the feature's Project that lists its seq."""
    project = feature.nearest(NodeKind.PROJECT)
    if project is None:
        return None
    for work_package in project.work_packages:
        if feature.seq in work_package.feature_seqs:
            return work_package
    return None


def _renumber_work_packages(root: BaseNode, renumbered: dict) -> None:
    """Point copied work packages at renumbered features.

    Seqs with no feature in the copy are dropped.
    """
    for node in root.walk():
        if isinstance(node, Project):
            for work_package in node.work_packages:
                work_package.feature_seqs = [
                    renumbered[seq] for seq in work_package.feature_seqs if seq in renumbered
                ]


class NodeCommand(Command):
    """Base for commands that change the tree."""

    def __init__(self, tracker: CompletionTracker) -> None:
        self.tracker = tracker


class AddChildCommand(NodeCommand):
    """Add a new child under a parent."""

    def __init__(
        self,
        parent: CompositeNode,
        child: BaseNode,
        tracker: CompletionTracker,
        index: int = -1,
    ) -> None:
        super().__init__(tracker)
        if not parent.accepts_kind(child.kind):
            raise InvalidOperationError(
                f"{type(parent).__name__} cannot have {child.kind.value} children."
            )
        self.parent = parent
        self.child = child
        self.index = index

    @property
    def description(self) -> str:
        return f"Add {self.child.kind.value} '{self.child.name}'"

    def apply(self) -> None:
        applied = self.parent.insert_child(self.child, self.index)
        self.tracker.refresh_subtree(self.child)
        publish_event(node_event(EventType.NODE_ADDED, self.child, applied))

    def revert(self) -> None:
        index = self.parent.remove_child(self.child)
        self.tracker.refresh(self.parent)
        publish_event(node_event(EventType.NODE_REMOVED, self.child, index))


class DeleteNodeCommand(NodeCommand):
    """Remove a node (and its subtree) from its parent.

    Undo puts it back at its original index.
    """

    def __init__(self, node: BaseNode, tracker: CompletionTracker) -> None:
        super().__init__(tracker)
        parent = node.parent
        if parent is None:
            raise InvalidOperationError("The root node cannot be deleted.")
        self.node = node
        self.parent = parent
        self.index = parent.index_of(node)

    @property
    def description(self) -> str:
        return f"Delete {self.node.kind.value} '{self.node.name}'"

    def apply(self) -> None:
        self.index = self.parent.remove_child(self.node)
        self.tracker.refresh(self.parent)
        publish_event(node_event(EventType.NODE_REMOVED, self.node, self.index))

    def revert(self) -> None:
        self.parent.insert_child(self.node, self.index)
        self.tracker.refresh_subtree(self.node)
        publish_event(node_event(EventType.NODE_ADDED, self.node, self.index))


class MoveNodeCommand(NodeCommand):
    """Move a node from parent A index i to parent B index j.

    Same-parent moves reorder; the target index is relative to the list with
    the node already removed.
    """

    def __init__(
        self,
        node: BaseNode,
        new_parent: CompositeNode,
        tracker: CompletionTracker,
        index: int = -1,
    ) -> None:
        super().__init__(tracker)
        old_parent = node.parent
        if old_parent is None:
            raise InvalidOperationError("The root node cannot be moved.")
        self.node = node
        self.old_parent = old_parent
        self.old_index = old_parent.index_of(node)
        self.new_parent = new_parent
        self.index = index
        self.applied_index = -1

    @property
    def description(self) -> str:
        return f"Move {self.node.kind.value} '{self.node.name}'"

    def apply(self) -> None:
        self.applied_index = self.new_parent.insert_child(self.node, self.index)
        self.tracker.refresh_subtree(self.node)
        if self.old_parent is not self.new_parent:
            self.tracker.refresh(self.old_parent)
        publish_event(
            node_event(EventType.NODE_MOVED, self.node, self.applied_index,
                       from_parent=self.old_parent.name, from_index=self.old_index)
        )

    def revert(self) -> None:
        self.old_parent.insert_child(self.node, self.old_index)
        self.tracker.refresh_subtree(self.node)
        if self.old_parent is not self.new_parent:
            self.tracker.refresh(self.new_parent)
        publish_event(
            node_event(EventType.NODE_MOVED, self.node, self.old_index,
                       from_parent=self.new_parent.name, from_index=self.applied_index)
        )


class NodeSnapshot(BaseModel):
    """Editable fields of a node at one point in time.

    Fields a node kind does not have stay None and are ignored on apply.
    """

    name: str
    initials: Optional[str] = None
    prefix: Optional[str] = None
    target_month: Optional[date] = None
    milestones: Optional[List[Milestone]] = None
    work_package: Optional[str] = None
    remarks: List[str] = Field(default_factory=list)

    @classmethod
    def capture(cls, node: BaseNode) -> "NodeSnapshot":
        """Record the current editable fields of a node."""
        milestones = getattr(node, "milestones", None)
        work_package = None
        if isinstance(node, Feature):
            found = work_package_of(node)
            work_package = found.name if found is not None else None
        return cls(
            name=node.name,
            initials=getattr(node, "initials", None),
            prefix=getattr(node, "prefix", None),
            target_month=getattr(node, "target_month", None),
            milestones=[m.model_copy() for m in milestones] if milestones is not None else None,
            work_package=work_package,
            remarks=list(getattr(node, "remarks", [])),
        )

    def with_changes(self, **changes) -> "NodeSnapshot":
        """Copy this snapshot with some fields replaced."""
        return self.model_copy(update=changes, deep=True)

    def apply_to(self, node: BaseNode) -> None:
        """Write this snapshot's fields into a node."""
        node.name = self.name
        if hasattr(node, "initials"):
            node.initials = self.initials
        if hasattr(node, "prefix"):
            node.prefix = self.prefix
        if hasattr(node, "target_month"):
            node.target_month = self.target_month
        if isinstance(node, Feature):
            node.milestones = [m.model_copy() for m in self.milestones or []]
            node.remarks = list(self.remarks)
            self._apply_work_package(node)

    def _apply_work_package(self, feature: Feature) -> None:
        project = feature.nearest(NodeKind.PROJECT)
        if project is None:
            return
        for work_package in project.work_packages:
            work_package.remove_feature(feature.seq)
        if self.work_package is not None:
            target = project.get_work_package(self.work_package)
            if target is not None:
                target.add_feature(feature.seq)


class EditNodeCommand(NodeCommand):
    """Replace the editable fields of a node with a new snapshot."""

    def __init__(
        self,
        node: BaseNode,
        after: NodeSnapshot,
        tracker: CompletionTracker,
        label: str = "Edit",
    ) -> None:
        super().__init__(tracker)
        self.node = node
        self.before = NodeSnapshot.capture(node)
        self.after = after
        self.label = label

    @classmethod
    def from_changes(
        cls, node: BaseNode, tracker: CompletionTracker, label: str = "Edit", **changes
    ) -> "EditNodeCommand":
        """Build an edit that changes only the given fields."""
        after = NodeSnapshot.capture(node).with_changes(**changes)
        return cls(node, after, tracker, label=label)

    @property
    def description(self) -> str:
        return f"{self.label} {self.node.kind.value} '{self.before.name}'"

    def apply(self) -> None:
        self._set(self.after)

    def revert(self) -> None:
        self._set(self.before)

    def _set(self, snapshot: NodeSnapshot) -> None:
        snapshot.apply_to(self.node)
        self.tracker.refresh(self.node)
        publish_event(node_event(EventType.NODE_UPDATED, self.node))


class EditAspectInfoCommand(NodeCommand):
    """Replace an Aspect's milestone definitions and realign its Features.

    layout maps each new definition to the index of the row it keeps in
    every Feature below the Aspect, or None for a fresh row planned today.
    Without a layout rows line up by position. Both the old and the new
    rows are captured up front, so redo puts back the very same values.
    """

    def __init__(
        self,
        aspect: Aspect,
        info: AspectInfo,
        tracker: CompletionTracker,
        layout: Optional[List[Optional[int]]] = None,
        today: Optional[date] = None,
    ) -> None:
        super().__init__(tracker)
        self.aspect = aspect
        self.before = aspect.info.model_copy(deep=True)
        self.after = info.model_copy(deep=True)
        if layout is None:
            layout = list(range(len(self.after.milestone_info)))
        features = [node for node in aspect.walk() if isinstance(node, Feature)]
        self.before_rows = [
            (feature, [m.model_copy() for m in feature.milestones]) for feature in features
        ]
        self.after_rows = []
        for feature in features:
            rows = [
                feature.milestones[old].model_copy()
                if old is not None and 0 <= old < len(feature.milestones)
                else Milestone()
                for old in layout
            ]
            self.after_rows.append(
                (feature, align_milestones(rows, self.after.milestone_info, today))
            )

    @property
    def description(self) -> str:
        return f"Edit milestones of aspect '{self.aspect.name}'"

    def apply(self) -> None:
        self._set(self.after, self.after_rows)

    def revert(self) -> None:
        self._set(self.before, self.before_rows)

    def _set(self, info: AspectInfo, rows: list) -> None:
        self.aspect.info = info.model_copy(deep=True)
        for feature, milestones in rows:
            feature.milestones = [m.model_copy() for m in milestones]
        self.tracker.refresh_subtree(self.aspect)
        publish_event(node_event(EventType.NODE_UPDATED, self.aspect))


class PasteNodeCommand(NodeCommand):
    """Paste a deep copy of a clipboard node under a parent.

    The copy is made once, so redo re-inserts the very same nodes. With an
    allocator every pasted Feature gets a fresh sequence number and copied
    work packages follow the new numbers.
    """

    def __init__(
        self,
        parent: CompositeNode,
        clipboard: BaseNode,
        tracker: CompletionTracker,
        allocator: Optional[SequenceAllocator] = None,
        index: int = -1,
    ) -> None:
        super().__init__(tracker)
        if not parent.accepts_kind(clipboard.kind):
            raise InvalidOperationError(
                f"{type(parent).__name__} cannot have {clipboard.kind.value} children."
            )
        self.parent = parent
        self.index = index
        self.clone = clone_node(clipboard)
        if allocator is not None:
            renumbered = {}
            for copied in self.clone.walk():
                if isinstance(copied, Feature):
                    new_seq = allocator.next()
                    renumbered[copied.seq] = new_seq
                    copied.seq = new_seq
            _renumber_work_packages(self.clone, renumbered)

    @property
    def description(self) -> str:
        return f"Paste {self.clone.kind.value} '{self.clone.name}'"

    def apply(self) -> None:
        applied = self.parent.insert_child(self.clone, self.index)
        self.tracker.refresh_subtree(self.clone)
        publish_event(node_event(EventType.NODE_ADDED, self.clone, applied))

    def revert(self) -> None:
        index = self.parent.remove_child(self.clone)
        self.tracker.refresh(self.parent)
        publish_event(node_event(EventType.NODE_REMOVED, self.clone, index))


# ----------------------------------------------------------------------
# Work packages
# ----------------------------------------------------------------------


class AddWorkPackageCommand(Command):
    """Add a work package to a Project."""

    def __init__(self, project: Project, work_package: WorkPackage, index: int = -1) -> None:
        self.project = project
        self.work_package = work_package
        self.index = index

    @property
    def description(self) -> str:
        return f"Add work package '{self.work_package.name}'"

    def apply(self) -> None:
        move(None, self.project.work_packages, self.work_package, self.index)

    def revert(self) -> None:
        del self.project.work_packages[_identity_index(self.project.work_packages, self.work_package)]


class RenameWorkPackageCommand(Command):
    """Rename a work package."""

    def __init__(self, work_package: WorkPackage, new_name: str) -> None:
        self.work_package = work_package
        self.old_name = work_package.name
        self.new_name = new_name

    @property
    def description(self) -> str:
        return f"Rename work package '{self.old_name}'"

    def apply(self) -> None:
        self.work_package.name = self.new_name

    def revert(self) -> None:
        self.work_package.name = self.old_name


class DeleteWorkPackageCommand(Command):
    """Delete a work package; undo restores it at its original index."""

    def __init__(self, project: Project, work_package: WorkPackage) -> None:
        self.project = project
        self.work_package = work_package
        self.index = _identity_index(project.work_packages, work_package)

    @property
    def description(self) -> str:
        return f"Delete work package '{self.work_package.name}'"

    def apply(self) -> None:
        self.index = _identity_index(self.project.work_packages, self.work_package)
        del self.project.work_packages[self.index]

    def revert(self) -> None:
        move(None, self.project.work_packages, self.work_package, self.index)
