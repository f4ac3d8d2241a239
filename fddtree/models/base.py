"""
Base node model for fddtree.

Common base for all six node kinds of a planning document.
"""

import weakref
from datetime import date
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from fddtree.constants import VALIDATION_NAME_REQUIRED
from fddtree.exceptions import InvalidOperationError
from fddtree.move import move


class NodeKind(str, Enum):
    """The six node kinds of a planning document."""

    PROGRAM = "program"
    PROJECT = "project"
    ASPECT = "aspect"
    SUBJECT = "subject"
    ACTIVITY = "activity"
    FEATURE = "feature"


class StatusEnum(str, Enum):
    """Milestone and progress status values."""

    NOT_STARTED = "notstarted"
    UNDERWAY = "underway"
    COMPLETE = "complete"


class Kpi(BaseModel):
    """Count of features in one status."""

    status: StatusEnum
    count: int = 0


class Progress(BaseModel):
    """Derived progress of a node.

    completion is a percentage in [0, 100]. kpi holds one entry per
    StatusEnum value, in enum order. count is a repeat count kept as loaded.
    """

    completion: int = Field(default=0, ge=0, le=100)
    kpi: List[Kpi] = Field(default_factory=list)
    status: Optional[StatusEnum] = None
    count: int = 1

    def kpi_count(self, status: StatusEnum) -> int:
        """Get the feature count recorded for a status."""
        for entry in self.kpi:
            if entry.status == status:
                return entry.count
        return 0


class BaseNode(BaseModel):
    """
    Base model for all nodes of the planning tree.

    Common fields:
    - id: Optional external identifier
    - name: Node name (required, non-empty)
    - progress: Cached progress, recalculated by CompletionTracker
    - target_date: Cached target date, recalculated by CompletionTracker

    The parent link is a weak reference and is never serialized. Nodes compare
    by identity so list membership never confuses two nodes with equal fields.

    Subclasses override _kind to specify their node kind.
    """

    id: Optional[str] = None
    name: str
    progress: Progress = Field(default_factory=Progress)
    target_date: Optional[date] = Field(default=None, exclude=True)
    _parent_ref: Optional[weakref.ReferenceType] = PrivateAttr(default=None)
    _kind: Optional[NodeKind] = PrivateAttr(default=None)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names must contain at least one non-blank character."""
        if not v or not v.strip():
            raise ValueError(VALIDATION_NAME_REQUIRED)
        return v

    def __eq__(self, other: object) -> bool:
        return self is other

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def __str__(self) -> str:
        return self.name

    @property
    def kind(self) -> Optional[NodeKind]:
        """Get the node kind."""
        return self._kind

    @property
    def parent(self) -> Optional["CompositeNode"]:
        """Get the parent node, or None for a root or detached node."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def _set_parent(self, parent: Optional["CompositeNode"]) -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    @property
    def children(self) -> List["BaseNode"]:
        """Get child nodes in order (always empty for leaves)."""
        return []

    @property
    def is_leaf(self) -> bool:
        return True

    @property
    def root(self) -> "BaseNode":
        """Get the top of the tree this node belongs to."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def ancestors(self) -> Iterator["CompositeNode"]:
        """Yield parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def nearest(self, kind: NodeKind) -> Optional["BaseNode"]:
        """Get the closest ancestor of the given kind."""
        for ancestor in self.ancestors():
            if ancestor.kind == kind:
                return ancestor
        return None

    def walk(self) -> Iterator["BaseNode"]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


class CompositeNode(BaseNode):
    """
    Base model for nodes that hold children.

    Each subclass maps the child kinds it accepts to the list field holding
    them in _child_fields. The generic children property concatenates those
    lists in mapping order.
    """

    _child_fields: ClassVar[Dict[NodeKind, str]] = {}

    def model_post_init(self, __context) -> None:
        """Link children back to this node after construction."""
        for child in self.children:
            child._set_parent(self)

    @property
    def children(self) -> List[BaseNode]:
        """Get child nodes in order.

        Returns a new list; use add_child/insert_child/remove_child to mutate.
        """
        result: List[BaseNode] = []
        for field_name in self._child_fields.values():
            result.extend(getattr(self, field_name))
        return result

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def accepts_kind(self, kind: NodeKind) -> bool:
        """Check whether this node may hold children of the given kind."""
        return kind in self._child_fields

    def child_list_for(self, kind: NodeKind) -> List[BaseNode]:
        """Get the mutable list that holds children of the given kind.

        Raises:
            InvalidOperationError: If this node cannot hold that kind.
        """
        field_name = self._child_fields.get(kind)
        if field_name is None:
            raise InvalidOperationError(
                f"{type(self).__name__} cannot have {kind.value} children."
            )
        return getattr(self, field_name)

    def index_of(self, child: BaseNode) -> int:
        """Get the position of a child within its kind's list, or -1."""
        if not self.accepts_kind(child.kind):
            return -1
        for i, existing in enumerate(self.child_list_for(child.kind)):
            if existing is child:
                return i
        return -1

    def add_child(self, child: BaseNode) -> int:
        """Append a child to this node.

        Returns:
            Index at which the child was placed.
        """
        return self.insert_child(child, -1)

    def insert_child(self, child: BaseNode, index: int) -> int:
        """Insert a child at an index (negative or out of range appends).

        Raises:
            InvalidOperationError: If this node cannot hold the child's kind.

        Returns:
            Index at which the child was placed.
        """
        target = self.child_list_for(child.kind)
        old_parent = child.parent
        source = old_parent.child_list_for(child.kind) if old_parent is not None else None
        applied = move(source, target, child, index)
        child._set_parent(self)
        return applied

    def remove_child(self, child: BaseNode) -> int:
        """Detach a child from this node.

        Returns:
            Index the child had, or -1 when it was not a child of this node.
        """
        index = self.index_of(child)
        if index < 0:
            return -1
        del self.child_list_for(child.kind)[index]
        child._set_parent(None)
        return index
