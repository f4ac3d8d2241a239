"""
NodeManager for node creation and structural edits.

Validates requests against the hierarchy rules and runs every accepted edit
through the command stack so it can be undone.
"""

from datetime import date
from typing import Any, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from fddtree.constants import (
    VALIDATION_NAME_REQUIRED,
    get_program_exclusivity,
    get_standard_milestones,
)
from fddtree.exceptions import InvalidOperationError, NotFoundError, ValidationError
from fddtree.hierarchy import (
    can_insert_sibling,
    hierarchy_accepts,
    is_valid_reparent,
    kind_accepted,
)
from fddtree.managers.command_stack import CommandStack
from fddtree.managers.commands import (
    AddChildCommand,
    DeleteNodeCommand,
    EditAspectInfoCommand,
    EditNodeCommand,
    MoveNodeCommand,
    NodeSnapshot,
    PasteNodeCommand,
)
from fddtree.managers.completion_tracker import CompletionTracker
from fddtree.models.base import BaseNode, CompositeNode, NodeKind, StatusEnum
from fddtree.models.document import Document
from fddtree.models.milestone import AspectInfo, MilestoneInfo, align_milestones
from fddtree.models.nodes import NODE_CLASSES, Aspect, Feature

EDITABLE_FIELDS = {"name", "initials", "prefix", "target_month", "work_package", "remarks"}


class NodeManager:
    """
    Manages node creation and structural edits of a document.

    Handles:
    - Creating nodes of a given kind (sequence numbers, milestone rows)
    - Adding, deleting, moving, reordering and pasting nodes
    - Editing node fields and milestone progress

    Placement rejections by the hierarchy rules return None or False and
    leave the document untouched. Illegal arguments raise.
    """

    def __init__(
        self,
        document: Document,
        stack: CommandStack,
        tracker: CompletionTracker,
        exclusivity: Optional[bool] = None,
        standard_milestones: Optional[bool] = None,
    ) -> None:
        """
        Initialize NodeManager.

        Args:
            document: Document to edit.
            stack: Command stack recording every edit.
            tracker: CompletionTracker used by the commands.
            exclusivity: Enforce Program child-type exclusivity. Defaults to config value.
            standard_milestones: Give new aspects the standard FDD milestones.
                Defaults to config value.
        """
        self.document = document
        self.stack = stack
        self.tracker = tracker
        self.exclusivity = (
            get_program_exclusivity() if exclusivity is None else exclusivity
        )
        self.standard_milestones = (
            get_standard_milestones() if standard_milestones is None else standard_milestones
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _parse_kind(self, kind: Union[str, NodeKind]) -> NodeKind:
        try:
            return NodeKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown node kind '{kind}'.")

    def _validate_name(self, name: Optional[str]) -> str:
        if name is None or not name.strip():
            raise ValidationError(VALIDATION_NAME_REQUIRED)
        return name

    def _check_fields(self, node_kind: NodeKind, fields: dict) -> None:
        node_class = NODE_CLASSES[node_kind]
        unknown = sorted(set(fields) - set(node_class.model_fields))
        if unknown:
            raise ValidationError(
                f"{node_class.__name__} has no field(s): {', '.join(unknown)}."
            )

    def new_node(
        self,
        kind: Union[str, NodeKind],
        name: str,
        parent: Optional[CompositeNode] = None,
        **fields: Any,
    ) -> BaseNode:
        """Create a detached node of the given kind.

        Features get the next document sequence number and, when parent lies
        under an Aspect, one milestone row per milestone definition.

        Raises:
            ValidationError: If the kind is unknown, the name is empty or a
                field does not exist on that kind.
        """
        node_kind = self._parse_kind(kind)
        name = self._validate_name(name)
        self._check_fields(node_kind, fields)
        node = NODE_CLASSES[node_kind](name=name, **fields)

        if isinstance(node, Aspect) and self.standard_milestones and not node.info.milestone_info:
            node.info.set_standard_milestones()
        if isinstance(node, Feature):
            node.seq = self.document.allocator.next()
            aspect = None
            if parent is not None:
                aspect = parent if parent.kind == NodeKind.ASPECT else parent.nearest(NodeKind.ASPECT)
            if aspect is not None:
                node.milestones = align_milestones(node.milestones, aspect.info.milestone_info)
        return node

    def add_node(
        self,
        parent: BaseNode,
        kind: Union[str, NodeKind],
        name: str,
        index: int = -1,
        **fields: Any,
    ) -> Optional[BaseNode]:
        """Create a node and add it under parent.

        Args:
            parent: Parent node.
            kind: Kind of the new node.
            name: Name of the new node.
            index: Position among siblings of that kind, -1 to append.

        Returns:
            The new node, or None when Program exclusivity rejects it.

        Raises:
            ValidationError: If the kind is unknown, the name is empty or a
                field does not exist on that kind.
            InvalidOperationError: If parent can never hold that kind.
        """
        node_kind = self._parse_kind(kind)
        self._validate_name(name)
        self._check_fields(node_kind, fields)
        if not isinstance(parent, CompositeNode):
            raise InvalidOperationError(
                f"{type(parent).__name__} '{parent.name}' cannot have children."
            )
        if not parent.accepts_kind(node_kind):
            raise InvalidOperationError(
                f"{type(parent).__name__} cannot have {node_kind.value} children."
            )
        # Check exclusivity before allocating a sequence number
        if not kind_accepted(parent, node_kind, self.exclusivity):
            return None

        node = self.new_node(node_kind, name, parent=parent, **fields)
        self.stack.execute(AddChildCommand(parent, node, self.tracker, index))
        return node

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def delete_node(self, node: BaseNode) -> bool:
        """Delete a node and its subtree.

        Returns:
            False if node is the root or detached.
        """
        if node.parent is None:
            return False
        self.stack.execute(DeleteNodeCommand(node, self.tracker))
        return True

    def move_node(self, node: BaseNode, new_parent: BaseNode, index: int = -1) -> bool:
        """Move a node under new_parent at index (reorders when the parent is unchanged).

        Returns:
            False if the hierarchy rules reject the move.
        """
        if not is_valid_reparent(node, new_parent, self.exclusivity):
            return False
        self.stack.execute(MoveNodeCommand(node, new_parent, self.tracker, index))
        return True

    def insert_sibling(self, node: BaseNode, reference: BaseNode, after: bool = False) -> bool:
        """Move a node next to reference, before it unless after is set.

        Returns:
            False if the hierarchy rules reject the placement.
        """
        if not can_insert_sibling(node, reference, self.exclusivity):
            return False
        parent = reference.parent
        index = -1
        if node.kind == reference.kind:
            index = parent.index_of(reference)
            if node.parent is parent and parent.index_of(node) < index:
                # Removal of node shifts reference one slot left
                index -= 1
            if after:
                index += 1
        self.stack.execute(MoveNodeCommand(node, parent, self.tracker, index))
        return True

    def paste_node(
        self,
        clipboard: BaseNode,
        parent: BaseNode,
        index: int = -1,
        resequence: bool = True,
    ) -> Optional[BaseNode]:
        """Paste a copy of clipboard under parent.

        Returns:
            The pasted copy, or None if the hierarchy rules reject it.
        """
        if not hierarchy_accepts(parent, clipboard, self.exclusivity):
            return None
        allocator = self.document.allocator if resequence else None
        command = PasteNodeCommand(parent, clipboard, self.tracker, allocator, index)
        self.stack.execute(command)
        return command.clone

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def edit_node(self, node: BaseNode, **changes: Any) -> Optional[EditNodeCommand]:
        """Change editable fields of a node as one undoable edit.

        Args:
            node: Node to edit.
            **changes: name, initials, prefix, target_month, work_package, remarks.

        Returns:
            The executed command, or None when nothing would change.

        Raises:
            ValidationError: On an empty name or a field the node does not have.
            NotFoundError: If the named work package does not exist.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit field(s): {', '.join(sorted(unknown))}.")
        if "name" in changes:
            self._validate_name(changes["name"])
        for field_name in ("initials", "prefix", "target_month", "remarks"):
            if field_name in changes and not hasattr(node, field_name):
                raise ValidationError(
                    f"{type(node).__name__} has no field '{field_name}'."
                )
        if "work_package" in changes:
            self._check_work_package(node, changes["work_package"])

        before = NodeSnapshot.capture(node)
        after = before.with_changes(**changes)
        if after == before:
            return None
        label = "Rename" if set(changes) == {"name"} else "Edit"
        command = EditNodeCommand(node, after, self.tracker, label=label)
        self.stack.execute(command)
        return command

    def _check_work_package(self, node: BaseNode, name: Optional[str]) -> None:
        if not isinstance(node, Feature):
            raise ValidationError("Only features can be assigned to work packages.")
        if name is None:
            return
        project = node.nearest(NodeKind.PROJECT)
        if project is None or project.get_work_package(name) is None:
            raise NotFoundError(f"Work package '{name}' not found.")

    def set_milestone(
        self,
        feature: Feature,
        index: int,
        status: Optional[StatusEnum] = None,
        planned: Optional[date] = None,
        actual: Optional[date] = None,
    ) -> Optional[EditNodeCommand]:
        """Update one milestone of a feature as an undoable edit.

        Completing a milestone without an actual date records today.

        Raises:
            ValidationError: If status is not a known status.
            InvalidOperationError: If node is not a feature.
            NotFoundError: If the feature has no milestone at index.
        """
        if not isinstance(feature, Feature):
            raise InvalidOperationError(f"{type(feature).__name__} has no milestones.")
        if not 0 <= index < len(feature.milestones):
            raise NotFoundError(
                f"Feature '{feature.name}' has no milestone {index + 1}."
            )
        milestones = [m.model_copy() for m in feature.milestones]
        milestone = milestones[index]
        if status is not None:
            try:
                milestone.status = StatusEnum(status)
            except ValueError:
                raise ValidationError(f"Unknown milestone status '{status}'.")
        if planned is not None:
            milestone.planned = planned
        if actual is not None:
            milestone.actual = actual
        elif milestone.status == StatusEnum.COMPLETE and milestone.actual is None:
            milestone.actual = date.today()

        before = NodeSnapshot.capture(feature)
        after = before.with_changes(milestones=milestones)
        if after == before:
            return None
        command = EditNodeCommand(feature, after, self.tracker, label="Update milestone of")
        self.stack.execute(command)
        return command

    # ------------------------------------------------------------------
    # Milestone definitions
    # ------------------------------------------------------------------

    def _require_aspect(self, aspect: BaseNode) -> Aspect:
        if not isinstance(aspect, Aspect):
            raise InvalidOperationError(
                f"{type(aspect).__name__} has no milestone definitions."
            )
        return aspect

    def _require_definition(self, aspect: Aspect, index: int) -> MilestoneInfo:
        infos = aspect.info.milestone_info
        if not 0 <= index < len(infos):
            raise NotFoundError(f"Aspect '{aspect.name}' has no milestone {index + 1}.")
        return infos[index]

    def _milestone_info(self, name: Optional[str], effort: int) -> MilestoneInfo:
        self._validate_name(name)
        try:
            return MilestoneInfo(name=name, effort=effort)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid milestone: {e.errors()[0]['msg']}.")

    def edit_milestone_info(
        self,
        aspect: Aspect,
        info: AspectInfo,
        layout: Optional[List[Optional[int]]] = None,
    ) -> Optional[EditAspectInfoCommand]:
        """Replace an Aspect's milestone definitions as one undoable edit.

        Every Feature below the Aspect is realigned to the new definitions;
        see EditAspectInfoCommand for layout.

        Returns:
            The executed command, or None when nothing would change.

        Raises:
            InvalidOperationError: If aspect is not an Aspect.
        """
        aspect = self._require_aspect(aspect)
        if info == aspect.info and layout is None:
            return None
        command = EditAspectInfoCommand(aspect, info, self.tracker, layout)
        self.stack.execute(command)
        return command

    def add_milestone_info(
        self, aspect: Aspect, name: str, effort: int = 0, index: int = -1
    ) -> EditAspectInfoCommand:
        """Insert a milestone definition at index (-1 appends).

        Features get a new not-started row planned today at the same position.
        """
        aspect = self._require_aspect(aspect)
        definition = self._milestone_info(name, effort)
        info = aspect.info.model_copy(deep=True)
        layout: List[Optional[int]] = list(range(len(info.milestone_info)))
        if index < 0 or index > len(info.milestone_info):
            index = len(info.milestone_info)
        info.milestone_info.insert(index, definition)
        layout.insert(index, None)
        return self.edit_milestone_info(aspect, info, layout)

    def remove_milestone_info(self, aspect: Aspect, index: int) -> EditAspectInfoCommand:
        """Delete a milestone definition and the matching row of every Feature.

        Raises:
            NotFoundError: If the Aspect has no definition at index.
        """
        aspect = self._require_aspect(aspect)
        self._require_definition(aspect, index)
        info = aspect.info.model_copy(deep=True)
        del info.milestone_info[index]
        layout: List[Optional[int]] = [
            i for i in range(len(aspect.info.milestone_info)) if i != index
        ]
        return self.edit_milestone_info(aspect, info, layout)

    def update_milestone_info(
        self,
        aspect: Aspect,
        index: int,
        name: Optional[str] = None,
        effort: Optional[int] = None,
    ) -> Optional[EditAspectInfoCommand]:
        """Rename a milestone definition or change its effort weight.

        Raises:
            ValidationError: On an empty name or a negative effort.
            NotFoundError: If the Aspect has no definition at index.
        """
        aspect = self._require_aspect(aspect)
        current = self._require_definition(aspect, index)
        definition = self._milestone_info(
            current.name if name is None else name,
            current.effort if effort is None else effort,
        )
        info = aspect.info.model_copy(deep=True)
        info.milestone_info[index] = definition
        return self.edit_milestone_info(aspect, info)

    def reset_milestone_info(self, aspect: Aspect) -> Optional[EditAspectInfoCommand]:
        """Install the standard FDD milestones, keeping Feature rows by position."""
        aspect = self._require_aspect(aspect)
        info = aspect.info.model_copy(deep=True)
        info.set_standard_milestones()
        return self.edit_milestone_info(aspect, info)
