"""
FDDCore - Core editing logic for fddtree planning documents.

Orchestrates manager classes for all editing operations.
Uses StorageManager for JSON persistence and CommandStack for undo/redo.
Uses EventBus for decoupled event-driven communication with views.
"""

from datetime import date
from pathlib import Path
from typing import Any, List, Optional, Union

from fddtree.constants import (
    VALIDATION_NAME_REQUIRED,
    get_default_document,
    get_program_exclusivity,
    get_standard_milestones,
    get_undo_limit,
)
from fddtree.exceptions import NotFoundError, ValidationError
from fddtree.managers import (
    CommandStack,
    CompletionTracker,
    ModelState,
    NavigationManager,
    NodeManager,
    StorageManager,
    WorkPackageManager,
    get_event_bus,
    subscribe_listener,
    unsubscribe_listener,
)
from fddtree.managers.command_stack import Command
from fddtree.managers.search_engine import SearchMatch, search
from fddtree.models.base import BaseNode, NodeKind, StatusEnum
from fddtree.models.document import Document
from fddtree.models.nodes import Aspect, Feature, Program, Project
from fddtree.models.work_package import WorkPackage


class FDDCore:
    """
    Core class for editing one planning document.

    Orchestrates manager classes:
    - StorageManager: JSON persistence
    - CompletionTracker: Progress and target date aggregation
    - CommandStack: Undo/redo and dirty tracking
    - NodeManager: Node creation and structural edits
    - WorkPackageManager: Work package edits
    - NavigationManager: Path resolution
    - ModelState: History state for views
    - EventBus: Event-driven communication
    """

    def __init__(
        self,
        document: Document,
        path: Optional[Path] = None,
        fdd_dir: Optional[Path] = None,
        exclusivity: Optional[bool] = None,
        undo_limit: Optional[int] = None,
        standard_milestones: Optional[bool] = None,
    ) -> None:
        """
        Initialize the FDDCore around a loaded or new document.

        Args:
            document: Document to edit.
            path: File the document is saved to.
            fdd_dir: Path to .fddtree/ directory. Defaults to .fddtree/ in current directory.
            exclusivity: Program child-type exclusivity. Defaults to config value.
            undo_limit: Undo history bound, 0 for unbounded. Defaults to config value.
            standard_milestones: Standard milestones on new aspects. Defaults to config value.
        """
        self.document = document
        self.path = Path(path) if path is not None else None
        self.storage = StorageManager(fdd_dir)

        self.exclusivity = get_program_exclusivity() if exclusivity is None else exclusivity
        limit = get_undo_limit() if undo_limit is None else undo_limit

        # Initialize managers
        self.tracker = CompletionTracker(emit_events=True)
        self.stack = CommandStack(max_size=limit)
        self.navigator = NavigationManager(self.document)
        self.node_manager = NodeManager(
            self.document,
            self.stack,
            self.tracker,
            exclusivity=self.exclusivity,
            standard_milestones=(
                get_standard_milestones() if standard_milestones is None else standard_milestones
            ),
        )
        self.work_package_manager = WorkPackageManager(self.stack)

        # Set up event-driven architecture
        self.event_bus = get_event_bus()
        self.state = ModelState(self.stack)
        subscribe_listener(self.state)

    @classmethod
    def new(cls, name: str, path: Optional[Path] = None, **kwargs: Any) -> "FDDCore":
        """Create a core around a new document holding only a root Program."""
        if not name or not name.strip():
            raise ValidationError(VALIDATION_NAME_REQUIRED)
        return cls(Document(Program(name=name)), path=path, **kwargs)

    @classmethod
    def open(cls, path: Optional[Path] = None, fdd_dir: Optional[Path] = None, **kwargs: Any) -> "FDDCore":
        """Load a document from disk (the configured default document if path is None)."""
        path = Path(path) if path is not None else Path(get_default_document())
        document = StorageManager(fdd_dir).load_document(path)
        return cls(document, path=path, fdd_dir=fdd_dir, **kwargs)

    def close(self) -> None:
        """Stop listening for history events."""
        unsubscribe_listener(self.state)

    @property
    def root(self) -> Program:
        return self.document.root

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, path: str) -> BaseNode:
        """Get a node by path.

        Raises:
            NotFoundError: If no node matches.
        """
        node = self.navigator.get_node_by_path(path)
        if node is None:
            raise NotFoundError(f"Node not found at path '{path}'.")
        return node

    def find_feature(self, seq: int) -> Feature:
        feature = self.navigator.find_feature(seq)
        if feature is None:
            raise NotFoundError(f"Feature #{seq} not found.")
        return feature

    def project_of(self, node: BaseNode) -> Project:
        """Get the Project a node belongs to (the node itself if it is one)."""
        project = node if node.kind == NodeKind.PROJECT else node.nearest(NodeKind.PROJECT)
        if project is None:
            raise NotFoundError(f"'{node.name}' is not inside a project.")
        return project

    def search(self, query: str) -> List[SearchMatch]:
        return search(self.root, query)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_node(
        self, parent: BaseNode, kind: Union[str, NodeKind], name: str, index: int = -1, **fields: Any
    ) -> Optional[BaseNode]:
        """Add a new node under parent."""
        return self.node_manager.add_node(parent, kind, name, index, **fields)

    def delete_node(self, node: BaseNode) -> bool:
        return self.node_manager.delete_node(node)

    def move_node(self, node: BaseNode, new_parent: BaseNode, index: int = -1) -> bool:
        return self.node_manager.move_node(node, new_parent, index)

    def insert_sibling(self, node: BaseNode, reference: BaseNode, after: bool = False) -> bool:
        return self.node_manager.insert_sibling(node, reference, after)

    def edit_node(self, node: BaseNode, **changes: Any) -> Optional[Command]:
        return self.node_manager.edit_node(node, **changes)

    def set_milestone(
        self,
        feature: Feature,
        index: int,
        status: Optional[StatusEnum] = None,
        planned: Optional[date] = None,
        actual: Optional[date] = None,
    ) -> Optional[Command]:
        return self.node_manager.set_milestone(feature, index, status, planned, actual)

    def add_milestone_info(
        self, aspect: Aspect, name: str, effort: int = 0, index: int = -1
    ) -> Optional[Command]:
        return self.node_manager.add_milestone_info(aspect, name, effort, index)

    def remove_milestone_info(self, aspect: Aspect, index: int) -> Optional[Command]:
        return self.node_manager.remove_milestone_info(aspect, index)

    def update_milestone_info(
        self,
        aspect: Aspect,
        index: int,
        name: Optional[str] = None,
        effort: Optional[int] = None,
    ) -> Optional[Command]:
        return self.node_manager.update_milestone_info(aspect, index, name, effort)

    def reset_milestone_info(self, aspect: Aspect) -> Optional[Command]:
        """Give an aspect the standard FDD milestones."""
        return self.node_manager.reset_milestone_info(aspect)

    def paste_node(
        self, clipboard: BaseNode, parent: BaseNode, index: int = -1, resequence: bool = True
    ) -> Optional[BaseNode]:
        return self.node_manager.paste_node(clipboard, parent, index, resequence)

    def add_work_package(self, project: Project, name: str) -> Optional[WorkPackage]:
        return self.work_package_manager.add(project, name)

    def assign_work_package(self, feature: Feature, name: Optional[str]) -> Optional[Command]:
        """Tag a feature with a work package of its project (None to untag)."""
        return self.node_manager.edit_node(feature, work_package=name)

    # ------------------------------------------------------------------
    # History and persistence
    # ------------------------------------------------------------------

    def undo(self) -> Optional[Command]:
        return self.stack.undo()

    def redo(self) -> Optional[Command]:
        return self.stack.redo()

    @property
    def dirty(self) -> bool:
        return self.stack.dirty

    def save(self, path: Optional[Path] = None) -> bool:
        """Save the document and mark the current state as saved.

        Args:
            path: Target file. Defaults to the path the document was opened from.

        Raises:
            ValidationError: If no path is known.
            StorageError: If writing fails.
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValidationError("No file name given for the document.")
        saved = self.storage.save_document(self.document, target)
        if saved:
            self.path = target
            self.stack.mark_saved()
        return saved
