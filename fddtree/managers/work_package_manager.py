"""
WorkPackageManager for work package edits.

Work packages reference features by sequence number only. The tree never
checks those references; prune_stale drops the ones that no longer resolve.
"""

from typing import List, Optional

from fddtree.exceptions import NotFoundError, ValidationError
from fddtree.managers.command_stack import CommandStack
from fddtree.managers.commands import (
    AddWorkPackageCommand,
    DeleteWorkPackageCommand,
    RenameWorkPackageCommand,
)
from fddtree.models.nodes import Feature, Project
from fddtree.models.work_package import WorkPackage


class WorkPackageManager:
    """
    Manages the work packages of projects.

    Add, rename and delete run through the command stack. Assigning a
    feature is a node edit and goes through NodeManager.edit_node.
    """

    def __init__(self, stack: CommandStack) -> None:
        self.stack = stack

    def _require(self, project: Project, name: str) -> WorkPackage:
        work_package = project.get_work_package(name)
        if work_package is None:
            raise NotFoundError(f"Work package '{name}' not found in '{project.name}'.")
        return work_package

    def add(self, project: Project, name: str) -> Optional[WorkPackage]:
        """Add an empty work package.

        Returns:
            The new work package, or None if the name is already taken.

        Raises:
            ValidationError: If the name is empty.
        """
        if not name or not name.strip():
            raise ValidationError("Work package name is required.")
        if project.get_work_package(name) is not None:
            return None
        work_package = WorkPackage(name=name)
        self.stack.execute(AddWorkPackageCommand(project, work_package))
        return work_package

    def rename(self, project: Project, name: str, new_name: str) -> bool:
        """Rename a work package.

        Returns:
            False if another work package already has new_name.
        """
        if not new_name or not new_name.strip():
            raise ValidationError("Work package name is required.")
        work_package = self._require(project, name)
        if new_name == name:
            return False
        if project.get_work_package(new_name) is not None:
            return False
        self.stack.execute(RenameWorkPackageCommand(work_package, new_name))
        return True

    def delete(self, project: Project, name: str) -> bool:
        work_package = self._require(project, name)
        self.stack.execute(DeleteWorkPackageCommand(project, work_package))
        return True

    def features_in(self, project: Project, name: str) -> List[Feature]:
        """Get the features of a project tagged with a work package, in tree order."""
        seqs = set(self._require(project, name).feature_seqs)
        return [
            node for node in project.walk()
            if isinstance(node, Feature) and node.seq in seqs
        ]

    def prune_stale(self, project: Project) -> List[int]:
        """Remove sequence numbers that match no feature of the project.

        Not undoable; run it after deletes have been committed.

        Returns:
            The removed sequence numbers.
        """
        live = {node.seq for node in project.walk() if isinstance(node, Feature)}
        removed: List[int] = []
        for work_package in project.work_packages:
            for seq in list(work_package.feature_seqs):
                if seq not in live:
                    work_package.remove_feature(seq)
                    removed.append(seq)
        return removed
