"""
Node models for fddtree.

Leaf-first: Feature, Activity, Subject, Aspect, Project, Program.

Valid children:
    Program  -> Program, Project
    Project  -> Aspect
    Aspect   -> Subject
    Subject  -> Activity
    Activity -> Feature
    Feature  -> none
"""

from datetime import date
from typing import ClassVar, Dict, List, Optional

from pydantic import Field, PrivateAttr

from fddtree.models.base import BaseNode, CompositeNode, NodeKind
from fddtree.models.milestone import AspectInfo, Milestone
from fddtree.models.work_package import WorkPackage


class Feature(BaseNode):
    """Feature model - the leaf of the tree.

    seq is a document-wide sequence number allocated by SequenceAllocator.
    Features have no child list operations.
    """

    seq: int = 0
    initials: Optional[str] = None
    milestones: List[Milestone] = Field(default_factory=list)
    remarks: List[str] = Field(default_factory=list)
    _kind: NodeKind = PrivateAttr(default=NodeKind.FEATURE)

    @property
    def aspect(self) -> Optional["Aspect"]:
        """Get the Aspect whose milestone definitions apply to this feature."""
        return self.nearest(NodeKind.ASPECT)


class Activity(CompositeNode):
    """Activity model - groups features under a subject.

    Valid children: Feature
    """

    initials: Optional[str] = None
    target_month: Optional[date] = None
    features: List[Feature] = Field(default_factory=list)
    _kind: NodeKind = PrivateAttr(default=NodeKind.ACTIVITY)
    _child_fields: ClassVar[Dict[NodeKind, str]] = {NodeKind.FEATURE: "features"}


class Subject(CompositeNode):
    """Subject model - major feature set within an aspect.

    Valid children: Activity
    """

    prefix: Optional[str] = None
    activities: List[Activity] = Field(default_factory=list)
    _kind: NodeKind = PrivateAttr(default=NodeKind.SUBJECT)
    _child_fields: ClassVar[Dict[NodeKind, str]] = {NodeKind.ACTIVITY: "activities"}


class Aspect(CompositeNode):
    """Aspect model - declares the milestone definitions for its features.

    Valid children: Subject
    """

    info: AspectInfo = Field(default_factory=AspectInfo)
    subjects: List[Subject] = Field(default_factory=list)
    _kind: NodeKind = PrivateAttr(default=NodeKind.ASPECT)
    _child_fields: ClassVar[Dict[NodeKind, str]] = {NodeKind.SUBJECT: "subjects"}


class Project(CompositeNode):
    """Project model - holds aspects and work packages.

    Valid children: Aspect
    """

    aspects: List[Aspect] = Field(default_factory=list)
    work_packages: List[WorkPackage] = Field(default_factory=list)
    _kind: NodeKind = PrivateAttr(default=NodeKind.PROJECT)
    _child_fields: ClassVar[Dict[NodeKind, str]] = {NodeKind.ASPECT: "aspects"}

    def get_work_package(self, name: str) -> Optional[WorkPackage]:
        for work_package in self.work_packages:
            if work_package.name == name:
                return work_package
        return None


class Program(CompositeNode):
    """Program model - top-level container, usually the document root.

    Valid children: Program, Project (only one of the two kinds at a time
    when program exclusivity is enabled)
    """

    programs: List["Program"] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    _kind: NodeKind = PrivateAttr(default=NodeKind.PROGRAM)
    _child_fields: ClassVar[Dict[NodeKind, str]] = {
        NodeKind.PROGRAM: "programs",
        NodeKind.PROJECT: "projects",
    }


NODE_CLASSES: Dict[NodeKind, type] = {
    NodeKind.PROGRAM: Program,
    NodeKind.PROJECT: Project,
    NodeKind.ASPECT: Aspect,
    NodeKind.SUBJECT: Subject,
    NodeKind.ACTIVITY: Activity,
    NodeKind.FEATURE: Feature,
}
