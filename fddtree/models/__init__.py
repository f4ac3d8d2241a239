"""
Data models for fddtree.

Import models explicitly from their modules to avoid circular imports:
    from fddtree.models.base import BaseNode, CompositeNode, NodeKind, Progress, StatusEnum
    from fddtree.models.nodes import Program, Project, Aspect, Subject, Activity, Feature
    from fddtree.models.milestone import Milestone, MilestoneInfo, AspectInfo
    from fddtree.models.document import Document, SequenceAllocator
    from fddtree.models.files import DocumentFile, ConfigFile
"""

from .nodes import Activity, Aspect, Feature, Program, Project, Subject

Program.model_rebuild()
Project.model_rebuild()
Aspect.model_rebuild()
Subject.model_rebuild()
Activity.model_rebuild()
Feature.model_rebuild()
