"""
Test fixtures for the fddtree test suite.

Provides:
- Temporary directory fixtures (isolated from any real .fddtree/)
- Mock data builders for creating test nodes
- A sample planning tree with known completion and target dates
"""

import shutil
import tempfile
from datetime import date
from pathlib import Path
from types import SimpleNamespace
from typing import Generator, List, Optional

import pytest

from fddtree.constants import reset_config_manager
from fddtree.managers.command_stack import CommandStack
from fddtree.managers.completion_tracker import CompletionTracker
from fddtree.managers.events import get_event_bus
from fddtree.managers.node_manager import NodeManager
from fddtree.models.base import StatusEnum
from fddtree.models.document import Document
from fddtree.models.milestone import AspectInfo, Milestone, MilestoneInfo
from fddtree.models.nodes import Activity, Aspect, Feature, Program, Project, Subject


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_global_state() -> Generator[None, None, None]:
    """Reset the event bus and config singleton around every test."""
    get_event_bus().clear()
    reset_config_manager()
    yield
    get_event_bus().clear()
    reset_config_manager()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test isolation."""
    temp_path = Path(tempfile.mkdtemp(prefix="fddtree_test_"))
    yield temp_path
    # Cleanup
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fdd_dir(temp_dir: Path) -> Path:
    """Create a temporary .fddtree/ directory."""
    path = temp_dir / ".fddtree"
    path.mkdir(parents=True)
    return path


# =============================================================================
# Mock Data Builders
# =============================================================================


class MockDataBuilder:
    """Helper class for building mock planning nodes for testing."""

    @staticmethod
    def create_program(name: str = "Test Program", children: Optional[list] = None) -> Program:
        children = children or []
        return Program(
            name=name,
            programs=[c for c in children if isinstance(c, Program)],
            projects=[c for c in children if isinstance(c, Project)],
        )

    @staticmethod
    def create_project(name: str = "Test Project", aspects: Optional[List[Aspect]] = None) -> Project:
        return Project(name=name, aspects=aspects or [])

    @staticmethod
    def create_aspect(
        name: str = "Test Aspect",
        subjects: Optional[List[Subject]] = None,
        standard: bool = True,
        efforts: Optional[List[int]] = None,
    ) -> Aspect:
        """Create an Aspect with the standard milestones or custom efforts."""
        info = AspectInfo()
        if efforts is not None:
            info.milestone_info = [
                MilestoneInfo(name=f"M{i + 1}", effort=effort) for i, effort in enumerate(efforts)
            ]
        elif standard:
            info.set_standard_milestones()
        return Aspect(name=name, info=info, subjects=subjects or [])

    @staticmethod
    def create_subject(
        name: str = "Test Subject",
        activities: Optional[List[Activity]] = None,
        prefix: Optional[str] = None,
    ) -> Subject:
        return Subject(name=name, prefix=prefix, activities=activities or [])

    @staticmethod
    def create_activity(
        name: str = "Test Activity",
        features: Optional[List[Feature]] = None,
        initials: Optional[str] = None,
    ) -> Activity:
        return Activity(name=name, initials=initials, features=features or [])

    @staticmethod
    def create_feature(
        name: str = "Test Feature",
        seq: int = 1,
        complete: int = 0,
        rows: int = 6,
        planned: Optional[date] = None,
        underway: bool = False,
    ) -> Feature:
        """Create a Feature whose first `complete` milestones are done.

        With underway set, the milestone after the completed ones is underway.
        """
        milestones = []
        for i in range(rows):
            if i < complete:
                status = StatusEnum.COMPLETE
            elif i == complete and underway:
                status = StatusEnum.UNDERWAY
            else:
                status = StatusEnum.NOT_STARTED
            milestones.append(Milestone(planned=planned, status=status))
        return Feature(name=name, seq=seq, milestones=milestones)


@pytest.fixture
def mock_data() -> MockDataBuilder:
    """Provide mock data builder for test node creation."""
    return MockDataBuilder()


# =============================================================================
# Tree Fixtures
# =============================================================================


@pytest.fixture
def sample_tree(mock_data: MockDataBuilder) -> SimpleNamespace:
    """Create a sample planning tree with aggregation already run.

    Structure (standard milestones, total effort 100):
        Acme (program)
        └── Shop (project)
            └── UI (aspect)
                └── Orders (subject)
                    ├── Checkout (activity)
                    │   ├── #1 Pay by card      all milestones complete (100%)
                    │   └── #2 Pay by invoice   nothing started (0%)
                    └── Returns (activity)
                        └── #3 Refund           walkthrough + design done (41%)

    Checkout 50%, Returns 41%, Orders/UI/Shop/Acme 45%.
    The namespace keeps strong references to every node.
    """
    f1 = mock_data.create_feature("Pay by card", seq=1, complete=6, planned=date(2024, 1, 31))
    f2 = mock_data.create_feature("Pay by invoice", seq=2, complete=0, planned=date(2024, 2, 29))
    f3 = mock_data.create_feature("Refund", seq=3, complete=2, planned=date(2024, 3, 15))
    checkout = mock_data.create_activity("Checkout", [f1, f2], initials="AB")
    returns = mock_data.create_activity("Returns", [f3])
    orders = mock_data.create_subject("Orders", [checkout, returns], prefix="ORD")
    aspect = mock_data.create_aspect("UI", [orders])
    project = mock_data.create_project("Shop", [aspect])
    root = mock_data.create_program("Acme", [project])

    CompletionTracker(emit_events=False).recalculate_tree(root)
    document = Document(root)

    return SimpleNamespace(
        document=document,
        root=root,
        project=project,
        aspect=aspect,
        orders=orders,
        checkout=checkout,
        returns=returns,
        f1=f1,
        f2=f2,
        f3=f3,
    )


@pytest.fixture
def editor(sample_tree: SimpleNamespace) -> SimpleNamespace:
    """Sample tree plus a command stack, tracker and NodeManager."""
    stack = CommandStack()
    tracker = CompletionTracker()
    manager = NodeManager(
        sample_tree.document,
        stack,
        tracker,
        exclusivity=True,
        standard_milestones=True,
    )
    sample_tree.stack = stack
    sample_tree.tracker = tracker
    sample_tree.manager = manager
    return sample_tree
