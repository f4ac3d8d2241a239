"""
Milestone models for fddtree.

MilestoneInfo definitions are declared once per Aspect in its AspectInfo and
matched by position with the Milestone rows of every Feature below it.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from fddtree.constants import (
    DEFAULT_ACTIVITY_NAME,
    DEFAULT_FEATURE_NAME,
    DEFAULT_MILESTONE_NAME,
    DEFAULT_SUBJECT_NAME,
    STANDARD_MILESTONES,
)
from fddtree.models.base import StatusEnum


class MilestoneInfo(BaseModel):
    """Definition of one milestone: its name and effort weight."""

    name: str
    effort: int = Field(default=0, ge=0)


class Milestone(BaseModel):
    """A Feature's progress against one MilestoneInfo."""

    planned: Optional[date] = None
    actual: Optional[date] = None
    status: StatusEnum = StatusEnum.NOT_STARTED

    @property
    def is_complete(self) -> bool:
        return self.status == StatusEnum.COMPLETE


class AspectInfo(BaseModel):
    """Naming conventions and milestone definitions shared by an Aspect."""

    subject_name: Optional[str] = None
    activity_name: Optional[str] = None
    feature_name: Optional[str] = None
    milestone_name: Optional[str] = None
    milestone_info: List[MilestoneInfo] = Field(default_factory=list)

    @property
    def total_effort(self) -> int:
        return sum(info.effort for info in self.milestone_info)

    def set_standard_milestones(self) -> None:
        """Replace the milestone definitions with the six standard FDD milestones."""
        self.subject_name = DEFAULT_SUBJECT_NAME
        self.activity_name = DEFAULT_ACTIVITY_NAME
        self.feature_name = DEFAULT_FEATURE_NAME
        self.milestone_name = DEFAULT_MILESTONE_NAME
        self.milestone_info = [
            MilestoneInfo(name=name, effort=effort)
            for name, effort in STANDARD_MILESTONES
        ]


def align_milestones(
    milestones: List[Milestone],
    infos: List[MilestoneInfo],
    today: Optional[date] = None,
) -> List[Milestone]:
    """Trim or pad a milestone list so it lines up with its definitions.

    New rows are planned for today and not started. Existing rows keep their
    values; a missing planned date is filled with today.

    Args:
        milestones: Current milestone rows (not modified).
        infos: Milestone definitions of the owning Aspect.
        today: Date used for new or unplanned rows.

    Returns:
        A new list of milestones, one per definition.
    """
    today = today or date.today()
    aligned = [m.model_copy() for m in milestones[: len(infos)]]
    while len(aligned) < len(infos):
        aligned.append(Milestone(planned=today))
    for milestone in aligned:
        if milestone.planned is None:
            milestone.planned = today
    return aligned
