"""
CompletionTracker for bottom-up progress and target date aggregation.

Derived values are cached on each node and recomputed here explicitly,
never inside read accessors.
"""

from datetime import date
from typing import Dict, Iterator, List, Optional

from fddtree.constants import MAX_COMPLETION, MIN_COMPLETION
from fddtree.exceptions import HierarchyCorruptedError
from fddtree.managers.events import EventType, node_event, publish_event
from fddtree.models.base import BaseNode, CompositeNode, Kpi, Progress, StatusEnum
from fddtree.models.nodes import Feature


class CompletionTracker:
    """
    Tracks completion and target dates across the planning tree.

    Handles:
    - Feature completion from completed milestone effort weights
    - Composite completion as the floored mean of the children
    - Per-status feature counts (kpi) summed bottom-up
    - Target dates as the latest date found below a node
    - Emitting NODE_COMPLETED when a node reaches 100%

    Every recompute reads only the current children, so calling refresh twice
    gives the same result as calling it once.
    """

    def __init__(self, emit_events: bool = True) -> None:
        """
        Initialize CompletionTracker.

        Args:
            emit_events: Whether to emit completion events.
        """
        self._emit_events = emit_events

    # ------------------------------------------------------------------
    # Feature level
    # ------------------------------------------------------------------

    def feature_completion(self, feature: Feature) -> int:
        """Calculate a feature's completion from its Aspect's milestone weights.

        Milestones are matched to MilestoneInfo definitions by position. A
        feature outside any Aspect, or under one declaring no effort, is 0%.
        """
        aspect = feature.aspect
        if aspect is None:
            return MIN_COMPLETION
        infos = aspect.info.milestone_info
        total = sum(info.effort for info in infos)
        if total <= 0:
            return MIN_COMPLETION
        completed = sum(
            info.effort
            for info, milestone in zip(infos, feature.milestones)
            if milestone.is_complete
        )
        return min(MAX_COMPLETION, completed * 100 // total)

    def feature_status(self, feature: Feature) -> StatusEnum:
        """Derive a feature's status from its milestones."""
        milestones = feature.milestones
        if milestones and all(m.is_complete for m in milestones):
            return StatusEnum.COMPLETE
        if any(m.status != StatusEnum.NOT_STARTED for m in milestones):
            return StatusEnum.UNDERWAY
        return StatusEnum.NOT_STARTED

    # ------------------------------------------------------------------
    # Single node
    # ------------------------------------------------------------------

    def calculate_progress(self, node: BaseNode) -> Progress:
        """Calculate a node's progress from its own data and cached children.

        Args:
            node: Node to calculate progress for.

        Returns:
            A new Progress; the node is not modified.
        """
        if isinstance(node, Feature):
            status = self.feature_status(node)
            return Progress(
                completion=self.feature_completion(node),
                kpi=[Kpi(status=s, count=1 if s == status else 0) for s in StatusEnum],
                status=status,
                count=node.progress.count,
            )

        children = node.children
        completion = MIN_COMPLETION
        if children:
            completion = sum(c.progress.completion for c in children) // len(children)
        counts = {
            s: sum(c.progress.kpi_count(s) for c in children) for s in StatusEnum
        }
        return Progress(
            completion=completion,
            kpi=[Kpi(status=s, count=counts[s]) for s in StatusEnum],
            status=self._composite_status(counts),
            count=node.progress.count,
        )

    def _composite_status(self, counts: Dict[StatusEnum, int]) -> StatusEnum:
        total = sum(counts.values())
        if total and counts[StatusEnum.COMPLETE] == total:
            return StatusEnum.COMPLETE
        if counts[StatusEnum.COMPLETE] or counts[StatusEnum.UNDERWAY]:
            return StatusEnum.UNDERWAY
        return StatusEnum.NOT_STARTED

    def calculate_target_date(self, node: BaseNode) -> Optional[date]:
        """Calculate the latest date found below a node.

        Features use their milestone planned dates, composites their
        children's cached target dates.
        """
        if isinstance(node, Feature):
            dates = [m.planned for m in node.milestones if m.planned is not None]
        else:
            dates = [c.target_date for c in node.children if c.target_date is not None]
        return max(dates) if dates else None

    def _recompute(self, node: BaseNode) -> None:
        was_complete = node.progress.completion >= MAX_COMPLETION
        node.progress = self.calculate_progress(node)
        node.target_date = self.calculate_target_date(node)
        if (
            self._emit_events
            and not was_complete
            and node.progress.completion >= MAX_COMPLETION
        ):
            publish_event(node_event(EventType.NODE_COMPLETED, node))

    # ------------------------------------------------------------------
    # Walks
    # ------------------------------------------------------------------

    def _ancestor_chain(self, node: BaseNode) -> List[CompositeNode]:
        """Collect the ancestors of node, checking links on the way up.

        Raises:
            HierarchyCorruptedError: On a cycle or when a parent does not list
                the child pointing at it.
        """
        chain: List[CompositeNode] = []
        seen = {id(node)}
        current = node
        parent = current.parent
        while parent is not None:
            if id(parent) in seen:
                raise HierarchyCorruptedError(
                    f"Cycle detected above '{node.name}' at '{parent.name}'."
                )
            if parent.index_of(current) < 0:
                raise HierarchyCorruptedError(
                    f"'{parent.name}' does not list its child '{current.name}'."
                )
            seen.add(id(parent))
            chain.append(parent)
            current = parent
            parent = current.parent
        return chain

    def _post_order(self, node: BaseNode, seen: set) -> Iterator[BaseNode]:
        if id(node) in seen:
            raise HierarchyCorruptedError(f"Cycle detected at '{node.name}'.")
        seen.add(id(node))
        for child in node.children:
            if child.parent is not node:
                raise HierarchyCorruptedError(
                    f"'{child.name}' does not point back to its parent '{node.name}'."
                )
            yield from self._post_order(child, seen)
        yield node

    def refresh(self, node: BaseNode) -> None:
        """Recompute a node and every ancestor up to the root.

        Args:
            node: The node whose data or children changed.
        """
        chain = self._ancestor_chain(node)
        self._recompute(node)
        for ancestor in chain:
            self._recompute(ancestor)

    def refresh_subtree(self, node: BaseNode) -> None:
        """Recompute every node below and including node, then its ancestors.

        Used after a subtree moves, since a Feature's completion depends on
        the Aspect it ends up under.
        """
        chain = self._ancestor_chain(node)
        for descendant in list(self._post_order(node, set())):
            self._recompute(descendant)
        for ancestor in chain:
            self._recompute(ancestor)

    def recalculate_tree(self, root: BaseNode) -> None:
        """Recompute the whole tree below root (used after load)."""
        self.refresh_subtree(root)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_late(self, node: BaseNode, today: Optional[date] = None) -> bool:
        """Check whether a node is behind its plan.

        A feature is late when any incomplete milestone was planned before
        today. A composite is late when its target date has passed and it is
        not yet complete.
        """
        today = today or date.today()
        if isinstance(node, Feature):
            return any(
                not m.is_complete and m.planned is not None and m.planned < today
                for m in node.milestones
            )
        return (
            node.target_date is not None
            and node.target_date < today
            and node.progress.completion < MAX_COMPLETION
        )

    def get_completion_stats(self, node: BaseNode) -> Dict[str, int]:
        """Get feature counts for a node from its cached progress.

        Returns:
            Dictionary with total, complete, underway and not_started counts
            plus the completion percentage.
        """
        progress = node.progress
        complete = progress.kpi_count(StatusEnum.COMPLETE)
        underway = progress.kpi_count(StatusEnum.UNDERWAY)
        not_started = progress.kpi_count(StatusEnum.NOT_STARTED)
        return {
            "features_total": complete + underway + not_started,
            "features_complete": complete,
            "features_underway": underway,
            "features_not_started": not_started,
            "completion": progress.completion,
        }
