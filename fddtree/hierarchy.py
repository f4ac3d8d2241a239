"""
Hierarchy rules for fddtree.

Pure predicates deciding where a node may legally be placed. They never
mutate the tree and never raise; a rejected placement is reported as False.
"""

from typing import Optional

from fddtree.models.base import BaseNode, CompositeNode, NodeKind

# Upper bound on ancestor walks so a corrupted parent chain cannot loop forever
_MAX_DEPTH = 10_000


def _walk_up(node: Optional[BaseNode]):
    depth = 0
    while node is not None and depth < _MAX_DEPTH:
        yield node
        node = node.parent
        depth += 1


def is_descendant(node: Optional[BaseNode], ancestor: Optional[BaseNode]) -> bool:
    """Check whether node lies strictly below ancestor."""
    if node is None or ancestor is None:
        return False
    return any(up is ancestor for up in _walk_up(node.parent))


def is_ancestor(node: Optional[BaseNode], descendant: Optional[BaseNode]) -> bool:
    """Check whether node lies strictly above descendant."""
    return is_descendant(descendant, node)


def is_root(node: BaseNode) -> bool:
    return node.parent is None


def kind_accepted(
    parent: Optional[BaseNode],
    kind: Optional[NodeKind],
    exclusivity: bool = True,
) -> bool:
    """Check whether parent may hold a child of the given kind.

    Exclusivity only counts the Program's children of the other kind, so
    a Program's own children of the same kind never block each other.
    """
    if parent is None or kind is None:
        return False
    if not isinstance(parent, CompositeNode) or not parent.accepts_kind(kind):
        return False
    if exclusivity and parent.kind == NodeKind.PROGRAM:
        other_kind = NodeKind.PROJECT if kind == NodeKind.PROGRAM else NodeKind.PROGRAM
        if parent.child_list_for(other_kind):
            return False
    return True


def hierarchy_accepts(
    parent: Optional[BaseNode],
    child: Optional[BaseNode],
    exclusivity: bool = True,
) -> bool:
    """Check whether parent may hold child by kind.

    With exclusivity enabled a Program holds either sub-Programs or
    Projects, never both.

    Args:
        parent: Prospective parent.
        child: Node to place.
        exclusivity: Enforce Program child-type exclusivity.

    Returns:
        True if the drop is kind-compatible.
    """
    if child is None:
        return False
    return kind_accepted(parent, child.kind, exclusivity)


def is_valid_reparent(
    candidate: Optional[BaseNode],
    new_parent: Optional[BaseNode],
    exclusivity: bool = True,
) -> bool:
    """Check whether candidate may be moved under new_parent.

    Rejects moving a node under itself or its own subtree, moving the root,
    and any kind-incompatible drop.
    """
    if candidate is None or new_parent is None:
        return False
    if candidate is new_parent:
        return False
    if is_root(candidate):
        return False
    if is_descendant(new_parent, candidate):
        return False
    return hierarchy_accepts(new_parent, candidate, exclusivity)


def can_insert_sibling(
    source: Optional[BaseNode],
    reference: Optional[BaseNode],
    exclusivity: bool = True,
) -> bool:
    """Check whether source may be placed next to reference.

    The target parent is the reference's parent. Placing a node next to
    itself is rejected as a no-op.
    """
    if source is None or reference is None:
        return False
    if source is reference:
        return False
    parent = reference.parent
    if parent is None:
        return False
    if is_root(source):
        return False
    if is_ancestor(source, reference):
        return False
    return hierarchy_accepts(parent, source, exclusivity)
