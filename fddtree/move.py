"""
Ordered-list relocation used for reordering and reparenting nodes.

Kind-agnostic: works on any Python lists.
"""

from typing import List, Optional, TypeVar

T = TypeVar("T")


def clamp_index(requested_index: int, size: int) -> int:
    """Resolve a requested insertion index against a list size.

    Negative or out-of-range indices mean append.
    """
    if requested_index < 0 or requested_index > size:
        return size
    return requested_index


def move(
    source: Optional[List[T]],
    destination: List[T],
    element: T,
    requested_index: int,
) -> int:
    """Move an element from one list into another at a requested index.

    The element is removed from source first (no-op when absent or when
    source is None), so when source and destination are the same list the
    index is relative to the shortened list.

    Args:
        source: List currently holding the element, or None.
        destination: List to insert into.
        element: Element to move.
        requested_index: Desired position; negative or past the end appends.

    Returns:
        The index the element was inserted at.
    """
    if source is not None:
        try:
            source.remove(element)
        except ValueError:
            pass
    index = clamp_index(requested_index, len(destination))
    destination.insert(index, element)
    return index
