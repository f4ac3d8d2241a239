"""
Document model for fddtree.

In-memory planning document: the root Program plus the allocator that hands
out Feature sequence numbers. Built by StorageManager on load.
"""

from typing import Iterator, List, Optional

from fddtree.models.base import BaseNode
from fddtree.models.nodes import Feature, Program


class SequenceAllocator:
    """
    Hands out monotonically increasing Feature sequence numbers.

    Owned by a Document. Seeded from the highest sequence found on load so new
    features never collide with loaded ones.
    """

    def __init__(self, next_value: int = 1) -> None:
        self._next = max(1, next_value)

    @property
    def peek(self) -> int:
        """The number the next call to next() will return."""
        return self._next

    def next(self) -> int:
        value = self._next
        self._next += 1
        return value

    def observe(self, seq: int) -> None:
        """Make sure future numbers are greater than seq."""
        if seq >= self._next:
            self._next = seq + 1

    @classmethod
    def seeded_from(cls, root: BaseNode, next_value: int = 1) -> "SequenceAllocator":
        """Create an allocator that skips every sequence used under root."""
        allocator = cls(next_value)
        for node in root.walk():
            if isinstance(node, Feature):
                allocator.observe(node.seq)
        return allocator


class Document:
    """
    In-memory planning document.

    Holds the single root Program and the document's SequenceAllocator.
    """

    def __init__(
        self,
        root: Program,
        allocator: Optional[SequenceAllocator] = None,
    ) -> None:
        self.root = root
        self.allocator = allocator or SequenceAllocator.seeded_from(root)

    def walk(self) -> Iterator[BaseNode]:
        return self.root.walk()

    def features(self) -> List[Feature]:
        """Get all features in document order."""
        return [node for node in self.root.walk() if isinstance(node, Feature)]

    def max_sequence(self) -> int:
        return max((feature.seq for feature in self.features()), default=0)
