"""
NavigationManager for path resolution and node lookup.

Paths are "/"-separated and start at the root. Each segment is a node name
or a 1-based position among the parent's children, e.g. "Acme/1/UI/Orders".
"""

from typing import Iterator, List, Optional

from fddtree.exceptions import NavigationError
from fddtree.models.base import BaseNode
from fddtree.models.document import Document
from fddtree.models.nodes import Feature

PATH_SEPARATOR = "/"


class NavigationManager:
    """
    Manages navigation and path resolution operations.

    Handles:
    - Path resolution to nodes
    - Node path discovery
    - Feature lookup by sequence number
    - Tree traversal
    """

    def __init__(self, document: Document) -> None:
        """
        Initialize NavigationManager.

        Args:
            document: Document containing all nodes.
        """
        self.document = document

    def _resolve_path_segment(self, nodes: List[BaseNode], segment: str) -> Optional[BaseNode]:
        """Resolve a path segment to a specific node.

        Args:
            nodes: Candidate nodes.
            segment: Path segment to resolve (name or 1-based index).

        Returns:
            Matching node or None if not found.
        """
        for node in nodes:
            if node.name == segment:
                return node

        try:
            index = int(segment) - 1
            if 0 <= index < len(nodes):
                return nodes[index]
        except ValueError:
            pass  # Not an integer

        return None

    def get_node_by_path(self, path: str) -> Optional[BaseNode]:
        """Get a node by its path.

        Args:
            path: Path to the node, root segment included.

        Returns:
            The matching node or None if not found.

        Raises:
            NavigationError: If path resolution fails unexpectedly.
        """
        if not path or not path.strip(PATH_SEPARATOR):
            return None

        try:
            segments = path.strip(PATH_SEPARATOR).split(PATH_SEPARATOR)
            candidates: List[BaseNode] = [self.document.root]
            target: Optional[BaseNode] = None

            for segment in segments:
                target = self._resolve_path_segment(candidates, segment)
                if target is None:
                    return None
                candidates = target.children

            return target
        except Exception as e:
            raise NavigationError(f"Failed to resolve path '{path}': {e}")

    def get_node_path(self, node: BaseNode) -> Optional[str]:
        """Get the path of a node by names.

        Returns:
            Path string or None if the node is not part of this document.
        """
        names = [node.name]
        for ancestor in node.ancestors():
            names.append(ancestor.name)
            if ancestor is self.document.root:
                return PATH_SEPARATOR.join(reversed(names))
        if node is self.document.root:
            return node.name
        return None

    def find_feature(self, seq: int) -> Optional[Feature]:
        """Get the feature with the given sequence number."""
        for feature in self.document.features():
            if feature.seq == seq:
                return feature
        return None

    def walk(self) -> Iterator[BaseNode]:
        """Yield every node of the document in pre-order."""
        return self.document.walk()
