"""
Custom exceptions for the fddtree package.
"""


class FDDError(Exception):
    """Base exception for all fddtree errors."""
    pass


class ValidationError(FDDError):
    """Raised when a required field is missing or a value is invalid."""
    pass


class NotFoundError(FDDError):
    """Raised when a requested node is not found."""
    pass


class InvalidOperationError(FDDError):
    """Raised when a structural operation is not allowed for a node kind."""
    pass


class StorageError(FDDError):
    """Raised when a document cannot be read or written."""
    pass


class NavigationError(FDDError):
    """Raised when path resolution fails unexpectedly."""
    pass


class HierarchyCorruptedError(FDDError):
    """Raised when the tree has a cycle or inconsistent parent links."""
    pass
