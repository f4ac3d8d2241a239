"""
Work package model for fddtree.

A work package groups Features of one Project by their sequence numbers.
References are not checked by the tree; see WorkPackageManager.prune_stale.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator


class WorkPackage(BaseModel):
    """Named set of Feature sequence numbers within a Project."""

    name: str
    feature_seqs: List[int] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Work package name is required.")
        return v

    def add_feature(self, seq: int) -> None:
        """Tag a feature sequence number, ignoring duplicates."""
        if seq not in self.feature_seqs:
            self.feature_seqs.append(seq)

    def remove_feature(self, seq: int) -> bool:
        """Untag a feature sequence number.

        Returns:
            True if the number was tagged.
        """
        if seq in self.feature_seqs:
            self.feature_seqs.remove(seq)
            return True
        return False
