"""
File models for fddtree.

Models representing the structure of JSON files written by StorageManager.
"""

from typing import List

from pydantic import BaseModel, Field

from fddtree.constants import (
    DEFAULT_DATE_FORMATS,
    DEFAULT_DOCUMENT_NAME,
    DEFAULT_PROGRAM_EXCLUSIVITY,
    DEFAULT_STANDARD_MILESTONES,
    DEFAULT_UNDO_LIMIT,
    DOCUMENT_FORMAT_VERSION,
)

from .nodes import Program


class DocumentFile(BaseModel):
    """Model for a planning document file.

    next_sequence records the allocator state; on load the allocator is
    raised further if a feature with a higher sequence is found.
    """

    format_version: str = DOCUMENT_FORMAT_VERSION
    next_sequence: int = 1
    root: Program


class ConfigFile(BaseModel):
    """Model for config.json file.

    Editor settings and their defaults.
    """

    program_exclusivity: bool = DEFAULT_PROGRAM_EXCLUSIVITY
    undo_limit: int = Field(default=DEFAULT_UNDO_LIMIT, ge=0)
    standard_milestones: bool = DEFAULT_STANDARD_MILESTONES
    default_document: str = DEFAULT_DOCUMENT_NAME
    date_formats: List[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))
