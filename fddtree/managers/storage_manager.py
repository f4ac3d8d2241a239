"""
Storage manager for fddtree.

Handles loading and saving planning documents and the .fddtree/config.json
file as JSON.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from fddtree.exceptions import StorageError
from fddtree.managers.completion_tracker import CompletionTracker
from fddtree.models.document import Document, SequenceAllocator
from fddtree.models.files import ConfigFile, DocumentFile


class StorageManager:
    """
    Manages persistence of planning documents and editor configuration.

    Handles atomic writes to prevent data corruption. A loaded document is
    handed back fully built: parents linked, sequence allocator seeded and
    every derived value recomputed.
    """

    def __init__(self, fdd_dir: Optional[Path] = None) -> None:
        """
        Initialize the StorageManager with a .fddtree/ directory path.

        Args:
            fdd_dir: Path to the .fddtree/ directory. Defaults to .fddtree/ in current directory.
        """
        self.fdd_dir = fdd_dir if fdd_dir else Path(".fddtree")

    def _atomic_write(self, file_path: Path, data: Dict[str, Any]) -> None:
        """Write data to a JSON file atomically to prevent corruption.

        Args:
            file_path: Path to the file to write.
            data: Dictionary data to write as JSON.

        Raises:
            StorageError: If writing to file fails.
        """
        directory = file_path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=directory, prefix=".tmp_fddtree_", suffix=".json"
            )
        except OSError as e:
            raise StorageError(f"Failed to write to {file_path}: {e}")

        try:
            with os.fdopen(temp_fd, "w") as temp_file:
                json.dump(data, temp_file, indent=2)
            os.replace(temp_path, file_path)
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to write to {file_path}: {e}")

    def _read_json(self, file_path: Path) -> Any:
        try:
            with open(file_path, "r") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StorageError(f"Failed to load {file_path.name}: {e}")

    # =========================================================================
    # Planning documents
    # =========================================================================

    def document_exists(self, path: Path) -> bool:
        return Path(path).exists()

    def load_document(self, path: Path) -> Document:
        """Load a planning document.

        The sequence allocator resumes at the larger of the stored next
        sequence and one past the highest Feature sequence found.

        Raises:
            StorageError: If the file is missing, unreadable or invalid.
            HierarchyCorruptedError: If the loaded tree has inconsistent links.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise StorageError(f"Document not found: {file_path}")

        data = self._read_json(file_path)
        try:
            document_file = DocumentFile.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Failed to load {file_path.name}: {e}")

        root = document_file.root
        allocator = SequenceAllocator.seeded_from(root, document_file.next_sequence)
        CompletionTracker(emit_events=False).recalculate_tree(root)
        return Document(root, allocator)

    def save_document(self, document: Document, path: Path) -> bool:
        """Save a planning document.

        Returns:
            True once the file has been replaced.

        Raises:
            StorageError: If writing fails.
        """
        document_file = DocumentFile(
            root=document.root,
            next_sequence=document.allocator.peek,
        )
        self._atomic_write(Path(path), document_file.model_dump(mode="json"))
        return True

    # =========================================================================
    # Config File
    # =========================================================================

    def load_config(self) -> ConfigFile:
        """Load config.json and return as ConfigFile model."""
        file_path = self.fdd_dir / "config.json"
        if not file_path.exists():
            return ConfigFile()

        data = self._read_json(file_path)
        try:
            return ConfigFile.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Failed to load config.json: {e}")

    def save_config(self, data: ConfigFile) -> None:
        """Save ConfigFile model to config.json."""
        file_path = self.fdd_dir / "config.json"
        self._atomic_write(file_path, data.model_dump(mode="json"))
