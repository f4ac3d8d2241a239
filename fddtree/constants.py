"""
Constants for the fddtree package.

Note: These constants serve as default fallback values.
Actual values are loaded from .fddtree/config.json at runtime via ConfigManager.
"""
from pathlib import Path
from typing import Any, List, Optional, Tuple
import json

# =============================================================================
# Planning Defaults
# =============================================================================

# Standard FDD milestones (name, effort weight) installed on new aspects
STANDARD_MILESTONES: List[Tuple[str, int]] = [
    ("Domain Walkthrough", 1),
    ("Design", 40),
    ("Design Inspection", 3),
    ("Code", 45),
    ("Code Inspection", 10),
    ("Promote to Build", 1),
]

DEFAULT_SUBJECT_NAME = "<Edit Subject Name>"
DEFAULT_ACTIVITY_NAME = "<Edit Activity Name>"
DEFAULT_FEATURE_NAME = "<Feature Name>"
DEFAULT_MILESTONE_NAME = "<Milestone Name>"

MIN_COMPLETION = 0
MAX_COMPLETION = 100

# Document file format version
DOCUMENT_FORMAT_VERSION = "1.0"

# =============================================================================
# Default Fallback Values
# These are used if config.json doesn't exist or doesn't specify a value.
# =============================================================================

DEFAULT_PROGRAM_EXCLUSIVITY = True
DEFAULT_UNDO_LIMIT = 0  # 0 means unbounded
DEFAULT_STANDARD_MILESTONES = True
DEFAULT_DOCUMENT_NAME = "plan.fddi.json"

# Search scoring
SEARCH_EXACT_SCORE = 1.0
SEARCH_PREFIX_SCORE = 0.9
SEARCH_CONTAINS_SCORE = 0.7
SEARCH_FUZZY_WEIGHT = 0.6
SEARCH_FUZZY_THRESHOLD = 0.2

# Date format defaults
DEFAULT_DATE_FORMATS = [
    "%Y-%m-%d",      # YYYY-MM-DD (ISO 8601)
    "%Y/%m/%d",      # YYYY/MM/DD
    "%d-%m-%Y",      # DD-MM-YYYY
    "%d/%m/%Y",      # DD/MM/YYYY
    "%Y%m%d",        # YYYYMMDD
    "%d %B %Y",      # DD Month YYYY (e.g., 31 December 2024)
    "%d %b %Y",      # DD Mon YYYY (e.g., 31 Dec 2024)
]
YEAR_MONTH_FORMAT = "%Y-%m"

# Error messages (not configurable)
VALIDATION_NAME_REQUIRED = "Name is required for all nodes."
DATE_FORMAT_ERROR = (
    "Invalid date format. Supported formats: YYYY-MM-DD, YYYY/MM/DD, DD-MM-YYYY, "
    "DD/MM/YYYY, YYYYMMDD, 'DD Month YYYY'. Examples: 2024-12-31, 31/12/2024."
)


# =============================================================================
# Config Loader
# Load values from .fddtree/config.json at runtime.
# =============================================================================

_config_manager_instance: Optional['ConfigManager'] = None


class ConfigManager:
    """
    Manages loading configuration from a config.json file with fallback to defaults.

    Usage:
        # With default path (.fddtree/config.json)
        config = ConfigManager()
        exclusivity = config.get_bool('program_exclusivity', DEFAULT_PROGRAM_EXCLUSIVITY)

        # With custom path
        config = ConfigManager(config_path=Path("/custom/path/config.json"))
    """

    def __init__(self, config_path: Optional[Path] = None, config_dir: Optional[Path] = None) -> None:
        """
        Initialize ConfigManager.

        Args:
            config_path: Direct path to config.json file. Takes precedence over config_dir.
            config_dir: Path to .fddtree/ directory. Config path will be config_dir/config.json.
        """
        self._config: Optional[dict] = None

        if config_path is not None:
            self._config_path = config_path
        elif config_dir is not None:
            self._config_path = config_dir / "config.json"
        else:
            self._config_path = Path(".fddtree") / "config.json"

    def _load_config(self) -> dict:
        """Load config from config.json file."""
        if self._config is not None:
            return self._config

        if self._config_path.exists():
            try:
                with open(self._config_path, "r") as f:
                    self._config = json.load(f)
            except (json.JSONDecodeError, IOError):
                self._config = {}
        else:
            self._config = {}

        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value with fallback to default.

        Args:
            key: Configuration key name.
            default: Default value if key not found.

        Returns:
            Config value or default.
        """
        config = self._load_config()
        return config.get(key, default)

    def get_int(self, key: str, default: int) -> int:
        """Get an integer config value with fallback."""
        value = self.get(key, default)
        return int(value) if value is not None else default

    def get_bool(self, key: str, default: bool) -> bool:
        """Get a boolean config value with fallback.

        Accepts JSON booleans as well as "true"/"false"/"yes"/"no" strings.
        """
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "1", "on")
        if isinstance(value, int):
            return value != 0
        return default

    def get_list(self, key: str, default: list) -> list:
        """Get a list config value with fallback."""
        value = self.get(key, default)
        return list(value) if isinstance(value, (list, tuple)) else default

    def get_str(self, key: str, default: str) -> str:
        """Get a string config value with fallback."""
        value = self.get(key, default)
        return str(value) if value is not None else default

    def reload(self) -> dict:
        """Force reload of config from disk."""
        self._config = None
        return self._load_config()

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        return self._config_path


def get_config_manager(reset: bool = False) -> ConfigManager:
    """
    Get the singleton ConfigManager instance with default path.

    Args:
        reset: If True, reset the singleton and create a new instance.

    Returns:
        ConfigManager singleton instance.
    """
    global _config_manager_instance
    if _config_manager_instance is None or reset:
        _config_manager_instance = ConfigManager()
    return _config_manager_instance


def reset_config_manager() -> None:
    """Reset the singleton ConfigManager instance (useful for testing)."""
    global _config_manager_instance
    _config_manager_instance = None


# Convenience functions for common config access
def get_program_exclusivity() -> bool:
    """Get whether Program child-type exclusivity is enforced."""
    return get_config_manager().get_bool('program_exclusivity', DEFAULT_PROGRAM_EXCLUSIVITY)


def get_undo_limit() -> int:
    """Get the undo history limit (0 means unbounded)."""
    return get_config_manager().get_int('undo_limit', DEFAULT_UNDO_LIMIT)


def get_standard_milestones() -> bool:
    """Get whether new aspects receive the standard FDD milestones."""
    return get_config_manager().get_bool('standard_milestones', DEFAULT_STANDARD_MILESTONES)


def get_default_document() -> str:
    """Get the default document file name."""
    return get_config_manager().get_str('default_document', DEFAULT_DOCUMENT_NAME)


def get_date_formats() -> list:
    """Get date formats from config or default."""
    return get_config_manager().get_list('date_formats', DEFAULT_DATE_FORMATS)
