"""Locations of the files backing persisted stores."""

from dataclasses import dataclass
import logging
import os
from pathlib import Path

__all__ = ["DataStorePaths"]

_LOGGER = logging.getLogger(__name__)

DATA_DIR = "data"
JSON_SUFFIX = ".json"
YAML_SUFFIX = ".yaml"


@dataclass(frozen=True)
class DataStorePaths:
    """Paths under an application root directory."""

    root: Path

    @classmethod
    def for_application(cls, name: str) -> "DataStorePaths":
        """Return the paths for an application in the user data directory.

        Uses `$XDG_DATA_HOME` when set, else `~/.local/share`.
        """
        if not name or not name.strip():
            raise ValueError("Application name must not be empty")
        base = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
        return cls(Path(base) / name)

    @property
    def data_path(self) -> Path:
        return self.root / DATA_DIR

    def json_file(self, name: str) -> Path:
        """Return the JSON file for a store name, adding the suffix if missing."""
        return self.data_path / _with_suffix(name, JSON_SUFFIX)

    def yaml_file(self, name: str) -> Path:
        """Return the YAML file for a store name, adding the suffix if missing."""
        return self.data_path / _with_suffix(name, YAML_SUFFIX)

    def ensure_directories(self) -> None:
        """Create the root and data directories."""
        for directory in (self.root, self.data_path):
            if not directory.exists():
                _LOGGER.debug("Creating directory %s", directory)
                directory.mkdir(parents=True, exist_ok=True)


def _with_suffix(name: str, suffix: str) -> str:
    if not name or not name.strip():
        raise ValueError("Name must not be empty")
    if name.lower().endswith(suffix):
        return name
    return f"{name}{suffix}"
