"""Persistence strategies that keep all items of a store in a single file.

Items are converted with mashumaro codecs, so any dataclass (including
`Entity` subclasses) can be persisted. Each save rewrites the whole file.
"""

from abc import abstractmethod
from collections.abc import Sequence
import json
import logging
from pathlib import Path
from typing import Any, Generic, TypeVar

import aiofiles
from aiofiles.ospath import exists
import yaml
from mashumaro.codecs import BasicDecoder, BasicEncoder
from mashumaro.exceptions import InvalidFieldValue, MissingField

from datastores.exceptions import PersistenceError

from .strategy import PersistenceStrategy

__all__ = [
    "FilePersistenceStrategy",
    "JsonFilePersistenceStrategy",
    "YamlFilePersistenceStrategy",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class FilePersistenceStrategy(PersistenceStrategy[T], Generic[T]):
    """Base class for strategies persisting a list of items to one file."""

    def __init__(self, path: Path | str, item_type: type[T]) -> None:
        """Initialize the FilePersistenceStrategy."""
        if not path or not str(path).strip():
            raise ValueError("path must not be empty")
        if item_type is None:
            raise ValueError("item_type must not be None")
        self._path = Path(path)
        self._item_type = item_type
        self._decoder: BasicDecoder[list[T]] = BasicDecoder(list[item_type])  # type: ignore[valid-type]
        self._encoder: BasicEncoder[list[T]] = BasicEncoder(list[item_type])  # type: ignore[valid-type]

    @property
    def path(self) -> Path:
        """The file holding the persisted items."""
        return self._path

    @abstractmethod
    def _dumps(self, data: list[Any]) -> str:
        """Serialize plain data to text."""

    @abstractmethod
    def _loads(self, content: str) -> Any:
        """Parse text into plain data."""

    async def load_all(self) -> list[T]:
        """Load all items, returning an empty list when the file does not exist."""
        if not await exists(self._path):
            _LOGGER.debug("No persisted data at %s", self._path)
            return []
        async with aiofiles.open(self._path, mode="r", encoding="utf-8") as f:
            content = await f.read()
        if not content.strip():
            return []
        try:
            data = self._loads(content)
        except (ValueError, yaml.YAMLError) as err:
            raise PersistenceError(f"Unable to parse {self._path}: {err}") from err
        if data is None:
            return []
        if not isinstance(data, list):
            raise PersistenceError(
                f"Expected a list of items in {self._path}, found {type(data).__name__}"
            )
        try:
            return self._decoder.decode(data)
        except (MissingField, InvalidFieldValue, ValueError, TypeError) as err:
            raise PersistenceError(
                f"Unable to decode {self._item_type.__qualname__} items from {self._path}: {err}"
            ) from err

    async def save_all(self, items: Sequence[T]) -> None:
        """Overwrite the file with exactly the given items."""
        if items is None:
            raise ValueError("items must not be None")
        content = self._dumps(self._encoder.encode(list(items)))
        self._path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self._path, mode="w", encoding="utf-8") as f:
            await f.write(content)
        _LOGGER.debug("Wrote %d items to %s", len(items), self._path)


class JsonFilePersistenceStrategy(FilePersistenceStrategy[T]):
    """Persists items as an indented JSON array."""

    def _dumps(self, data: list[Any]) -> str:
        return json.dumps(data, indent=2)

    def _loads(self, content: str) -> Any:
        return json.loads(content)


class YamlFilePersistenceStrategy(FilePersistenceStrategy[T]):
    """Persists items as a YAML sequence."""

    def _dumps(self, data: list[Any]) -> str:
        return yaml.dump(data, sort_keys=False, explicit_start=True)

    def _loads(self, content: str) -> Any:
        return yaml.safe_load(content)
