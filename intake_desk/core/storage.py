"""Key/value storage for serialized documents.

Mirrors the browser local-storage surface (``get_item`` / ``set_item`` /
``remove_item``): string keys, string values, whole-value reads and writes.
There is no locking. Two processes writing the same key overwrite each other
and the last write silently wins.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Abstract string key/value storage."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value or None."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Replace the stored value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete the key. Missing keys are ignored."""
        pass


class MemoryStorage(KeyValueStorage):
    """Process-local storage, lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(KeyValueStorage):
    """One file per key inside a directory."""

    def __init__(self, directory: Path | str):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)
        logger.debug(f"Wrote {len(value)} bytes to {path}")

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
