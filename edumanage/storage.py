"""
Persistent key-value storage for the application dataset.

Each key is stored as one file inside the data directory:

    <data_dir>/edumanage_ai_data.json
    <data_dir>/edumanage_ai_backup.json

The store knows nothing about the dataset itself: it only moves strings in and
out. It never raises past its own boundary. A medium that cannot be used
(read-only directory, full disk, ...) shows up as probe() == False, a read that
returns None or a write that returns False.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

SENTINEL_KEY = "__storage_test__"


def default_data_dir() -> Path:
    """
    Return the default store directory inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can pass their own directory.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "store"


class KeyValueStore:
    """
    Directory-backed key-value store with whole-value replacement.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else default_data_dir()

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def probe(self) -> bool:
        """
        Write and immediately delete a sentinel key.
        Returns whether the medium is usable.
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self._path(SENTINEL_KEY)
            path.write_text(SENTINEL_KEY, encoding="utf-8")
            path.unlink()
            return True
        except OSError as e:
            logger.info("Storage not available at %s: %s", self.directory, e)
            return False

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            # First run: nothing stored yet
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", key, e)
            return None

    def write(self, key: str, value: str) -> bool:
        """
        Replace the stored value of `key`.

        The value goes to a temporary file first and is renamed over the target,
        so a reader sees either the old or the new value, never a partial one.
        """
        path = self._path(key)
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
            return True
        except OSError as e:
            logger.error("Failed to write %s: %s", key, e)
            try:
                tmp.unlink()
            except OSError:
                pass
            return False

    def remove(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error("Failed to remove %s: %s", key, e)
            return False
