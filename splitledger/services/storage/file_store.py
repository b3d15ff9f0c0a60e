"""
File-backed Key/Value Store

Each key is one file inside a data directory. Writes go to a temporary
file first and are moved into place with os.replace, so a crash mid-write
leaves the previous snapshot intact.

TRADEOFFS:
- One writer only (no file locking)
- Keys must be plain names; anything else is rejected
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from splitledger.services.storage.interface import KeyValueStore, PersistenceError


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileKeyValueStore(KeyValueStore):
    """
    Stores each value as `<data_dir>/<key>.json`.

    The directory is created on first write.
    """

    def __init__(self, data_dir: Union[str, Path], suffix: str = ".json"):
        self._data_dir = Path(data_dir)
        self._suffix = suffix

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        """Map a key to its file, refusing anything that could escape the directory."""
        if not _KEY_PATTERN.match(key) or key in {".", ".."}:
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{self._suffix}"

    def get(self, key: str) -> Optional[bytes]:
        """Read a key's file; a missing file means the key was never written."""
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: bytes) -> None:
        """Atomically replace a key's file."""
        path = self._path_for(key)
        tmp_name = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "wb") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Failed to write {path}: {e}") from e
