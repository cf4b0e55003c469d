"""
Key-value storage collaborators for the persisted log.

The repository only needs whole-value `get`/`set` of an opaque string under a
fixed key. `FileStorage` keeps one file per key and replaces it atomically, so
a reader never sees a partial write.
"""

import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

from healthlog.errors import StorageUnavailable

logger = structlog.get_logger(__name__)


class StorageBackend(Protocol):
    """Whole-value key-value store. `get` returns None for an absent key."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryStorage:
    """Process-local storage, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class FileStorage:
    """
    Stores each key as `<directory>/<key>.json`.

    Writes go to a temporary file in the same directory which is then moved
    over the target with `os.replace`.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory).expanduser()
        self.logger = logger.bind(component="file_storage", directory=str(self.directory))

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            self.logger.error("storage_read_failed", key=key, error=str(e))
            raise StorageUnavailable(f"Cannot read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_name: str | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.directory,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(value)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            self.logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageUnavailable(f"Cannot write {path}: {e}") from e

        self.logger.debug("storage_written", key=key, size=len(value))
