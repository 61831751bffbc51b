"""File storage — persists JSON documents under the project's .protobooth directory."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Protocol

from protobooth.errors import StorageError, StorageNotFoundError

logger = logging.getLogger(__name__)

STORAGE_DIR_NAME = ".protobooth"


class StoragePort(Protocol):
    """Read/write/exists over named documents."""

    def read_text(self, name: str) -> str: ...

    def write_text(self, name: str, content: str) -> None: ...

    def exists(self, name: str) -> bool: ...

    def ensure_dir(self, name: str) -> None: ...

    def remove(self, name: str) -> None: ...


class FileStorage:
    """Local-disk storage.

    Relative names resolve under ``storage_dir``; absolute names are used
    unchanged, so the same port can check project paths and create output
    directories.
    """

    def __init__(self, storage_dir: str | Path):
        self.storage_dir = Path(storage_dir)

    @classmethod
    def for_project(cls, project_root: str | Path) -> "FileStorage":
        return cls(Path(project_root) / STORAGE_DIR_NAME)

    def resolve(self, name: str) -> Path:
        return self.storage_dir / name

    def read_text(self, name: str) -> str:
        path = self.resolve(name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"File not found: {name}") from e
        except UnicodeDecodeError as e:
            raise StorageError(f"File is not valid UTF-8: {name}") from e
        except OSError as e:
            raise StorageError(f"Failed to read file: {name}") from e

    def write_text(self, name: str, content: str) -> None:
        path = self.resolve(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write file: {name}") from e
        logger.debug("Wrote %s (%d bytes)", path, len(content))

    def exists(self, name: str) -> bool:
        return self.resolve(name).exists()

    def ensure_dir(self, name: str) -> None:
        try:
            self.resolve(name).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create directory: {name}") from e

    def remove(self, name: str) -> None:
        path = self.resolve(name)
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove: {name}") from e
