"""Storage - flat-file JSON stores and domain models"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from sentwatch.observability.logging import get_logger

logger = get_logger(__name__)


class StorePersistenceError(OSError):
    """Raised when a store cannot write its record to disk."""


class JsonFileStore:
    """Base class for stores that keep one whole JSON document per file.

    Every write replaces the full document: the new content goes to a temp
    file in the same directory and is moved over the old one with os.replace,
    so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def read_json(self, default: Any) -> Any:
        """
        Read the stored document.

        Returns `default` when the file does not exist or cannot be parsed;
        read failures are logged, never raised.
        """
        if not self.path.exists():
            return default
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as e:
            logger.error("Error loading %s: %s", self.path.name, e)
            return default

    def write_json(self, data: Any, indent: int | None = 2) -> None:
        """
        Replace the stored document.

        Raises:
            StorePersistenceError: If the directory or file cannot be written

        Side Effects:
            - Creates the parent directory if missing
            - Writes a temp file next to the target, then renames it over the target
        """
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=indent)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving %s: %s", self.path.name, e)
            raise StorePersistenceError(f"Failed to write {self.path}: {e}") from e
        finally:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)


__all__ = ["JsonFileStore", "StorePersistenceError"]
