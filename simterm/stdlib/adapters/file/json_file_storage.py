"""File-backed persistence adapter storing one JSON document per store.

Writes go to a sibling temporary file first and are then renamed over the
target, so a crash mid-write leaves the previous document intact.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from simterm.kernel.exceptions import PersistenceError
from simterm.kernel.logging import get_logger

logger = get_logger(__name__)


class JsonFileStorage:
    """Persistence adapter backed by a single JSON file.

    Parameters
    ----------
    path : str | Path
        Location of the JSON document
    create_dirs : bool, default=True
        Create the parent directory on first save
    indent : int | None, default=2
        JSON indentation; None writes compact output

    Examples
    --------
    Example usage::

        durable = JsonFileStorage("~/.simterm/history.json")
        durable.save([{"command": "ls", "timestampMs": 0}])
        entries = durable.load()
    """

    def __init__(
        self,
        path: str | Path,
        create_dirs: bool = True,
        indent: int | None = 2,
    ) -> None:
        self.path = Path(path).expanduser()
        self.create_dirs = create_dirs
        self.indent = indent

    @property
    def name(self) -> str:
        return str(self.path)

    def load(self) -> Any | None:
        """Read and decode the document.

        Returns
        -------
        Any | None
            Decoded JSON value, or None if the file does not exist.

        Raises
        ------
        PersistenceError
            If the file exists but cannot be read, is not UTF-8 or is not valid JSON.
        """
        if not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise PersistenceError(self.name, f"not valid UTF-8: {e.reason}") from e
        except OSError as e:
            raise PersistenceError(self.name, f"read failed: {e}") from e
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise PersistenceError(self.name, f"invalid JSON: {e}") from e

    def save(self, value: Any) -> None:
        """Serialize and atomically replace the document.

        Raises
        ------
        PersistenceError
            If the value is not JSON-serializable or the write fails.
        """
        try:
            payload = json.dumps(value, indent=self.indent, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceError(self.name, f"value is not JSON-serializable: {e}") from e

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            if self.create_dirs:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(self.name, f"write failed: {e}") from e
        logger.trace("Saved {path}", path=self.path)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(self.name, f"delete failed: {e}") from e


__all__ = ["JsonFileStorage"]
