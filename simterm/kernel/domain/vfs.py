"""Domain models for the virtual filesystem."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from simterm.kernel.domain.base import CamelModel
from simterm.kernel.utils.time import new_id, now_ms

DIRECTORY_SIZE = 4096
DIRECTORY_PERMISSIONS = "drwxr-xr-x"
FILE_PERMISSIONS = "-rw-r--r--"
SYMLINK_PERMISSIONS = "lrwxrwxrwx"
DEFAULT_OWNER = "developer"
DEFAULT_GROUP = "developers"

_MIME_TYPES: dict[str, str] = {
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".ts": "application/typescript",
    ".tsx": "application/typescript",
    ".jsx": "application/javascript",
    ".json": "application/json",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".md": "text/markdown",
    ".txt": "text/plain",
    ".py": "text/x-python",
    ".xml": "application/xml",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".yml": "application/yaml",
    ".yaml": "application/yaml",
    ".sh": "application/x-sh",
}


class EntryKind(StrEnum):
    """Type of a VFS entry."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


class VirtualEntry(CamelModel):
    """A file, directory or symlink in the virtual filesystem.

    Attributes
    ----------
    name : str
        Basename of the entry (``"/"`` for the root).
    kind : EntryKind
        File, directory or symlink.
    content : str | None
        File body, or the link target for symlinks. Always None for directories.
    size : int
        Content length for files, 4096 for directories.
    parent_path : str | None
        Absolute path of the containing directory; None for the root.
    child_paths : list[str] | None
        Absolute paths of direct children; only set on directories.
    """

    id: str = Field(default_factory=lambda: new_id("vfs"))
    name: str
    kind: EntryKind
    content: str | None = None
    size: int = 0
    permissions: str = FILE_PERMISSIONS
    owner: str = DEFAULT_OWNER
    group: str = DEFAULT_GROUP
    created_at: int = Field(default_factory=now_ms)
    modified_at: int = Field(default_factory=now_ms)
    accessed_at: int = Field(default_factory=now_ms)
    parent_path: str | None = None
    child_paths: list[str] | None = None
    mime_type: str | None = None

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


def mime_type_for(name: str) -> str:
    """Guess a MIME type from a file name's extension.

    >>> mime_type_for("index.ts")
    'application/typescript'
    >>> mime_type_for("LICENSE")
    'text/plain'
    """
    dot = name.rfind(".")
    if dot <= 0:
        return "text/plain"
    return _MIME_TYPES.get(name[dot:].lower(), "text/plain")


__all__ = [
    "DIRECTORY_PERMISSIONS",
    "DIRECTORY_SIZE",
    "EntryKind",
    "FILE_PERMISSIONS",
    "VirtualEntry",
    "mime_type_for",
]
