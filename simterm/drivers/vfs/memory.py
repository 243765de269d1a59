"""In-memory VFS driver.

Entries live in a single dict keyed by normalized absolute path, so lookups
are O(1). Directories keep the ordered list of their children's paths.

Example
-------
.. code-block:: python

    vfs = InMemoryVFS()
    vfs.create("/notes", EntryKind.DIRECTORY)
    vfs.create("/notes/todo.txt", EntryKind.FILE, "buy milk")

    entry = vfs.get("/notes/todo.txt")
    names = [child.name for child in vfs.list("/notes")]
"""

from __future__ import annotations

import json
import posixpath
from typing import TYPE_CHECKING

from simterm.kernel.domain.vfs import (
    DIRECTORY_PERMISSIONS,
    DIRECTORY_SIZE,
    FILE_PERMISSIONS,
    SYMLINK_PERMISSIONS,
    EntryKind,
    VirtualEntry,
    mime_type_for,
)
from simterm.kernel.exceptions import VFSError
from simterm.kernel.logging import get_logger
from simterm.kernel.utils.time import now_ms

if TYPE_CHECKING:
    from collections.abc import Iterator

    from simterm.kernel.utils.time import Clock

logger = get_logger(__name__)

ROOT = "/"

_README = """# Welcome to the terminal

This is a simulated workspace. Try:

- `ls -la` to look around
- `cat package.json` to read a file
- `help` to list every command
"""

_PACKAGE_JSON = {
    "name": "my-project",
    "version": "1.0.0",
    "description": "A simulated project",
    "main": "src/index.js",
    "scripts": {
        "dev": "vite",
        "build": "vite build",
        "test": "jest",
        "lint": "eslint src",
    },
    "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"},
    "devDependencies": {"vite": "^5.0.0", "jest": "^29.7.0", "eslint": "^8.56.0"},
}

_INDEX_JS = """import { greet } from './utils.js';

console.log(greet('world'));
"""

_UTILS_JS = """export function greet(name) {
  return `Hello, ${name}!`;
}
"""


def normalize_path(path: str, cwd: str = ROOT, home: str | None = None) -> str:
    """Resolve ``path`` against ``cwd`` into a normalized absolute path.

    ``~`` expands to ``home`` when given. ``.`` and ``..`` segments are
    collapsed; ``..`` never climbs above the root.

    >>> normalize_path("../b", "/a/x")
    '/a/b'
    >>> normalize_path("~/src", "/", home="/home/dev")
    '/home/dev/src'
    >>> normalize_path("/../..")
    '/'
    """
    if home is not None and (path == "~" or path.startswith("~/")):
        path = home + path[1:]
    if not path.startswith("/"):
        path = posixpath.join(cwd or ROOT, path)
    normalized = posixpath.normpath(path)
    # POSIX keeps a leading "//" as implementation-defined; collapse it
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


class InMemoryVFS:
    """Dict-backed virtual filesystem.

    Parameters
    ----------
    clock : Clock | None
        Millisecond clock used for timestamps; defaults to wall-clock time.
    owner : str
        Owner recorded on new entries.
    """

    def __init__(self, clock: Clock | None = None, owner: str = "developer") -> None:
        self._clock = clock or now_ms
        self._owner = owner
        self._entries: dict[str, VirtualEntry] = {}
        now = self._clock()
        self._entries[ROOT] = VirtualEntry(
            name=ROOT,
            kind=EntryKind.DIRECTORY,
            size=DIRECTORY_SIZE,
            permissions=DIRECTORY_PERMISSIONS,
            owner="root",
            group="root",
            created_at=now,
            modified_at=now,
            accessed_at=now,
            child_paths=[],
        )

    @classmethod
    def with_defaults(cls, user: str = "developer", clock: Clock | None = None) -> InMemoryVFS:
        """Create a VFS seeded with a small sample project under ``/home/<user>``."""
        vfs = cls(clock=clock, owner=user)
        home = f"/home/{user}"
        vfs.makedirs(home)
        vfs.create(f"{home}/README.md", EntryKind.FILE, _README)
        vfs.create(f"{home}/package.json", EntryKind.FILE, json.dumps(_PACKAGE_JSON, indent=2))
        vfs.create(f"{home}/src", EntryKind.DIRECTORY)
        vfs.create(f"{home}/src/index.js", EntryKind.FILE, _INDEX_JS)
        vfs.create(f"{home}/src/utils.js", EntryKind.FILE, _UTILS_JS)
        vfs.create(f"{home}/projects", EntryKind.DIRECTORY)
        vfs.create(f"{home}/node_modules", EntryKind.DIRECTORY)
        for path in ("/tmp", "/usr", "/usr/bin", "/etc"):
            vfs.makedirs(path)
        vfs.create("/etc/hostname", EntryKind.FILE, "terminal\n")
        return vfs

    # ------------------------------------------------------------------
    # Port operations
    # ------------------------------------------------------------------

    def get(self, path: str) -> VirtualEntry | None:
        entry = self._entries.get(normalize_path(path))
        if entry is not None:
            entry.accessed_at = self._clock()
        return entry

    def exists(self, path: str) -> bool:
        return normalize_path(path) in self._entries

    def create(
        self,
        path: str,
        kind: EntryKind,
        content: str | None = None,
        *,
        overwrite: bool = False,
    ) -> VirtualEntry:
        path = normalize_path(path)
        if path == ROOT:
            raise VFSError(path, "cannot create the root directory")

        existing = self._entries.get(path)
        if existing is not None:
            if not overwrite:
                raise VFSError(path, "already exists")
            if existing.is_directory or kind is EntryKind.DIRECTORY:
                raise VFSError(path, "cannot overwrite a directory or replace a file with one")

        parent_path = posixpath.dirname(path)
        parent = self._entries.get(parent_path)
        if parent is None:
            raise VFSError(path, f"parent directory '{parent_path}' does not exist")
        if not parent.is_directory:
            raise VFSError(path, f"'{parent_path}' is not a directory")

        now = self._clock()
        name = posixpath.basename(path)
        if kind is EntryKind.DIRECTORY:
            entry = VirtualEntry(
                name=name,
                kind=kind,
                size=DIRECTORY_SIZE,
                permissions=DIRECTORY_PERMISSIONS,
                owner=self._owner,
                created_at=now,
                modified_at=now,
                accessed_at=now,
                parent_path=parent_path,
                child_paths=[],
            )
        else:
            body = content or ""
            entry = VirtualEntry(
                name=name,
                kind=kind,
                content=body,
                size=len(body),
                permissions=SYMLINK_PERMISSIONS if kind is EntryKind.SYMLINK else FILE_PERMISSIONS,
                owner=self._owner,
                created_at=existing.created_at if existing else now,
                modified_at=now,
                accessed_at=now,
                parent_path=parent_path,
                mime_type=mime_type_for(name) if kind is EntryKind.FILE else None,
            )

        self._entries[path] = entry
        children = parent.child_paths if parent.child_paths is not None else []
        if path not in children:
            children.append(path)
        parent.child_paths = children
        parent.modified_at = now
        logger.trace("Created {kind} {path}", kind=kind, path=path)
        return entry

    def update(self, path: str, content: str) -> bool:
        entry = self._entries.get(normalize_path(path))
        if entry is None or not entry.is_file:
            return False
        now = self._clock()
        entry.content = content
        entry.size = len(content)
        entry.modified_at = now
        entry.accessed_at = now
        return True

    def delete(self, path: str) -> bool:
        path = normalize_path(path)
        if path == ROOT:
            raise VFSError(path, "cannot delete the root directory")
        entry = self._entries.pop(path, None)
        if entry is None:
            return False
        parent = self._entries.get(entry.parent_path or ROOT)
        if parent is not None and parent.child_paths is not None:
            if path in parent.child_paths:
                parent.child_paths.remove(path)
            parent.modified_at = self._clock()
        return True

    def list(self, dir_path: str) -> list[VirtualEntry]:
        dir_path = normalize_path(dir_path)
        entry = self._entries.get(dir_path)
        if entry is None:
            raise VFSError(dir_path, "no such file or directory")
        if not entry.is_directory:
            raise VFSError(dir_path, "not a directory")
        entry.accessed_at = self._clock()
        return [self._entries[child] for child in entry.child_paths or [] if child in self._entries]

    def walk(self, root: str) -> Iterator[VirtualEntry]:
        root = normalize_path(root)
        entry = self._entries.get(root)
        if entry is None:
            return
        stack = [root]
        while stack:
            current_path = stack.pop()
            current = self._entries.get(current_path)
            if current is None:
                continue
            yield current
            if current.child_paths:
                stack.extend(reversed(current.child_paths))

    def paths(self) -> list[str]:
        return list(self._entries)

    # ------------------------------------------------------------------
    # Conveniences built on the port operations
    # ------------------------------------------------------------------

    def path_of(self, entry: VirtualEntry) -> str:
        """Absolute path of an entry returned by this VFS."""
        if entry.parent_path is None:
            return ROOT
        return posixpath.join(entry.parent_path, entry.name)

    def makedirs(self, path: str) -> VirtualEntry:
        """Create ``path`` and any missing parents (``mkdir -p``)."""
        path = normalize_path(path)
        current = ROOT
        for part in [segment for segment in path.split("/") if segment]:
            current = posixpath.join(current, part)
            entry = self._entries.get(current)
            if entry is None:
                self.create(current, EntryKind.DIRECTORY)
            elif not entry.is_directory:
                raise VFSError(current, "not a directory")
        return self._entries[path]

    def remove_tree(self, path: str) -> int:
        """Delete ``path`` and everything beneath it. Returns the number removed."""
        path = normalize_path(path)
        doomed = [self.path_of(entry) for entry in self.walk(path)]
        for doomed_path in reversed(doomed):
            self.delete(doomed_path)
        return len(doomed)

    def copy(self, src: str, dst: str) -> VirtualEntry:
        """Copy a file or a directory tree to ``dst`` (which must not exist)."""
        src, dst = normalize_path(src), normalize_path(dst)
        source = self._entries.get(src)
        if source is None:
            raise VFSError(src, "no such file or directory")
        if dst == src or dst.startswith(src.rstrip("/") + "/"):
            raise VFSError(dst, "cannot copy a directory into itself")
        if source.is_directory:
            created = self.create(dst, EntryKind.DIRECTORY)
            for child_path in list(source.child_paths or []):
                self.copy(child_path, posixpath.join(dst, posixpath.basename(child_path)))
            return created
        return self.create(dst, source.kind, source.content)

    def move(self, src: str, dst: str) -> VirtualEntry:
        """Move (rename) an entry. Directory trees move with their children."""
        src, dst = normalize_path(src), normalize_path(dst)
        moved = self.copy(src, dst)
        self.remove_tree(src)
        return moved

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.exists(path)


__all__ = ["InMemoryVFS", "normalize_path"]
