"""VFS port — the virtual filesystem command handlers operate on.

Entries are addressed by normalized absolute POSIX paths. Every operation
is synchronous and O(1) in the number of entries except listing, walks
and the tree operations.

Drivers
-------
- ``InMemoryVFS`` — dict-backed, the only driver; nothing touches real disk.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from simterm.kernel.domain.vfs import EntryKind, VirtualEntry


@runtime_checkable
class VFS(Protocol):
    """Path-addressed in-memory filesystem."""

    @abstractmethod
    def get(self, path: str) -> VirtualEntry | None:
        """Return the entry at ``path`` (refreshing its access time) or None."""
        ...

    @abstractmethod
    def exists(self, path: str) -> bool:
        """True if an entry exists at ``path``; does not touch access time."""
        ...

    @abstractmethod
    def create(
        self,
        path: str,
        kind: EntryKind,
        content: str | None = None,
        *,
        overwrite: bool = False,
    ) -> VirtualEntry:
        """Create an entry and link it into its parent directory.

        Raises
        ------
        VFSError
            If the path already exists (and ``overwrite`` is False) or the
            parent does not exist or is not a directory.
        """
        ...

    @abstractmethod
    def update(self, path: str, content: str) -> bool:
        """Replace a file's content. Returns False for missing paths and non-files."""
        ...

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Shallow delete. Returns False if nothing existed at ``path``."""
        ...

    @abstractmethod
    def list(self, dir_path: str) -> list[VirtualEntry]:
        """Direct children of a directory, in insertion order.

        Raises
        ------
        VFSError
            If ``dir_path`` is missing or not a directory.
        """
        ...

    @abstractmethod
    def walk(self, root: str) -> Iterator[VirtualEntry]:
        """Depth-first traversal starting at (and including) ``root``."""
        ...

    @abstractmethod
    def paths(self) -> list[str]:
        """Every path currently present."""
        ...

    # ------------------------------------------------------------------
    # Tree operations
    # ------------------------------------------------------------------

    @abstractmethod
    def path_of(self, entry: VirtualEntry) -> str:
        """Absolute path of an entry returned by this VFS."""
        ...

    @abstractmethod
    def makedirs(self, path: str) -> VirtualEntry:
        """Create a directory and any missing parents."""
        ...

    @abstractmethod
    def remove_tree(self, path: str) -> int:
        """Recursive delete. Returns the number of entries removed."""
        ...

    @abstractmethod
    def copy(self, src: str, dst: str) -> VirtualEntry:
        """Copy a file or directory tree to a path that does not exist yet."""
        ...

    @abstractmethod
    def move(self, src: str, dst: str) -> VirtualEntry:
        """Rename an entry, carrying a directory's children along."""
        ...
