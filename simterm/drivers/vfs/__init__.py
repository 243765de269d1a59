"""VFS drivers."""

from simterm.drivers.vfs.memory import InMemoryVFS, normalize_path

__all__ = ["InMemoryVFS", "normalize_path"]
