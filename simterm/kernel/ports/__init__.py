"""Ports: the interfaces the engine depends on, implemented by adapters and drivers."""

from simterm.kernel.ports.ai import AIEnhancer
from simterm.kernel.ports.storage import PersistencePort
from simterm.kernel.ports.vfs import VFS

__all__ = ["AIEnhancer", "PersistencePort", "VFS"]
