"""In-memory adapters."""

from simterm.stdlib.adapters.memory.in_memory_storage import InMemoryStorage

__all__ = ["InMemoryStorage"]
