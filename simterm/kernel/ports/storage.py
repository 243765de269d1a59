"""Persistence port — load/save of a single serialized value.

The history store keeps two of these (a durable one and a per-session one)
and the terminal facade can keep one for sessions. Adapters decide where the
bytes live; callers only ever see plain JSON-compatible Python values.

Adapters
--------
- ``InMemoryStorage`` — process-lifetime dict, the default and the test double.
- ``JsonFileStorage`` — one JSON document per store on the local disk.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class PersistencePort(Protocol[T]):
    """Whole-value storage for one named document."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable identifier used in logs and errors."""
        ...

    @abstractmethod
    def load(self) -> T | None:
        """Return the stored value, or None if nothing has been saved yet.

        Raises
        ------
        PersistenceError
            If the backing store exists but cannot be read or decoded.
        """
        ...

    @abstractmethod
    def save(self, value: T) -> None:
        """Replace the stored value.

        Raises
        ------
        PersistenceError
            If the value cannot be written.
        """
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored value; a subsequent ``load`` returns None."""
        ...
