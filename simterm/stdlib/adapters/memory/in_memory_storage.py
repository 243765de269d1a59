"""In-memory implementation of the persistence port."""

from __future__ import annotations

import copy
from typing import Any

from simterm.kernel.exceptions import PersistenceError

__all__ = ["InMemoryStorage"]


class InMemoryStorage:
    """Persistence adapter that keeps the value in process memory.

    Features:
    - Deep-copies on save and load so callers cannot alias stored state
    - Save/load counters for assertions in tests
    - Failure injection via ``fail_on_load`` / ``fail_on_save``
    """

    def __init__(
        self,
        name: str = "memory",
        initial: Any | None = None,
        *,
        fail_on_load: bool = False,
        fail_on_save: bool = False,
    ) -> None:
        """Initialize the store.

        Parameters
        ----------
        name : str
            Identifier used in logs and errors
        initial : Any | None
            Value returned by the first ``load``
        fail_on_load, fail_on_save : bool
            Raise :class:`PersistenceError` from the corresponding call
        """
        self._name = name
        self._value: Any | None = copy.deepcopy(initial)
        self.fail_on_load = fail_on_load
        self.fail_on_save = fail_on_save
        self.load_count = 0
        self.save_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> Any | None:
        """The raw stored value, without copying."""
        return self._value

    def load(self) -> Any | None:
        self.load_count += 1
        if self.fail_on_load:
            raise PersistenceError(self._name, "simulated load failure")
        return copy.deepcopy(self._value)

    def save(self, value: Any) -> None:
        self.save_count += 1
        if self.fail_on_save:
            raise PersistenceError(self._name, "simulated save failure")
        self._value = copy.deepcopy(value)

    def clear(self) -> None:
        self._value = None
