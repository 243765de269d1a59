"""Bounded caching utilities for hot-path lookups.

Examples
--------
Module-level FIFO cache::

    from simterm.kernel.utils.caching import FIFOCache

    _token_cache: FIFOCache[list[SyntaxToken]] = FIFOCache(maxsize=100)
    tokens = _token_cache.get_or_create(("python", code), lambda: tokenize(code))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable


V = TypeVar("V")


class FIFOCache(Generic[V]):
    """Dict-backed cache with get-or-create semantics and FIFO eviction.

    When full, inserting a new key evicts the oldest inserted key. Reads do
    not refresh an entry's position. ``maxsize=0`` disables caching.

    Examples
    --------
    >>> cache: FIFOCache[int] = FIFOCache(maxsize=2)
    >>> cache.get_or_create("a", lambda: 1)
    1
    >>> cache.put("b", 2)
    >>> cache.put("c", 3)
    >>> "a" in cache
    False
    >>> len(cache)
    2
    """

    __slots__ = ("_maxsize", "_store")

    def __init__(self, maxsize: int = 128) -> None:
        if maxsize < 0:
            raise ValueError(f"maxsize must be >= 0, got {maxsize}")
        self._maxsize = maxsize
        self._store: dict[Hashable, V] = {}

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def get_or_create(self, key: Hashable, factory: Callable[[], V]) -> V:
        """Return cached value or create via factory and cache it.

        Parameters
        ----------
        key : Hashable
            Cache key.
        factory : Callable[[], V]
            Zero-argument callable that creates the value on cache miss.
        """
        try:
            return self._store[key]
        except KeyError:
            value = factory()
            self.put(key, value)
            return value

    def get(self, key: Hashable) -> V | None:
        """Return cached value or None."""
        return self._store.get(key)

    def put(self, key: Hashable, value: V) -> None:
        """Store a value, evicting the oldest entry if the cache is full."""
        if self._maxsize == 0:
            return
        if key not in self._store:
            while len(self._store) >= self._maxsize:
                del self._store[next(iter(self._store))]
        self._store[key] = value

    def clear(self) -> None:
        """Remove all cached entries."""
        self._store.clear()

    def keys(self) -> list[Any]:
        """Keys in insertion order, oldest first."""
        return list(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._store
