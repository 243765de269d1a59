"""Adapters implementing kernel ports."""

from simterm.stdlib.adapters.file import JsonFileStorage
from simterm.stdlib.adapters.memory import InMemoryStorage
from simterm.stdlib.adapters.mock import MockAIEnhancer

__all__ = ["InMemoryStorage", "JsonFileStorage", "MockAIEnhancer"]
