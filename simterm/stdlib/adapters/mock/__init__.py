"""Mock adapters for testing and offline use."""

from simterm.stdlib.adapters.mock.mock_ai import MockAIEnhancer

__all__ = ["MockAIEnhancer"]
