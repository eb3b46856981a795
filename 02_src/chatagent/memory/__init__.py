"""Memory module."""

from .manager import EMBEDDING_ZERO_VECTOR, IMemoryManager, MemoryManager

__all__ = ["EMBEDDING_ZERO_VECTOR", "IMemoryManager", "MemoryManager"]
