"""Storage module."""

from .storage import IStorage, Storage, normalize_text

__all__ = ["IStorage", "Storage", "normalize_text"]
