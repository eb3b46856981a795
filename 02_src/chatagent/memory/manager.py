"""MemoryManager: room-scoped conversation memory on top of Storage."""

from typing import Protocol

from ..logging_config import get_logger
from ..models import Memory
from ..storage import IStorage

logger = get_logger(__name__)

EMBEDDING_DIMENSION = 1536
EMBEDDING_ZERO_VECTOR: list[float] = [0.0] * EMBEDDING_DIMENSION


class IMemoryManager(Protocol):
    """Reads and writes the conversation memories of rooms."""

    async def get_memories(
        self, room_id: str, count: int = 10, unique: bool = True
    ) -> list[Memory]:
        """Most recent memories of a room, newest first."""
        ...

    async def create_memory(self, memory: Memory, unique: bool = False) -> Memory:
        """Persist a memory."""
        ...

    async def count_memories(self, room_id: str, unique: bool = True) -> int:
        """Count memories of a room."""
        ...

    async def remove_memory(self, memory_id: str) -> None:
        """Delete one memory."""
        ...

    async def remove_all_memories(self, room_id: str) -> None:
        """Delete every memory of a room."""
        ...


class MemoryManager:
    """Conversation memory backed by IStorage."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def get_memories(
        self, room_id: str, count: int = 10, unique: bool = True
    ) -> list[Memory]:
        return await self._storage.get_memories(room_id, count=count, unique=unique)

    async def create_memory(self, memory: Memory, unique: bool = False) -> Memory:
        """
        Persist a memory.

        With unique=True the memory is flagged unique unless the same author
        already said the same (normalized) text in the room. Writing a memory
        id that is already stored is a no-op.
        """
        if not memory.embedding:
            memory.embedding = list(EMBEDDING_ZERO_VECTOR)

        if unique:
            existing = await self._storage.find_memory(
                memory.room_id, memory.user_id, memory.content.text
            )
            memory.unique = existing is None or existing.id == memory.id

        inserted = await self._storage.save_memory(memory)
        if not inserted:
            logger.debug("Memory %s already stored, skipping", memory.id)
        return memory

    async def count_memories(self, room_id: str, unique: bool = True) -> int:
        return await self._storage.count_memories(room_id, unique=unique)

    async def remove_memory(self, memory_id: str) -> None:
        await self._storage.remove_memory(memory_id)

    async def remove_all_memories(self, room_id: str) -> None:
        await self._storage.remove_all_memories(room_id)
