"""Tests for MemoryManager."""

from chatagent.memory import EMBEDDING_ZERO_VECTOR, MemoryManager
from conftest import ROOM_ID, make_memory


class TestMemoryManager:
    """Tests for MemoryManager.create_memory() and reads."""

    async def test_create_memory_fills_zero_embedding(self, storage):
        manager = MemoryManager(storage)
        memory = await manager.create_memory(make_memory("u1", "hi"))

        assert memory.embedding == EMBEDDING_ZERO_VECTOR
        assert len(EMBEDDING_ZERO_VECTOR) == 1536

    async def test_create_unique_memory(self, storage):
        manager = MemoryManager(storage)
        first = await manager.create_memory(make_memory("u1", "hi", minute=0), unique=True)
        repeat = await manager.create_memory(make_memory("u1", "Hi ", minute=1), unique=True)
        other_user = await manager.create_memory(make_memory("u2", "hi", minute=2), unique=True)

        assert first.unique is True
        assert repeat.unique is False
        assert other_user.unique is True
        assert await manager.count_memories(ROOM_ID, unique=True) == 2
        assert await manager.count_memories(ROOM_ID, unique=False) == 3

    async def test_create_memory_twice_is_noop(self, storage):
        manager = MemoryManager(storage)
        memory = make_memory("u1", "hi")
        await manager.create_memory(memory, unique=True)
        again = await manager.create_memory(memory, unique=True)

        assert again.unique is True
        assert await manager.count_memories(ROOM_ID, unique=False) == 1

    async def test_get_memories_defaults_to_unique(self, storage):
        manager = MemoryManager(storage)
        await manager.create_memory(make_memory("u1", "unique one", minute=0), unique=True)
        await manager.create_memory(make_memory("u1", "plain", minute=1))

        unique = await manager.get_memories(ROOM_ID)
        everything = await manager.get_memories(ROOM_ID, unique=False)
        assert [m.content.text for m in unique] == ["unique one"]
        assert [m.content.text for m in everything] == ["plain", "unique one"]

    async def test_remove(self, storage):
        manager = MemoryManager(storage)
        await manager.create_memory(make_memory("u1", "a", minute=0))
        await manager.create_memory(make_memory("u1", "b", minute=1))

        await manager.remove_memory("u1-0")
        assert await manager.count_memories(ROOM_ID, unique=False) == 1
        await manager.remove_all_memories(ROOM_ID)
        assert await manager.count_memories(ROOM_ID, unique=False) == 0
