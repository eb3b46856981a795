"""Tests for Application."""

import pytest

from chatagent.app import Application
from chatagent.runtime import AgentRuntime


@pytest.fixture(autouse=True)
def _no_context_logs(monkeypatch):
    monkeypatch.setenv("CONTEXT_LOGGING", "0")


class TestApplicationStart:
    """Tests for Application.start()."""

    async def test_start_initializes_components(self, mock_llm):
        app = Application(db_path=":memory:", llm_provider=mock_llm)
        await app.start()

        assert app._storage is not None
        assert isinstance(app._runtime, AgentRuntime)
        assert app._runtime.database_adapter is app._storage
        assert [a.name for a in app.runtime.actions] == ["CONTINUE", "IGNORE", "NONE"]
        assert app.runtime.context_log_dir is None

        await app.stop()

    async def test_start_reads_agent_settings(self, mock_llm, monkeypatch):
        monkeypatch.setenv("AGENT_ID", "agent-xyz")
        monkeypatch.setenv("AGENT_NAME", "Eliza")
        app = Application(db_path=":memory:", llm_provider=mock_llm)
        await app.start()

        assert app.runtime.agent_id == "agent-xyz"
        assert app.runtime.agent_name == "Eliza"

        await app.stop()

    async def test_start_without_api_key_fails(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        app = Application(db_path=":memory:")

        with pytest.raises(ValueError):
            await app.start()
        await app.stop()


class TestApplicationStop:
    """Tests for Application.stop()."""

    async def test_stop_closes_storage(self, mock_llm):
        app = Application(db_path=":memory:", llm_provider=mock_llm)
        await app.start()
        await app.stop()

        assert app._storage._conn is None
        with pytest.raises(RuntimeError, match="not started"):
            _ = app.runtime


class TestApplicationReset:
    """Tests for Application.reset()."""

    async def test_reset_clears_storage(self, mock_llm):
        from conftest import ROOM_ID, make_memory

        app = Application(db_path=":memory:", llm_provider=mock_llm)
        await app.start()
        await app.runtime.handle_message(make_memory("u1", "Hello"))
        assert await app.storage.count_memories(ROOM_ID) == 2

        await app.reset()

        assert await app.storage.count_memories(ROOM_ID) == 0
        await app.stop()


class TestApplicationProperties:
    """Tests for Application properties."""

    def test_storage_property_raises_when_not_started(self):
        app = Application(db_path=":memory:")
        with pytest.raises(RuntimeError, match="not started"):
            _ = app.storage

    def test_runtime_property_raises_when_not_started(self):
        app = Application(db_path=":memory:")
        with pytest.raises(RuntimeError, match="not started"):
            _ = app.runtime
