"""Pytest configuration and fixtures."""

import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

AGENT_ID = "agent-0001"
AGENT_NAME = "Ada"
ROOM_ID = "room1"
BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_memory(
    user_id: str,
    text: str,
    action: str | None = None,
    minute: int = 0,
    room_id: str = ROOM_ID,
    memory_id: str | None = None,
):
    """Build a Memory at BASE_TIME + minute."""
    from chatagent.models import Content, Memory

    return Memory(
        id=memory_id or f"{user_id}-{minute}",
        user_id=user_id,
        room_id=room_id,
        content=Content(text=text, action=action),
        created_at=BASE_TIME + timedelta(minutes=minute),
    )


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from chatagent.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def mock_llm():
    """Create mock LLM provider."""
    llm = Mock()
    llm.complete = AsyncMock(return_value='```json\n{"user": "Ada", "text": "Test response"}\n```')
    return llm


@pytest.fixture
def runtime(storage, mock_llm, tmp_path):
    """Create AgentRuntime with the built-in actions."""
    from chatagent.actions import DEFAULT_ACTIONS
    from chatagent.runtime import AgentRuntime

    return AgentRuntime(
        agent_id=AGENT_ID,
        agent_name=AGENT_NAME,
        llm_provider=mock_llm,
        storage=storage,
        actions=DEFAULT_ACTIONS,
        context_log_dir=tmp_path / "contexts",
        rng=random.Random(7),
    )


@pytest.fixture
def collected():
    """Async callback that records delivered content."""
    delivered = []

    async def callback(content):
        delivered.append(content)

    callback.delivered = delivered
    return callback
