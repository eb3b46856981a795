"""Application bootstrap and lifecycle management."""

import os
from typing import Protocol

from . import config
from .actions import DEFAULT_ACTIONS
from .config import resolve_db_path
from .llm import ILLMProvider, LLMProvider
from .logging_config import get_logger
from .runtime import AgentRuntime
from .storage import IStorage, Storage

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset data between test runs."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        db_path: str | None = None,
        llm_provider: ILLMProvider | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._llm: ILLMProvider | None = llm_provider
        self._runtime: AgentRuntime | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. LLMProvider (no internal dependencies)
        if self._llm is None:
            self._llm = LLMProvider(model=config.llm_model())
        logger.info("LLM provider initialized")

        # 3. AgentRuntime (depends on Storage + LLM)
        self._runtime = AgentRuntime(
            agent_id=config.agent_id(),
            agent_name=config.agent_name(),
            llm_provider=self._llm,
            storage=self._storage,
            actions=DEFAULT_ACTIONS,
            context_log_dir=config.context_log_dir(),
            max_action_chain=config.max_action_chain(),
        )
        logger.info(
            "AgentRuntime started with actions: %s",
            ", ".join(a.name for a in self._runtime.actions),
        )

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        self._runtime = None
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Reset data between test runs."""
        if self._storage:
            await self._storage.clear()
            logger.info("Storage cleared")

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def runtime(self) -> AgentRuntime:
        """Get agent runtime instance."""
        if not self._runtime:
            raise RuntimeError("Application not started")
        return self._runtime
