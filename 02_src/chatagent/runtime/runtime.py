"""AgentRuntime: state composition, model calls and action dispatch."""

import asyncio
import dataclasses
import random
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, Sequence

from ..context import (
    MESSAGE_HANDLER_TEMPLATE,
    compose_action_examples,
    compose_context,
    format_action_names,
    format_actions,
    format_messages,
)
from ..llm import ILLMProvider
from ..logging_config import get_logger
from ..memory import IMemoryManager, MemoryManager
from ..models import (
    Account,
    Action,
    Content,
    Evaluator,
    Memory,
    ResponseCallback,
    State,
)
from ..parsing import ResponseParseError, parse_json_object_from_text
from ..storage import IStorage

logger = get_logger(__name__)


class IAgentRuntime(Protocol):
    """What actions and evaluators may use from the runtime."""

    agent_id: str
    agent_name: str
    context_log_dir: Path | None

    @property
    def message_manager(self) -> IMemoryManager:
        """Conversation memories."""
        ...

    @property
    def database_adapter(self) -> IStorage:
        """Structured logs and accounts."""
        ...

    async def compose_state(
        self, message: Memory, extra: dict[str, Any] | None = None
    ) -> State:
        """Build State for a message."""
        ...

    async def update_recent_message_state(self, state: State) -> State:
        """Refresh the recent messages of a State."""
        ...

    async def completion(
        self,
        context: str,
        stop: list[str] | None = None,
        max_response_length: int | None = None,
    ) -> str:
        """Raw text completion."""
        ...

    async def message_completion(
        self, context: str, stop: list[str] | None = None
    ) -> Content:
        """Completion parsed into Content."""
        ...

    async def evaluate(self, message: Memory, state: State) -> list[str]:
        """Run evaluators; return names of those that ran."""
        ...


class AgentRuntime:
    """Runs one agent: composes state, talks to the LLM, dispatches actions."""

    def __init__(
        self,
        agent_id: str,
        agent_name: str,
        llm_provider: ILLMProvider,
        storage: IStorage,
        actions: Sequence[Action] | None = None,
        evaluators: Sequence[Evaluator] | None = None,
        context_log_dir: Path | None = None,
        max_action_chain: int = 3,
        recent_message_count: int = 10,
        max_retries: int = 3,
        rng: random.Random | None = None,
    ):
        self.agent_id = agent_id
        self.agent_name = agent_name
        self.context_log_dir = context_log_dir

        self._llm = llm_provider
        self._storage = storage
        self._message_manager = MemoryManager(storage)
        self._actions: list[Action] = list(actions or [])
        self._evaluators: list[Evaluator] = list(evaluators or [])
        self._max_action_chain = max_action_chain
        self._recent_message_count = recent_message_count
        self._max_retries = max_retries
        self._rng = rng or random.Random()
        self._room_locks: dict[str, asyncio.Lock] = {}

    @property
    def message_manager(self) -> IMemoryManager:
        return self._message_manager

    @property
    def database_adapter(self) -> IStorage:
        return self._storage

    @property
    def actions(self) -> list[Action]:
        return list(self._actions)

    def register_action(self, action: Action) -> None:
        """Register an action."""
        self._actions.append(action)

    def register_evaluator(self, evaluator: Evaluator) -> None:
        """Register an evaluator."""
        self._evaluators.append(evaluator)

    def get_action(self, name: str) -> Action | None:
        """Look up an action by name or simile, case-insensitively."""
        wanted = name.strip().upper()
        for action in self._actions:
            if action.name.upper() == wanted:
                return action
            if wanted in (s.upper() for s in action.similes):
                return action
        return None

    async def ensure_account(self, user_id: str, name: str) -> None:
        """Remember the display name of a participant."""
        await self._storage.save_account(Account(id=user_id, name=name))

    async def _names_for(self, user_ids: set[str]) -> dict[str, str]:
        names = {}
        for user_id in user_ids:
            if user_id == self.agent_id:
                names[user_id] = self.agent_name
                continue
            account = await self._storage.get_account(user_id)
            if account:
                names[user_id] = account.name
        return names

    async def _recent(self, room_id: str) -> tuple[list[Memory], str]:
        memories = await self._message_manager.get_memories(
            room_id, count=self._recent_message_count, unique=False
        )
        names = await self._names_for({m.user_id for m in memories})
        transcript = format_messages(memories, self.agent_id, self.agent_name, names)
        return memories, transcript

    async def compose_state(
        self, message: Memory, extra: dict[str, Any] | None = None
    ) -> State:
        """Build State from the room's recent memories and the registered actions."""
        memories, transcript = await self._recent(message.room_id)
        sender = await self._names_for({message.user_id})

        return State(
            agent_id=self.agent_id,
            agent_name=self.agent_name,
            room_id=message.room_id,
            sender_name=sender.get(message.user_id, message.user_id),
            recent_messages=transcript,
            recent_messages_data=memories,
            actions=format_actions(self._actions),
            action_names=format_action_names(self._actions),
            action_examples=compose_action_examples(self._actions, rng=self._rng),
            extra=dict(extra or {}),
        )

    async def update_recent_message_state(self, state: State) -> State:
        memories, transcript = await self._recent(state.room_id)
        return dataclasses.replace(
            state, recent_messages=transcript, recent_messages_data=memories
        )

    async def completion(
        self,
        context: str,
        stop: list[str] | None = None,
        max_response_length: int | None = None,
    ) -> str:
        return await self._llm.complete(
            messages=[{"role": "user", "content": context}],
            max_tokens=max_response_length or 1024,
            stop=stop,
        )

    async def message_completion(
        self, context: str, stop: list[str] | None = None
    ) -> Content:
        """Ask for a JSON reply and parse it, retrying on unparseable output."""
        for attempt in range(1, self._max_retries + 1):
            response = await self.completion(context, stop=stop)
            parsed = parse_json_object_from_text(response)
            if parsed and ("text" in parsed or "content" in parsed):
                parsed.pop("user", None)
                return Content.from_dict(parsed)
            logger.warning(
                "Unparseable message completion (attempt %s/%s): %s",
                attempt,
                self._max_retries,
                response[:100],
            )
        raise ResponseParseError(
            f"No valid response after {self._max_retries} attempts"
        )

    async def evaluate(self, message: Memory, state: State) -> list[str]:
        """Run every evaluator whose validate passes."""
        ran = []
        for evaluator in self._evaluators:
            try:
                if not await evaluator.validate(self, message):
                    continue
                await evaluator.handler(self, message, state)
                ran.append(evaluator.name)
            except Exception as e:
                logger.error("Evaluator %s failed: %s", evaluator.name, e, exc_info=True)
        return ran

    async def process_actions(
        self,
        message: Memory,
        content: Content,
        state: State,
        callback: ResponseCallback | None = None,
    ) -> list[Content]:
        """
        Run the action a response is tagged with.

        A handler may return content tagged with another action, which is
        processed in turn. The chain stops at max_action_chain steps, when
        validate fails, or when a handler returns nothing.
        """
        produced: list[Content] = []
        current: Content | None = content

        for _ in range(self._max_action_chain):
            if current is None or not current.action:
                break

            action = self.get_action(current.action)
            if action is None:
                logger.warning("Unknown action %s", current.action)
                break

            if not await action.validate(self, message):
                logger.info("Action %s not valid for message %s", action.name, message.id)
                break

            try:
                result = await action.handler(self, message, state, {}, callback)
            except Exception as e:
                logger.error("Action %s failed: %s", action.name, e, exc_info=True)
                break

            if result is None:
                break
            produced.append(result)
            current = result

        return produced

    def _room_lock(self, room_id: str) -> asyncio.Lock:
        lock = self._room_locks.get(room_id)
        if lock is None:
            lock = asyncio.Lock()
            self._room_locks[room_id] = lock
        return lock

    async def handle_message(
        self, message: Memory, callback: ResponseCallback | None = None
    ) -> list[Content]:
        """
        Store an inbound message, reply to it and run the reply's actions.

        Messages of one room are handled one at a time, so the CONTINUE cap
        is checked against every reply already stored in that room.
        """
        logger.info(
            "Message received in %s from %s: %s",
            message.room_id,
            message.user_id,
            message.content.text[:100],
        )

        async with self._room_lock(message.room_id):
            return await self._handle_message(message, callback)

    async def _handle_message(
        self, message: Memory, callback: ResponseCallback | None
    ) -> list[Content]:
        await self._message_manager.create_memory(message, unique=True)

        state = await self.compose_state(message)
        context = compose_context(state, MESSAGE_HANDLER_TEMPLATE)

        try:
            response = await self.message_completion(context)
        except (ResponseParseError, RuntimeError) as e:
            logger.error("Reply generation failed: %s", e, exc_info=True)
            return []

        await self._storage.log(
            body={
                "message": message.to_dict(),
                "context": context,
                "response": response.to_dict(),
            },
            user_id=message.user_id,
            room_id=message.room_id,
            type="message",
        )

        response.text = response.text.strip()
        if not response.text:
            logger.warning("Empty response, skipping")
            return []

        if callback:
            await callback(response)

        await self._message_manager.create_memory(
            Memory(
                id=str(uuid.uuid4()),
                user_id=self.agent_id,
                room_id=message.room_id,
                content=response,
                created_at=datetime.now(timezone.utc),
            )
        )

        state = dataclasses.replace(state, response_content=response)
        await self.evaluate(message, state)

        follow_ups = await self.process_actions(message, response, state, callback)
        return [response, *follow_ups]
