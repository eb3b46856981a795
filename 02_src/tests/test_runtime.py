"""Tests for AgentRuntime."""

import asyncio
import itertools
from unittest.mock import AsyncMock

import pytest

from chatagent.actions import MAX_CONTINUES_IN_A_ROW
from chatagent.models import Account, Action, Content, Evaluator
from chatagent.parsing import ResponseParseError
from conftest import AGENT_ID, AGENT_NAME, ROOM_ID, make_memory


def _reply(text: str, action: str | None = None) -> str:
    action_json = f'"{action}"' if action else "null"
    return f'```json\n{{"user": "Ada", "text": "{text}", "action": {action_json}}}\n```'


class TestComposeState:
    """Tests for compose_state() and update_recent_message_state()."""

    async def test_compose_state(self, runtime, storage):
        await storage.save_account(Account(id="u1", name="Bob"))
        await storage.save_memory(make_memory("u1", "hey there", minute=0))
        await storage.save_memory(make_memory(AGENT_ID, "hi bob", minute=1))
        message = make_memory("u1", "how are you", minute=2)

        state = await runtime.compose_state(message, extra={"topic": "smalltalk"})

        assert state.agent_name == AGENT_NAME
        assert state.sender_name == "Bob"
        assert state.recent_messages == "Bob: hey there\nAda: hi bob"
        assert [m.content.text for m in state.recent_messages_data] == ["hi bob", "hey there"]
        assert "CONTINUE" in state.action_names
        assert state.action_examples
        assert state.extra == {"topic": "smalltalk"}

    async def test_update_recent_message_state(self, runtime, storage):
        message = make_memory("u1", "first", minute=0)
        await storage.save_memory(message)
        state = await runtime.compose_state(message)

        await storage.save_memory(make_memory(AGENT_ID, "reply", minute=1))
        updated = await runtime.update_recent_message_state(state)

        assert len(updated.recent_messages_data) == 2
        assert updated.recent_messages.endswith("Ada: reply")
        assert updated.action_names == state.action_names
        assert len(state.recent_messages_data) == 1


class TestCompletion:
    """Tests for completion() and message_completion()."""

    async def test_completion_passes_stop_and_length(self, runtime, mock_llm):
        mock_llm.complete.return_value = "YES"
        result = await runtime.completion("ctx", stop=["\n"], max_response_length=5)

        assert result == "YES"
        kwargs = mock_llm.complete.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "ctx"}]
        assert kwargs["max_tokens"] == 5
        assert kwargs["stop"] == ["\n"]

    async def test_message_completion_parses_content(self, runtime, mock_llm):
        mock_llm.complete.return_value = _reply("hello", "CONTINUE")
        content = await runtime.message_completion("ctx")

        assert content.text == "hello"
        assert content.action == "CONTINUE"
        assert "user" not in content.extra

    async def test_message_completion_retries(self, runtime, mock_llm):
        mock_llm.complete.side_effect = ["not json", _reply("second try")]
        content = await runtime.message_completion("ctx")

        assert content.text == "second try"
        assert mock_llm.complete.await_count == 2

    async def test_message_completion_gives_up(self, runtime, mock_llm):
        mock_llm.complete.return_value = '{"mood": "no text key"}'
        with pytest.raises(ResponseParseError):
            await runtime.message_completion("ctx")
        assert mock_llm.complete.await_count == 3


class TestEvaluate:
    """Tests for evaluate()."""

    async def test_runs_valid_evaluators_only(self, runtime):
        ran = AsyncMock()
        skipped = AsyncMock()
        runtime.register_evaluator(
            Evaluator("ran", "", validate=AsyncMock(return_value=True), handler=ran)
        )
        runtime.register_evaluator(
            Evaluator("skipped", "", validate=AsyncMock(return_value=False), handler=skipped)
        )
        message = make_memory("u1", "hi")
        state = await runtime.compose_state(message)

        assert await runtime.evaluate(message, state) == ["ran"]
        ran.assert_awaited_once()
        skipped.assert_not_awaited()

    async def test_failing_evaluator_does_not_stop_others(self, runtime):
        runtime.register_evaluator(
            Evaluator(
                "broken",
                "",
                validate=AsyncMock(return_value=True),
                handler=AsyncMock(side_effect=ValueError("boom")),
            )
        )
        runtime.register_evaluator(
            Evaluator("ok", "", validate=AsyncMock(return_value=True), handler=AsyncMock())
        )
        message = make_memory("u1", "hi")
        state = await runtime.compose_state(message)

        assert await runtime.evaluate(message, state) == ["ok"]


class TestProcessActions:
    """Tests for get_action() and process_actions()."""

    def test_get_action_by_name_and_simile(self, runtime):
        assert runtime.get_action("continue").name == "CONTINUE"
        assert runtime.get_action("ELABORATE").name == "CONTINUE"
        assert runtime.get_action("unknown") is None

    async def test_unknown_action(self, runtime):
        message = make_memory("u1", "hi")
        state = await runtime.compose_state(message)
        assert await runtime.process_actions(message, Content("x", "DANCE"), state) == []

    async def test_no_action(self, runtime):
        message = make_memory("u1", "hi")
        state = await runtime.compose_state(message)
        assert await runtime.process_actions(message, Content("x"), state) == []

    async def test_chain_is_bounded(self, runtime):
        looping = Action(
            name="LOOP",
            description="",
            validate=AsyncMock(return_value=True),
            handler=AsyncMock(return_value=Content("again", "LOOP")),
        )
        runtime.register_action(looping)
        message = make_memory("u1", "hi")
        state = await runtime.compose_state(message)

        produced = await runtime.process_actions(message, Content("x", "LOOP"), state)

        assert len(produced) == 3
        assert looping.handler.await_count == 3

    async def test_invalid_action_is_skipped(self, runtime):
        gated = Action(
            name="GATED",
            description="",
            validate=AsyncMock(return_value=False),
            handler=AsyncMock(),
        )
        runtime.register_action(gated)
        message = make_memory("u1", "hi")
        state = await runtime.compose_state(message)

        assert await runtime.process_actions(message, Content("x", "GATED"), state) == []
        gated.handler.assert_not_awaited()

    async def test_handler_error_ends_chain(self, runtime):
        failing = Action(
            name="FAIL",
            description="",
            validate=AsyncMock(return_value=True),
            handler=AsyncMock(side_effect=RuntimeError("LLM API error")),
        )
        runtime.register_action(failing)
        message = make_memory("u1", "hi")
        state = await runtime.compose_state(message)

        assert await runtime.process_actions(message, Content("x", "FAIL"), state) == []


class TestHandleMessage:
    """Tests for handle_message()."""

    async def test_reply_is_stored_and_delivered(self, runtime, storage, mock_llm, collected):
        mock_llm.complete.return_value = _reply("hey bob")
        message = make_memory("u1", "hello", minute=0)

        responses = await runtime.handle_message(message, collected)

        assert [c.text for c in responses] == ["hey bob"]
        assert [c.text for c in collected.delivered] == ["hey bob"]

        memories = await storage.get_memories(ROOM_ID)
        assert [(m.user_id, m.content.text) for m in memories] == [
            (AGENT_ID, "hey bob"),
            ("u1", "hello"),
        ]
        assert memories[1].unique is True

        logs = await storage.get_logs(type="message")
        assert len(logs) == 1
        assert logs[0].body["response"] == {"text": "hey bob"}

    async def test_continue_chain_stops_at_cap(self, runtime, storage, mock_llm, collected):
        mock_llm.complete.side_effect = [
            _reply("oh sick", "CONTINUE"),
            "YES",
            _reply("where are you going", "CONTINUE"),
        ]
        message = make_memory("u1", "we're planning a solo backpacking trip soon", minute=0)

        responses = await runtime.handle_message(message, collected)

        assert [c.text for c in responses] == ["oh sick", "where are you going"]
        assert len(collected.delivered) == 2
        assert mock_llm.complete.await_count == 3

        agent_memories = [
            m for m in await storage.get_memories(ROOM_ID) if m.user_id == AGENT_ID
        ]
        assert [m.content.action for m in agent_memories] == ["CONTINUE", "CONTINUE"]

    async def test_no_follow_up_after_capped_burst(self, runtime, storage, mock_llm, collected):
        mock_llm.complete.side_effect = [
            _reply("oh sick", "CONTINUE"),
            "YES",
            _reply("where are you going", "CONTINUE"),
            _reply("the alps are great in late summer", "CONTINUE"),
        ]
        first = make_memory("u1", "we're planning a solo backpacking trip soon", minute=0)
        second = make_memory("u1", "thinking about the alps", minute=1)

        await runtime.handle_message(first, collected)
        responses = await runtime.handle_message(second, collected)

        assert [c.text for c in responses] == ["the alps are great in late summer"]
        assert mock_llm.complete.await_count == 4
        assert len(collected.delivered) == 3

    async def test_same_room_messages_are_handled_in_turn(self, runtime, storage, mock_llm):
        replies = itertools.count(1)

        async def complete(messages, **kwargs):
            if "Respond with a YES or a NO" in messages[0]["content"]:
                await asyncio.sleep(0.05)
                return "YES"
            return _reply(f"reply {next(replies)}", "CONTINUE")

        mock_llm.complete.side_effect = complete
        delivered = []

        def deliver_to(user_id):
            async def callback(content):
                delivered.append((user_id, content.action))

            return callback

        first = make_memory("u1", "i found some incredible art today", minute=0)
        second = make_memory("u2", "i just got a guitar", minute=1)

        await asyncio.gather(
            runtime.handle_message(first, deliver_to("u1")),
            runtime.handle_message(second, deliver_to("u2")),
        )

        # the first message's reply and follow-up go out before the second's reply
        assert [user_id for user_id, _ in delivered] == ["u1", "u1", "u2"]
        assert [action for _, action in delivered[:MAX_CONTINUES_IN_A_ROW]] == [
            "CONTINUE"
        ] * MAX_CONTINUES_IN_A_ROW
        assert mock_llm.complete.await_count == 4

        agent_memories = [
            m for m in await storage.get_memories(ROOM_ID) if m.user_id == AGENT_ID
        ]
        assert len(agent_memories) == 3

    async def test_generation_failure_returns_nothing(self, runtime, storage, mock_llm):
        mock_llm.complete.side_effect = RuntimeError("LLM API error: down")
        message = make_memory("u1", "hello")

        assert await runtime.handle_message(message) == []
        assert await storage.count_memories(ROOM_ID) == 1

    async def test_empty_reply_is_skipped(self, runtime, storage, mock_llm, collected):
        mock_llm.complete.return_value = '{"text": "   "}'
        message = make_memory("u1", "hello")

        assert await runtime.handle_message(message, collected) == []
        assert collected.delivered == []
        assert await storage.count_memories(ROOM_ID) == 1


class TestIgnoreAction:
    """Tests for the IGNORE and NONE actions."""

    async def test_ignore_logs_and_stops(self, runtime, storage):
        message = make_memory("u1", "ok bye, gotta go")
        state = await runtime.compose_state(message)

        produced = await runtime.process_actions(message, Content("", "IGNORE"), state)

        assert produced == []
        logs = await storage.get_logs(type="ignore")
        assert len(logs) == 1
        assert logs[0].body["message"]["id"] == message.id

    async def test_none_does_nothing(self, runtime, storage):
        message = make_memory("u1", "hi")
        state = await runtime.compose_state(message)

        assert await runtime.process_actions(message, Content("hey", "NONE"), state) == []
        assert await storage.get_logs() == []
