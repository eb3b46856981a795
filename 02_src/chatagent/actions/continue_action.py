"""CONTINUE: let the agent send a follow-up to its own message."""

import dataclasses
import json
import uuid
from datetime import datetime, timezone

from ..context import MESSAGE_HANDLER_TEMPLATE, compose_context
from ..logging_config import get_logger, log_to_file
from ..memory import EMBEDDING_ZERO_VECTOR
from ..models import Action, ActionExample, Content, Memory, ResponseCallback, State

logger = get_logger(__name__)

CONTINUE = "CONTINUE"
MAX_CONTINUES_IN_A_ROW = 2

SHOULD_CONTINUE_TEMPLATE = """# Task: Decide if {{agent_name}} should continue, or wait for others in the conversation so speak.

{{agent_name}} is brief, and doesn't want to be annoying. {{agent_name}} will only continue if the message requires a continuation to finish the thought.

Based on the following conversation, should {{agent_name}} continue? YES or NO

{{recent_messages}}

Should {{agent_name}} continue? Respond with a YES or a NO."""


def _agent_messages(memories: list[Memory], agent_id: str) -> list[Memory]:
    return [m for m in memories if m.user_id == agent_id]


def _all_continues(memories: list[Memory]) -> bool:
    """True when the MAX_CONTINUES_IN_A_ROW most recent memories are all CONTINUEs."""
    last = memories[:MAX_CONTINUES_IN_A_ROW]
    if len(last) < MAX_CONTINUES_IN_A_ROW:
        return False
    return all(m.content.action == CONTINUE for m in last)


async def validate(runtime, message: Memory) -> bool:
    """Refuse once the agent already continued MAX_CONTINUES_IN_A_ROW times."""
    recent = await runtime.message_manager.get_memories(
        message.room_id, count=10, unique=False
    )
    return not _all_continues(_agent_messages(recent, runtime.agent_id))


async def _should_continue(runtime, state: State) -> bool:
    context = compose_context(state, SHOULD_CONTINUE_TEMPLATE)
    response = await runtime.completion(context, stop=["\n"], max_response_length=5)
    logger.debug("Should continue answer: %s", response)
    return "yes" in response.lower().strip()


async def _save_response(
    runtime, message: Memory, state: State, response: Content
) -> None:
    text = (response.text or "").strip()
    if not text:
        logger.warning("Empty response, skipping")
        return

    response.text = text
    await runtime.message_manager.create_memory(
        Memory(
            id=str(uuid.uuid4()),
            user_id=runtime.agent_id,
            room_id=message.room_id,
            content=response,
            embedding=list(EMBEDDING_ZERO_VECTOR),
            created_at=datetime.now(timezone.utc),
        )
    )
    await runtime.evaluate(message, dataclasses.replace(state, response_content=response))


async def handler(
    runtime,
    message: Memory,
    state: State | None = None,
    options: dict | None = None,
    callback: ResponseCallback | None = None,
) -> Content | None:
    text = message.content.text
    if text.endswith("?") or text.endswith("!"):
        return None

    if state is None:
        state = await runtime.compose_state(message)
    state = await runtime.update_recent_message_state(state)

    if not await _should_continue(runtime, state):
        logger.info("Not elaborating")
        return None

    context = compose_context(state, MESSAGE_HANDLER_TEMPLATE)
    datestr = datetime.now(timezone.utc).isoformat().replace(":", "-")
    log_to_file(
        f"{state.agent_name}_{datestr}_continue_context", context, runtime.context_log_dir
    )

    response = await runtime.message_completion(context)

    log_to_file(
        f"{state.agent_name}_{datestr}_continue_response",
        json.dumps(response.to_dict()),
        runtime.context_log_dir,
    )
    await runtime.database_adapter.log(
        body={
            "message": message.to_dict(),
            "context": context,
            "response": response.to_dict(),
        },
        user_id=message.user_id,
        room_id=message.room_id,
        type="continue",
    )

    recent_agent_texts = {
        m.content.text.strip()
        for m in _agent_messages(state.recent_messages_data, runtime.agent_id)[
            : MAX_CONTINUES_IN_A_ROW + 1
        ]
    }
    if text.strip() in recent_agent_texts or response.text.strip() in recent_agent_texts:
        logger.info("Repeated message in %s, not continuing", message.room_id)
        return None

    if callback:
        await callback(response)

    await _save_response(runtime, message, state, response)

    if response.action == CONTINUE and _all_continues(
        _agent_messages(state.recent_messages_data, runtime.agent_id)
    ):
        response.action = None

    return response


def _example(*turns: tuple) -> list[ActionExample]:
    """Build an example from (user, text) or (user, text, action) tuples."""
    example = []
    for user, text, *action in turns:
        example.append(
            ActionExample(user=user, content=Content(text=text, action=action[0] if action else None))
        )
    return example


U1, U2 = "{{user1}}", "{{user2}}"

EXAMPLES = [
    _example(
        (U1, "we're planning a solo backpacking trip soon"),
        (U2, "oh sick", CONTINUE),
        (U2, "where are you going"),
    ),
    _example(
        (U1, "i just got a guitar and started learning last month"),
        (U2, "maybe we can start a band soon lol"),
        (U1, "i'm not very good yet, but i've been playing until my fingers hut", CONTINUE),
        (U1, "seriously lol it hurts to type"),
    ),
    _example(
        (U1, "I've been reflecting a lot on what happiness means to me lately", CONTINUE),
        (U1, "That it’s more about moments than things", CONTINUE),
        (
            U2,
            "Like the best things that have ever happened were things that happened, "
            "or moments that I had with someone",
            CONTINUE,
        ),
    ),
    _example(
        (U1, "i found some incredible art today"),
        (U2, "real art or digital art"),
        (U1, "lol real art", CONTINUE),
        (U1, "the pieces are just so insane looking, one sec, let me grab a link", CONTINUE),
        (U1, "DMed it to you"),
    ),
    _example(
        (
            U1,
            "the new exhibit downtown is rly cool, it's all about tribalism in online spaces",
            CONTINUE,
        ),
        (U1, "it really blew my mind, you gotta go"),
        (U2, "lol sure i'd go"),
        (U1, "k i was thinking this weekend", CONTINUE),
        (U1, "i'm free sunday, we could get a crew together"),
    ),
    _example(
        (U1, "just finished the best anime i've ever seen"),
        (U1, "watched 40 hours of it in 2 days", CONTINUE),
        (U2, "damn, u ok"),
        (U1, "surprisingly yes", CONTINUE),
        (U1, "just found out theres a sequel, gg"),
    ),
    _example(
        (U1, "i'm thinking of adopting a pet soon"),
        (U2, "what kind of pet"),
        (U1, "i'm leaning towards a cat", CONTINUE),
        (U1, "it'd be hard to take care of a dog in the city"),
    ),
    _example(
        (U1, "i've been experimenting with vegan recipes lately"),
        (U2, "no thanks"),
        (U1, "no seriously, its so dank", CONTINUE),
        (U1, "you gotta try some of my food when you come out"),
    ),
    _example(
        (U1, "so i've been diving into photography as a new hobby"),
        (U2, "oh awesome, what do you enjoy taking photos of"),
        (U1, "mostly nature and urban landscapes", CONTINUE),
        (U1, "there's something peaceful about capturing the world through a lens"),
    ),
    _example(
        (U1, "i've been getting back into indie music"),
        (U2, "what have you been listening to"),
        (U1, "a bunch of random stuff i'd never heard before", CONTINUE),
        (U1, "i'll send you a playlist"),
    ),
    _example(
        (U1, "i used to live in the city", CONTINUE),
        (U1, "bad traffic, bad air quality, tons of homeless people, no thx"),
        (U2, "ok dood"),
    ),
    _example(
        (U1, "you kids today dont know the value of hard work", CONTINUE),
        (U1, "always on your phones"),
        (U2, "sure grandpa lets get you to bed"),
    ),
    _example(
        (U1, "hey fren r u ok", CONTINUE),
        (U1, "u look sad"),
        (U2, "im ok sweetie mommy just tired"),
    ),
    _example(
        (U1, "helo fr om mars", CONTINUE),
        (U1, "i com in pes"),
        (U2, "wat"),
    ),
    _example(
        (U1, "Yeah no worries, I get it, I've been crazy busy too"),
        (U2, "What have you been up to", CONTINUE),
        (U2, "Anything fun or just the usual"),
        (U1, "Been working on a new FPS game actually", CONTINUE),
        (U1, "Just toying around with something in three.js nothing serious"),
    ),
    _example(
        (U1, "Oh no, what happened", CONTINUE),
        (U1, "Did Mara leave you lol"),
        (U2, "wtf no, I got into an argument with my roommate", CONTINUE),
        (U2, "Living with people is just hard"),
    ),
]

continue_action = Action(
    name=CONTINUE,
    description=(
        "ONLY use this action when the message necessitates a follow up. Do not use "
        "this action when the conversation is finished or the user does not wish to "
        "speak (use IGNORE instead). If the last message action was CONTINUE, and the "
        "user has not responded. Use sparingly."
    ),
    condition=(
        "Only use CONTINUE if the message requires a continuation to finish the "
        "thought. If this actor is waiting for the other actor to respond, or the "
        "actor does not have more to say, do not use the CONTINUE action."
    ),
    similes=["ELABORATE", "KEEP_TALKING"],
    validate=validate,
    handler=handler,
    examples=EXAMPLES,
)
