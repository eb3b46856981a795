"""IGNORE and NONE actions."""

from ..logging_config import get_logger
from ..models import Action, ActionExample, Content, Memory

logger = get_logger(__name__)


async def _always_valid(runtime, message: Memory) -> bool:
    return True


async def _ignore_handler(runtime, message, state=None, options=None, callback=None):
    logger.info("Ignoring conversation in %s", message.room_id)
    await runtime.database_adapter.log(
        body={"message": message.to_dict()},
        user_id=message.user_id,
        room_id=message.room_id,
        type="ignore",
    )
    return None


async def _none_handler(runtime, message, state=None, options=None, callback=None):
    return None


ignore_action = Action(
    name="IGNORE",
    description=(
        "Stop responding in this conversation. Use when the conversation is over, "
        "the user is being rude, or the user does not wish to speak."
    ),
    similes=["STOP_TALKING", "END_CONVERSATION"],
    validate=_always_valid,
    handler=_ignore_handler,
    examples=[
        [
            ActionExample(user="{{user1}}", content=Content(text="ok bye, gotta go")),
            ActionExample(user="{{user2}}", content=Content(text="", action="IGNORE")),
        ],
        [
            ActionExample(user="{{user1}}", content=Content(text="stop talking to me")),
            ActionExample(user="{{user2}}", content=Content(text="", action="IGNORE")),
        ],
    ],
)

none_action = Action(
    name="NONE",
    description="Respond normally without taking any additional action.",
    similes=["NO_ACTION", "RESPOND"],
    validate=_always_valid,
    handler=_none_handler,
)
