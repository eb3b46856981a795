"""Rendering of transcripts, action lists and action examples for prompts."""

import random
import re
from typing import Sequence

from ..models import Action, ActionExample, Memory

EXAMPLE_NAMES = [
    "alice",
    "bob",
    "charlie",
    "dana",
    "eli",
    "farah",
    "gus",
    "hana",
    "ivan",
    "jo",
    "kenji",
    "lena",
]

_USER_PLACEHOLDER = re.compile(r"\{\{(user\d+)\}\}")


def format_messages(
    memories: Sequence[Memory],
    agent_id: str,
    agent_name: str,
    names: dict[str, str] | None = None,
) -> str:
    """Render memories (newest first) as a chronological transcript."""
    names = names or {}
    lines = []
    for memory in reversed(memories):
        if memory.user_id == agent_id:
            speaker = agent_name
        else:
            speaker = names.get(memory.user_id, memory.user_id)
        line = f"{speaker}: {memory.content.text}"
        if memory.content.action:
            line += f" ({memory.content.action})"
        lines.append(line)
    return "\n".join(lines)


def format_actions(actions: Sequence[Action]) -> str:
    return "\n".join(f"{a.name}: {a.description}" for a in actions)


def format_action_names(actions: Sequence[Action]) -> str:
    return ", ".join(a.name for a in actions)


def _render_example(example: list[ActionExample], names: dict[str, str]) -> str:
    lines = []
    for turn in example:
        user = _USER_PLACEHOLDER.sub(lambda m: names.get(m.group(1), m.group(0)), turn.user)
        line = f"{user}: {turn.content.text}"
        if turn.content.action:
            line += f" ({turn.content.action})"
        lines.append(line)
    return "\n".join(lines)


def compose_action_examples(
    actions: Sequence[Action],
    count: int = 10,
    rng: random.Random | None = None,
) -> str:
    """Sample up to `count` example conversations with fresh participant names."""
    rng = rng or random.Random()
    pool = [example for action in actions for example in action.examples]
    if not pool:
        return ""

    chosen = rng.sample(pool, min(count, len(pool)))
    rendered = []
    for example in chosen:
        picked = rng.sample(EXAMPLE_NAMES, 5)
        names = {f"user{i + 1}": name for i, name in enumerate(picked)}
        rendered.append(_render_example(example, names))
    return "\n\n".join(rendered)
