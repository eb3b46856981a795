"""Derived conversational state."""

from dataclasses import dataclass, field
from typing import Any

from .memory import Content, Memory


@dataclass
class State:
    """Context composed for one decision; never persisted."""

    agent_id: str
    agent_name: str
    room_id: str
    sender_name: str = ""
    recent_messages: str = ""
    recent_messages_data: list[Memory] = field(default_factory=list)  # newest first
    actions: str = ""
    action_names: str = ""
    action_examples: str = ""
    response_content: Content | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def template_values(self) -> dict[str, str]:
        """Values available as {{key}} placeholders in prompt templates."""
        values = {
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "room_id": self.room_id,
            "sender_name": self.sender_name,
            "recent_messages": self.recent_messages,
            "actions": self.actions,
            "action_names": self.action_names,
            "action_examples": self.action_examples,
        }
        if self.response_content is not None:
            values["response_text"] = self.response_content.text
        values.update({key: str(value) for key, value in self.extra.items()})
        return values
