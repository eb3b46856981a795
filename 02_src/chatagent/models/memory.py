"""Conversation memory data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Content:
    """Payload of a single conversation turn."""

    text: str
    action: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.action:
            data["action"] = self.action
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Content":
        """Build Content from a JSON object. A legacy "content" key is read as text."""
        data = dict(data)
        text = data.pop("text", None)
        if text is None:
            text = data.pop("content", "")
        action = data.pop("action", None)
        return cls(
            text=str(text) if text is not None else "",
            action=str(action) if action else None,
            extra=data,
        )


@dataclass
class Memory:
    """A stored conversation turn in a room."""

    id: str
    user_id: str
    room_id: str
    content: Content
    created_at: datetime
    embedding: list[float] = field(default_factory=list)
    unique: bool = False

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly form without the embedding."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "room_id": self.room_id,
            "content": self.content.to_dict(),
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Account:
    """Display information for a conversation participant."""

    id: str
    name: str
