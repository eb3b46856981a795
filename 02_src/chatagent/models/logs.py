"""Structured log entry model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class LogEntry:
    """A persisted record of an agent decision (context, response, ...)."""

    id: str
    user_id: str
    room_id: str
    type: str  # e.g. "continue", "ignore", "message"
    body: dict
    created_at: datetime
