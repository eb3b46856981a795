"""Core data models for the chat agent."""

from .memory import Account, Content, Memory
from .state import State
from .actions import Action, ActionExample, Evaluator, ResponseCallback
from .logs import LogEntry

__all__ = [
    # Memory
    "Account",
    "Content",
    "Memory",
    # State
    "State",
    # Actions
    "Action",
    "ActionExample",
    "Evaluator",
    "ResponseCallback",
    # Logs
    "LogEntry",
]
