"""Conversational agent runtime."""

from .actions import DEFAULT_ACTIONS, MAX_CONTINUES_IN_A_ROW, continue_action
from .app import Application, IApplication
from .llm import ILLMProvider, LLMProvider
from .memory import EMBEDDING_ZERO_VECTOR, IMemoryManager, MemoryManager
from .models import (
    Account,
    Action,
    ActionExample,
    Content,
    Evaluator,
    LogEntry,
    Memory,
    State,
)
from .runtime import AgentRuntime, IAgentRuntime
from .storage import IStorage, Storage

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "Account",
    "Action",
    "ActionExample",
    "Content",
    "Evaluator",
    "LogEntry",
    "Memory",
    "State",
    # Components
    "IStorage",
    "Storage",
    "IMemoryManager",
    "MemoryManager",
    "EMBEDDING_ZERO_VECTOR",
    "ILLMProvider",
    "LLMProvider",
    "IAgentRuntime",
    "AgentRuntime",
    # Actions
    "DEFAULT_ACTIONS",
    "MAX_CONTINUES_IN_A_ROW",
    "continue_action",
]
