"""Agent runtime module."""

from .runtime import AgentRuntime, IAgentRuntime

__all__ = ["AgentRuntime", "IAgentRuntime"]
