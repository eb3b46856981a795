"""Prompt context module."""

from .formatting import (
    compose_action_examples,
    format_action_names,
    format_actions,
    format_messages,
)
from .templates import MESSAGE_HANDLER_TEMPLATE, compose_context

__all__ = [
    "MESSAGE_HANDLER_TEMPLATE",
    "compose_action_examples",
    "compose_context",
    "format_action_names",
    "format_actions",
    "format_messages",
]
