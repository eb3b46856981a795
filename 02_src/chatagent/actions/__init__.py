"""Built-in actions."""

from .continue_action import (
    MAX_CONTINUES_IN_A_ROW,
    SHOULD_CONTINUE_TEMPLATE,
    continue_action,
)
from .ignore import ignore_action, none_action

DEFAULT_ACTIONS = [continue_action, ignore_action, none_action]

__all__ = [
    "DEFAULT_ACTIONS",
    "MAX_CONTINUES_IN_A_ROW",
    "SHOULD_CONTINUE_TEMPLATE",
    "continue_action",
    "ignore_action",
    "none_action",
]
