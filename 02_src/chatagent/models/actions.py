"""Action and evaluator definitions."""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from .memory import Content, Memory
from .state import State

ResponseCallback = Callable[[Content], Awaitable[None]]

# The runtime is passed as Any to keep models free of runtime imports
ValidateFn = Callable[[Any, Memory], Awaitable[bool]]
ActionHandlerFn = Callable[
    [Any, Memory, State | None, dict | None, ResponseCallback | None],
    Awaitable[Content | None],
]
EvaluatorHandlerFn = Callable[[Any, Memory, State], Awaitable[Any]]


@dataclass
class ActionExample:
    """One turn of an example conversation; user is a {{userN}} placeholder."""

    user: str
    content: Content


@dataclass
class Action:
    """An action the model can tag a response with."""

    name: str
    description: str
    validate: ValidateFn
    handler: ActionHandlerFn
    condition: str = ""
    similes: list[str] = field(default_factory=list)
    examples: list[list[ActionExample]] = field(default_factory=list)


@dataclass
class Evaluator:
    """Post-response hook run by the runtime's evaluate step."""

    name: str
    description: str
    validate: ValidateFn
    handler: EvaluatorHandlerFn
