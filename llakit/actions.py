"""Named plugin actions with help text."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

Handler = Callable[[list[str]], Any]


class PluginError(Exception):
    """Raised when a plugin request or action fails."""


@dataclass
class ActionHelp:
    """Usage line, description and examples for one action."""

    usage: str
    description: str
    examples: list[str] = field(default_factory=list)


@dataclass
class Action:
    """A handler together with its help text."""

    handler: Handler
    help: ActionHelp


class ActionRegistry:
    """Maps action names to handlers."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def register(self, name: str, help: ActionHelp, handler: Handler) -> None:
        """Register ``handler`` under ``name``, replacing any earlier one."""
        self._actions[name] = Action(handler=handler, help=help)

    def define(
        self,
        name: str,
        usage: str,
        description: str,
        examples: Iterable[str],
        handler: Handler,
    ) -> None:
        """Register a handler, building its help from the given parts."""
        self.register(
            name,
            ActionHelp(usage=usage, description=description, examples=[str(e) for e in examples]),
            handler,
        )

    def handle(self, action: str, args: Sequence[str]) -> Any:
        """Run the named action; raise PluginError if it is unknown."""
        try:
            entry = self._actions[action]
        except KeyError:
            raise PluginError(f"Unknown action: {action}") from None
        return entry.handler(list(args))

    def get_help(self) -> list[tuple[str, ActionHelp]]:
        """Return every action name with its help."""
        return [(name, action.help) for name, action in self._actions.items()]