"""Scopes of the state graph and the listeners attached to them."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

ListenerFn = Callable[[Any, dict[str, Any]], None]


@dataclass(eq=False)
class Listener:
    """A callback run with the current values of ``needed_variables`` whenever one of them changes.

    The callback receives the scope graph and a mapping of variable names to values.
    Listeners compare by identity.
    """

    needed_variables: list[str]
    f: ListenerFn

    def __repr__(self) -> str:
        return f"Listener(needed_variables={self.needed_variables!r}, f='function')"


@dataclass
class Scope:
    """A named set of variables.

    ``listeners`` may mention variables that are not defined in this scope itself;
    those are looked up in the scopes this one inherits from.
    ``node_index`` is the index under which the scope is stored in its graph.
    """

    name: str
    ancestor: int | None
    data: dict[str, Any] = field(default_factory=dict)
    listeners: dict[str, list[Listener]] = field(default_factory=dict)
    node_index: int = 0

    def add_listener(self, var_name: str, listener: Listener) -> None:
        """Attach ``listener`` to changes of ``var_name``."""
        self.listeners.setdefault(var_name, []).append(listener)