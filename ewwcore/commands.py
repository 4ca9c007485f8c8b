"""Commands handled by the daemon."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .daemon_response import DaemonResponseSender


class CommandKind(Enum):
    NO_OP = auto()
    UPDATE_VARS = auto()
    RELOAD_CONFIG_AND_CSS = auto()
    OPEN_INSPECTOR = auto()
    OPEN_MANY = auto()
    OPEN_WINDOW = auto()
    CLOSE_WINDOWS = auto()
    KILL_SERVER = auto()
    CLOSE_ALL = auto()
    PRINT_STATE = auto()
    GET_VAR = auto()
    PRINT_DEBUG = auto()
    PRINT_GRAPH = auto()
    PRINT_WINDOWS = auto()


_RESPONDING_KINDS = frozenset(
    {
        CommandKind.RELOAD_CONFIG_AND_CSS,
        CommandKind.OPEN_MANY,
        CommandKind.OPEN_WINDOW,
        CommandKind.CLOSE_WINDOWS,
        CommandKind.PRINT_STATE,
        CommandKind.GET_VAR,
        CommandKind.PRINT_DEBUG,
        CommandKind.PRINT_GRAPH,
        CommandKind.PRINT_WINDOWS,
    }
)


@dataclass
class DaemonCommand:
    """A command for the daemon, mostly created from command-line actions.

    Commands whose kind expects an answer carry a ``sender``; others must not.
    ``pos`` and ``size`` are coordinates such as ``200x100``, ``anchor`` a point such
    as ``top right`` and ``screen`` a monitor number or name.
    """

    kind: CommandKind
    sender: DaemonResponseSender | None = None
    mappings: list[tuple[str, str]] = field(default_factory=list)
    windows: list[str] = field(default_factory=list)
    window_name: str | None = None
    pos: str | None = None
    size: str | None = None
    anchor: str | None = None
    screen: int | str | None = None
    should_toggle: bool = False
    show_all: bool = False
    name: str | None = None

    def __post_init__(self) -> None:
        if self.responds and self.sender is None:
            raise ValueError(f"{self.kind.name} command needs a response sender")
        if not self.responds and self.sender is not None:
            raise ValueError(f"{self.kind.name} command does not send a response")
        if self.kind is CommandKind.OPEN_WINDOW and not self.window_name:
            raise ValueError("OPEN_WINDOW command needs a window name")
        if self.kind is CommandKind.GET_VAR and self.name is None:
            raise ValueError("GET_VAR command needs a variable name")

    @property
    def responds(self) -> bool:
        """True if the daemon answers this command through its sender."""
        return self.kind in _RESPONDING_KINDS