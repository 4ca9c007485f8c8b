"""Command-line options and the actions they describe."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .commands import CommandKind, DaemonCommand
from .daemon_response import DaemonResponseReceiver, create_pair


class ActionKind(Enum):
    """The subcommands; each value is the subcommand's name."""

    DAEMON = "daemon"
    LOGS = "logs"
    PING = "ping"
    UPDATE = "update"
    OPEN_INSPECTOR = "inspector"
    OPEN_WINDOW = "open"
    OPEN_MANY = "open-many"
    CLOSE_WINDOWS = "close"
    RELOAD = "reload"
    KILL_SERVER = "kill"
    CLOSE_ALL = "close-all"
    SHOW_STATE = "state"
    GET_VAR = "get"
    SHOW_WINDOWS = "windows"
    SHOW_DEBUG = "debug"
    SHOW_GRAPH = "graph"


_WITHOUT_RESPONSE = {
    ActionKind.OPEN_INSPECTOR: CommandKind.OPEN_INSPECTOR,
    ActionKind.KILL_SERVER: CommandKind.KILL_SERVER,
    ActionKind.CLOSE_ALL: CommandKind.CLOSE_ALL,
}

_WITH_RESPONSE = {
    ActionKind.OPEN_MANY: CommandKind.OPEN_MANY,
    ActionKind.OPEN_WINDOW: CommandKind.OPEN_WINDOW,
    ActionKind.CLOSE_WINDOWS: CommandKind.CLOSE_WINDOWS,
    ActionKind.RELOAD: CommandKind.RELOAD_CONFIG_AND_CSS,
    ActionKind.SHOW_WINDOWS: CommandKind.PRINT_WINDOWS,
    ActionKind.SHOW_STATE: CommandKind.PRINT_STATE,
    ActionKind.GET_VAR: CommandKind.GET_VAR,
    ActionKind.SHOW_DEBUG: CommandKind.PRINT_DEBUG,
    ActionKind.SHOW_GRAPH: CommandKind.PRINT_GRAPH,
}

_FIELDS = frozenset(
    {"window_name", "screen", "pos", "size", "anchor", "should_toggle", "windows", "show_all", "name"}
)


@dataclass
class Action:
    """A subcommand with its arguments.

    ``screen`` is a monitor number or name; ``pos`` and ``size`` look like ``200x100``;
    ``anchor`` looks like ``top right``.
    """

    kind: ActionKind
    mappings: list[tuple[str, str]] = field(default_factory=list)
    window_name: str | None = None
    screen: int | str | None = None
    pos: str | None = None
    size: str | None = None
    anchor: str | None = None
    should_toggle: bool = False
    windows: list[str] = field(default_factory=list)
    show_all: bool = False
    name: str | None = None

    def __post_init__(self) -> None:
        if self.kind is ActionKind.OPEN_WINDOW and not self.window_name:
            raise ValueError("open needs a window name")
        if self.kind is ActionKind.GET_VAR and self.name is None:
            raise ValueError("get needs a variable name")

    @property
    def is_client_only(self) -> bool:
        return self.kind is ActionKind.LOGS

    @property
    def with_server(self) -> bool:
        """True for actions that are sent to a running daemon."""
        return self.kind not in (ActionKind.DAEMON, ActionKind.LOGS)

    def can_start_daemon(self) -> bool:
        """True for actions that start the daemon if none is running."""
        return self.kind in (ActionKind.OPEN_WINDOW, ActionKind.OPEN_MANY)

    def into_daemon_command(self) -> tuple[DaemonCommand, DaemonResponseReceiver | None]:
        """The daemon command for this action, with the receiver of its response if it has one."""
        if self.kind is ActionKind.UPDATE:
            return DaemonCommand(CommandKind.UPDATE_VARS, mappings=list(self.mappings)), None
        if self.kind in _WITHOUT_RESPONSE:
            return DaemonCommand(_WITHOUT_RESPONSE[self.kind]), None
        if self.kind is ActionKind.PING:
            sender, receiver = create_pair()
            sender.send_success("pong")
            return DaemonCommand(CommandKind.NO_OP), receiver
        if self.kind not in _WITH_RESPONSE:
            raise ValueError(f"{self.kind.value} is not handled by the daemon")
        sender, receiver = create_pair()
        command = DaemonCommand(
            _WITH_RESPONSE[self.kind],
            sender=sender,
            windows=list(self.windows),
            window_name=self.window_name,
            pos=self.pos,
            size=self.size,
            anchor=self.anchor,
            screen=self.screen,
            should_toggle=self.should_toggle,
            show_all=self.show_all,
            name=self.name,
        )
        return command, receiver

    def to_bytes(self) -> bytes:
        """Serialize for sending over the IPC socket."""
        payload = {"kind": self.kind.value, "mappings": [list(pair) for pair in self.mappings]}
        payload.update({name: getattr(self, name) for name in sorted(_FIELDS)})
        return json.dumps(payload).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> Action:
        """Parse a message produced by :meth:`to_bytes`; raise ValueError if it is malformed."""
        try:
            raw = json.loads(data.decode("utf-8"))
            kind = ActionKind(raw.pop("kind"))
            mappings = [(str(var), str(value)) for var, value in raw.pop("mappings", [])]
            unknown = set(raw) - _FIELDS
            if unknown:
                raise ValueError(f"unknown fields {sorted(unknown)}")
            if "windows" in raw:
                raw["windows"] = [str(w) for w in raw["windows"]]
            return cls(kind=kind, mappings=mappings, **raw)
        except (UnicodeDecodeError, ValueError, KeyError, TypeError, AttributeError) as err:
            raise ValueError("Failed to parse client message") from err


@dataclass
class Opt:
    """The parsed command line."""

    log_debug: bool
    show_logs: bool
    restart: bool
    config_path: Path | None
    action: Action
    no_daemonize: bool


def parse_var_update_arg(text: str) -> tuple[str, str]:
    """Split ``name=value`` at the first ``=``."""
    name, sep, value = text.partition("=")
    if not sep:
        raise ValueError(
            f'arguments must be in the shape `variable_name="new_value"`, but got: {text}'
        )
    return name, value


def _mapping_arg(text: str) -> tuple[str, str]:
    try:
        return parse_var_update_arg(text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err)) from err


def _monitor_arg(text: str) -> int | str:
    try:
        return int(text)
    except ValueError:
        return text


def _add_global_options(parser: argparse.ArgumentParser, suppress: bool) -> None:
    false = argparse.SUPPRESS if suppress else False
    none = argparse.SUPPRESS if suppress else None
    parser.add_argument("--debug", dest="log_debug", action="store_true", default=false,
                        help="Write out debug logs. (To read the logs, run `eww logs`).")
    parser.add_argument("-c", "--config", dest="config", type=Path, default=none,
                        help="override path to configuration directory (directory that contains eww.yuck and eww.scss)")
    parser.add_argument("--logs", dest="show_logs", action="store_true", default=false,
                        help="Watch the log output after executing the command")
    parser.add_argument("--no-daemonize", dest="no_daemonize", action="store_true", default=false,
                        help="Avoid daemonizing eww.")
    parser.add_argument("--restart", dest="restart", action="store_true", default=false,
                        help="Restart the daemon completely before running the command")


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    _add_global_options(common, suppress=True)
    parser = argparse.ArgumentParser(prog="eww")
    _add_global_options(parser, suppress=False)
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    def add(kind: ActionKind, help_text: str, *aliases: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(kind.value, aliases=list(aliases), parents=[common], help=help_text)
        sub.set_defaults(kind=kind)
        return sub

    add(ActionKind.DAEMON, "Start the Eww daemon.", "d")
    add(ActionKind.LOGS, "Print and watch the eww logs")
    add(ActionKind.PING, "Ping the eww server, checking if it is reachable.")
    update = add(ActionKind.UPDATE, "Update the value of a variable, in a running eww instance", "u")
    update.add_argument("mappings", nargs="*", type=_mapping_arg,
                        help='variable_name="new_value"-pairs that will be updated')
    add(ActionKind.OPEN_INSPECTOR, "Open the GTK debugger", "debugger")

    open_window = add(ActionKind.OPEN_WINDOW, "Open a window", "o")
    open_window.add_argument("window_name", help="Name of the window you want to open.")
    open_window.add_argument("--screen", type=_monitor_arg,
                             help="The identifier of the monitor the window should open on")
    open_window.add_argument("-p", "--pos", help="The position of the window, where it should open. (i.e.: 200x100)")
    open_window.add_argument("-s", "--size", help="The size of the window to open (i.e.: 200x100)")
    open_window.add_argument("-a", "--anchor", help='Sidepoint of the window, formatted like "top right"')
    open_window.add_argument("--toggle", dest="should_toggle", action="store_true",
                             help="If the window is already open, close it instead")

    open_many = add(ActionKind.OPEN_MANY, "Open multiple windows at once.")
    open_many.add_argument("windows", nargs="*")
    open_many.add_argument("--toggle", dest="should_toggle", action="store_true",
                           help="If a window is already open, close it instead")

    close = add(ActionKind.CLOSE_WINDOWS, "Close the given windows", "c")
    close.add_argument("windows", nargs="*")
    add(ActionKind.RELOAD, "Reload the configuration", "r")
    add(ActionKind.KILL_SERVER, "Kill the eww daemon", "k")
    add(ActionKind.CLOSE_ALL, "Close all windows, without killing the daemon", "ca")

    state = add(ActionKind.SHOW_STATE, "Prints the variables used in all currently open window")
    state.add_argument("-a", "--all", dest="show_all", action="store_true",
                       help="Shows all variables, including not currently used ones")

    get = add(ActionKind.GET_VAR, "Get the value of a variable if defined")
    get.add_argument("name")
    add(ActionKind.SHOW_WINDOWS,
        "Print the names of all configured windows. Windows with a * in front of them are currently opened.")
    add(ActionKind.SHOW_DEBUG, "Print out the widget structure as seen by eww.")
    add(ActionKind.SHOW_GRAPH, "Print out the scope graph structure in graphviz dot format.")
    return parser


def parse_args(argv: list[str] | None = None) -> Opt:
    """Parse the command line; exits with a usage message on invalid arguments."""
    namespace = _build_parser().parse_args(argv)
    fields = {name: getattr(namespace, name) for name in _FIELDS | {"mappings"} if hasattr(namespace, name)}
    action = Action(kind=namespace.kind, **fields)
    return Opt(
        log_debug=namespace.log_debug,
        show_logs=namespace.show_logs,
        restart=namespace.restart,
        config_path=namespace.config,
        action=action,
        no_daemonize=namespace.no_daemonize,
    )