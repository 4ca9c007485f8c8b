# ewwcore

Building blocks for a desktop widget daemon: a graph of variable scopes
that re-runs listeners whenever a value they depend on changes, script
variable definitions and a shell-command runner, system statistics
rendered as JSON text, the command-line options of the widget client,
and the commands and responses exchanged with a daemon.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Scoped state

```python
from ewwcore.scope import Listener
from ewwcore.scope_graph import ScopeGraph
from ewwcore.scope_graph_internal import Concat, Literal, VarRef

graph = ScopeGraph.from_global_vars({"greeting": "hi"})
root = graph.root_index

widget = graph.register_new_scope(
    "widget", root, root,
    {"label": Concat([VarRef("greeting"), Literal(" there")])},
)

seen = []
graph.register_listener(
    widget,
    Listener(["label"], lambda g, values: seen.append(values["label"])),
)

graph.update_global_value("greeting", "hello")
# seen == ["hi there", "hello there"]
```

Expressions are built from `Literal`, `VarRef` and `Concat` in
`ewwcore.scope_graph_internal`. `graph.visualize()` renders the graph in
graphviz dot format, `graph.validate()` raises `ValueError` if the graph
is inconsistent, and `graph.currently_used_globals()` /
`currently_unused_globals()` tell which global variables are still
referenced by some scope. Looking up a variable that is not in scope
raises `LookupError`.

## Script variables

`ewwcore.script_var` defines `PollScriptVar` (a shell command or a
function, polled every `interval` seconds) and `ListenScriptVar` (a
long-running shell command). `run_command(cmd)` runs a command with
`/bin/sh` and returns its output with surrounding newlines removed,
raising `RuntimeError` with the command's stderr if it fails.
`initial_value(var)` computes a variable's starting value; a failing
shell command raises `ScriptVarFailed`, a warning diagnostic.

## System statistics

`ewwcore.system_stats` provides `get_ram()`, `get_disks()`,
`get_cpus()`, `get_temperatures()`, `net()` (bytes sent and received
since the previous call) and `get_battery_capacity(power_supply_dir=None)`,
each returning JSON text.

## Command-line options and daemon commands

`ewwcore.opts.parse_args(argv)` parses a command line such as
`["open", "bar", "--toggle"]` or `["update", "volume=42"]` into an `Opt`
holding an `Action`. `Action.into_daemon_command()` turns an action into
a `DaemonCommand` (from `ewwcore.commands`) together with the receiver
on which its `DaemonResponse` will arrive, and `Action.to_bytes()` /
`Action.from_bytes()` serialize an action as JSON.

## Paths and errors

`EwwPaths.from_config_dir(path)` checks a configuration directory and
derives the socket and log file locations from a hash of its absolute
path; `EwwPaths.default()` uses `$XDG_CONFIG_HOME/eww`.
`ewwcore.errors.format_error` renders an exception, as a diagnostic if
it carries a `DiagError`, otherwise with its chain of causes.

## What is not included

This package installs no command. It has no daemon process, no socket
server or client that sends actions to a daemon, nothing that runs
script variables on their schedule, and no predefined built-in
variables; it provides the pieces such a program would be built from.