"""Script variable definitions and running their shell commands."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Union

from .errors import DiagError
from .scope_graph_internal import Expr, Literal

logger = logging.getLogger("ewwcore")

VarSource = Union[str, Callable[[], Any]]


def _always_true() -> Expr:
    return Literal(True)


@dataclass
class PollScriptVar:
    """A variable refreshed every ``interval`` seconds by running ``command``.

    ``command`` is either a shell command or a function computing the value.
    Polling only happens while ``run_while_expr`` evaluates to true.
    """

    name: str
    command: VarSource
    interval: float
    initial_value: Any | None = None
    run_while_expr: Expr = field(default_factory=_always_true)


@dataclass
class ListenScriptVar:
    """A variable updated with every line a long-running shell command prints."""

    name: str
    command: str
    initial_value: Any = ""


ScriptVarDefinition = Union[PollScriptVar, ListenScriptVar]


class ScriptVarFailed(DiagError):
    """The script of a variable exited unsuccessfully."""


def create_script_var_failed_warn(var_name: str, error_output: str) -> ScriptVarFailed:
    """Build the warning reported when the script of ``var_name`` fails."""
    return ScriptVarFailed(
        f"The script for the `{var_name}`-variable exited unsuccessfully",
        severity="warning",
        notes=(error_output,),
    )


def run_command(cmd: str) -> str:
    """Run ``cmd`` with /bin/sh and return its output without surrounding newlines.

    Raises RuntimeError carrying the command's stderr if it exits unsuccessfully.
    """
    logger.debug("Running command: %s", cmd)
    completed = subprocess.run(["/bin/sh", "-c", cmd], capture_output=True, check=False)
    if completed.returncode != 0:
        raise RuntimeError(f"Failed with output:\n{completed.stderr.decode('utf-8')}")
    return completed.stdout.decode("utf-8").strip("\n")


def initial_value(var: ScriptVarDefinition) -> Any:
    """Compute the value a script variable has before it first runs."""
    if isinstance(var, ListenScriptVar):
        return var.initial_value
    if var.initial_value is not None:
        return var.initial_value
    if callable(var.command):
        try:
            return var.command()
        except Exception as err:
            raise RuntimeError(f"Failed to compute initial value for {var.name}") from err
    try:
        return run_command(var.command)
    except Exception as err:
        raise create_script_var_failed_warn(var.name, str(err)) from err