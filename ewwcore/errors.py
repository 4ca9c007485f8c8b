"""Diagnostic errors and the shared error formatting used across the daemon."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable

logger = logging.getLogger("ewwcore")


class DiagError(Exception):
    """An error carrying a diagnostic: a severity, a message and optional notes."""

    def __init__(self, message: str, *, severity: str = "error", notes: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.notes = tuple(notes)

    def __str__(self) -> str:
        return self.message


def _chain(err: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = err
    while current is not None and current not in chain:
        chain.append(current)
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None
    return chain


def _find_diagnostic(err: BaseException) -> DiagError | None:
    return next((e for e in _chain(err) if isinstance(e, DiagError)), None)


def _stringify_diagnostic(diag: DiagError) -> str:
    lines = [f"{diag.severity}: {diag.message}"]
    for note in diag.notes:
        note_lines = note.split("\n")
        lines.append(f"  → {note_lines[0]}")
        lines.extend(f"    {extra}" for extra in note_lines[1:])
    return "\n".join(lines)


def _message(err: BaseException) -> str:
    return str(err) or type(err).__name__


def _debug_format(err: BaseException) -> str:
    head, *causes = _chain(err)
    text = _message(head)
    if not causes:
        return text
    if len(causes) == 1:
        return f"{text}\n\nCaused by:\n    {_message(causes[0])}"
    listed = "\n".join(f"    {i}: {_message(c)}" for i, c in enumerate(causes))
    return f"{text}\n\nCaused by:\n{listed}"


def format_error(err: BaseException) -> str:
    """Render an error: as a diagnostic if it carries one, otherwise with its cause chain."""
    diag = _find_diagnostic(err)
    if diag is not None:
        return _stringify_diagnostic(diag)
    return _debug_format(err)


def print_error(err: BaseException) -> None:
    """Report an error: diagnostics go to stderr, anything else to the log."""
    diag = _find_diagnostic(err)
    if diag is not None:
        print(_stringify_diagnostic(diag), file=sys.stderr)
    else:
        logger.error("%s", _debug_format(err))