"""Responses the daemon sends back to a client as the result of a command."""

from __future__ import annotations

import queue
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import format_error

DaemonResponseReceiver = queue.SimpleQueue


@dataclass(frozen=True)
class DaemonResponse:
    ok: bool
    message: str

    @classmethod
    def success(cls, message: str) -> DaemonResponse:
        return cls(True, message)

    @classmethod
    def failure(cls, message: str) -> DaemonResponse:
        return cls(False, message)

    def __str__(self) -> str:
        return self.message


class DaemonResponseSender:
    """The sending end of a response channel."""

    def __init__(self, channel: queue.SimpleQueue) -> None:
        self._channel = channel

    def __repr__(self) -> str:
        return "DaemonResponseSender()"

    def send_success(self, message: str) -> None:
        self._channel.put(DaemonResponse.success(message))

    def send_failure(self, message: str) -> None:
        self._channel.put(DaemonResponse.failure(message))

    def respond_with_error_list(self, errors: Iterable[BaseException]) -> None:
        """Respond with failure listing all errors, or with success if there are none."""
        message = "\n".join(format_error(e) for e in errors)
        if message:
            self._respond_with_error_msg(message)
        else:
            self.send_success("")

    def respond_with_result(self, error: BaseException | None) -> None:
        """Respond with success if ``error`` is None, otherwise with its formatted message."""
        if error is None:
            self.send_success("")
        else:
            self._respond_with_error_msg(format_error(error))

    def _respond_with_error_msg(self, message: str) -> None:
        print(f"Action failed with error: {message}")
        self.send_failure(message)


def create_pair() -> tuple[DaemonResponseSender, DaemonResponseReceiver]:
    """Create a connected sender and receiver."""
    channel: queue.SimpleQueue = queue.SimpleQueue()
    return DaemonResponseSender(channel), channel