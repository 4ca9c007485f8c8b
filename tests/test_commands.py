import pytest

from ewwcore.commands import CommandKind, DaemonCommand
from ewwcore.daemon_response import create_pair


def test_update_vars_keeps_mappings():
    command = DaemonCommand(CommandKind.UPDATE_VARS, mappings=[("foo", "bar")])
    assert command.mappings == [("foo", "bar")]
    assert command.responds is False


def test_responding_command_needs_sender():
    with pytest.raises(ValueError, match="PRINT_WINDOWS"):
        DaemonCommand(CommandKind.PRINT_WINDOWS)


def test_non_responding_command_rejects_sender():
    sender, _ = create_pair()
    with pytest.raises(ValueError, match="KILL_SERVER"):
        DaemonCommand(CommandKind.KILL_SERVER, sender=sender)


def test_open_window_needs_name():
    sender, _ = create_pair()
    with pytest.raises(ValueError):
        DaemonCommand(CommandKind.OPEN_WINDOW, sender=sender)


def test_get_var_needs_name():
    sender, _ = create_pair()
    with pytest.raises(ValueError):
        DaemonCommand(CommandKind.GET_VAR, sender=sender)


def test_sender_reaches_receiver():
    sender, receiver = create_pair()
    command = DaemonCommand(CommandKind.OPEN_WINDOW, sender=sender, window_name="bar", should_toggle=True)
    assert command.responds is True
    command.sender.send_success("done")
    response = receiver.get_nowait()
    assert response.ok is True
    assert response.message == "done"


def test_default_lists_are_independent():
    first = DaemonCommand(CommandKind.CLOSE_ALL)
    second = DaemonCommand(CommandKind.CLOSE_ALL)
    first.windows.append("a")
    assert second.windows == []


@pytest.mark.parametrize(
    "kind",
    [CommandKind.NO_OP, CommandKind.OPEN_INSPECTOR, CommandKind.KILL_SERVER, CommandKind.CLOSE_ALL],
)
def test_fire_and_forget_kinds(kind):
    assert DaemonCommand(kind).responds is False