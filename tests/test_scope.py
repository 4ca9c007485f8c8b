from ewwcore.scope import Listener, Scope


def test_new_scope_has_no_listeners_and_keeps_data():
    scope = Scope("window", None, {"foo": "bar"})
    assert scope.listeners == {}
    assert scope.data == {"foo": "bar"}
    assert scope.ancestor is None
    assert scope.node_index == 0


def test_scope_default_data_is_not_shared():
    a = Scope("a", None)
    b = Scope("b", None)
    a.data["x"] = "1"
    assert b.data == {}


def test_add_listener_groups_by_variable():
    scope = Scope("w", 0)
    first = Listener(["x"], lambda graph, values: None)
    second = Listener(["x", "y"], lambda graph, values: None)
    scope.add_listener("x", first)
    scope.add_listener("x", second)
    scope.add_listener("y", second)
    assert scope.listeners["x"] == [first, second]
    assert scope.listeners["y"] == [second]


def test_listeners_compare_by_identity():
    f = lambda graph, values: None  # noqa: E731
    one = Listener(["x"], f)
    other = Listener(["x"], f)
    assert one == one
    assert (one == other) is False


def test_listener_callback_receives_values():
    seen = {}
    listener = Listener(["x"], lambda graph, values: seen.update(values))
    listener.f(None, {"x": "hello"})
    assert seen == {"x": "hello"}


def test_listener_repr_hides_function():
    listener = Listener(["a", "b"], lambda graph, values: None)
    assert repr(listener) == "Listener(needed_variables=['a', 'b'], f='function')"