import pytest

from ewwcore.scope import Scope
from ewwcore.scope_graph_internal import (
    Concat,
    Inherits,
    Literal,
    ProvidedAttr,
    ScopeGraphInternal,
    VarRef,
)


def _graph_with_root():
    graph = ScopeGraphInternal()
    root = graph.add_scope(Scope("global", None, {"g": "hi"}))
    return graph, root


def test_literal_expression():
    expr = Literal("static")
    assert expr.eval({}) == "static"
    assert expr.collect_var_refs() == []
    assert expr.references_var("static") is False


def test_var_ref_expression():
    expr = VarRef("x")
    assert expr.eval({"x": "value"}) == "value"
    assert expr.collect_var_refs() == ["x"]
    assert expr.references_var("x") is True
    assert expr.references_var("y") is False


def test_var_ref_missing_variable_raises():
    with pytest.raises(LookupError):
        VarRef("x").eval({})


def test_concat_expression():
    expr = Concat([VarRef("arg_1"), Literal("static_value")])
    assert expr.eval({"arg_1": "pog"}) == "pogstatic_value"
    assert expr.collect_var_refs() == ["arg_1"]
    assert expr.references_var("arg_1") is True
    assert expr.references_var("other") is False


def test_add_scope_assigns_fresh_indices_and_node_index():
    graph, root = _graph_with_root()
    child = graph.add_scope(Scope("child", root))
    assert child == root + 1
    assert graph.scope_at(child).node_index == child
    assert graph.hierarchy_relations.get_parent_of(child) == root
    assert graph.hierarchy_relations.get_parent_of(root) is None


def test_clear_keeps_indices_unique():
    graph, root = _graph_with_root()
    graph.clear()
    assert graph.scope_at(root) is None
    new_root = graph.add_scope(Scope("global", None))
    assert new_root > root


def test_remove_scope_removes_descendants():
    graph, root = _graph_with_root()
    window = graph.add_scope(Scope("window", root))
    widget = graph.add_scope(Scope("widget", window))
    graph.add_inheritance_relation(window, root)
    graph.add_inheritance_relation(widget, root)
    graph.remove_scope(window)
    assert graph.scope_at(window) is None
    assert graph.scope_at(widget) is None
    assert graph.scope_at(root) is not None
    assert graph.subscope_edges_of(root) == []
    assert graph.descendant_edges_of(root) == []
    graph.validate()


def test_add_inheritance_twice_raises():
    graph, root = _graph_with_root()
    child = graph.add_scope(Scope("child", root))
    graph.add_inheritance_relation(child, root)
    with pytest.raises(ValueError):
        graph.add_inheritance_relation(child, root)


def test_references_and_subscopes_referencing():
    graph, root = _graph_with_root()
    a = graph.add_scope(Scope("a", root))
    b = graph.add_scope(Scope("b", root))
    graph.add_inheritance_relation(a, root)
    graph.add_inheritance_relation(b, root)
    graph.add_reference_to_inherits_edge(a, "g")
    assert graph.subscopes_referencing(root, "g") == [a]
    assert graph.superscope_of(a) == root
    assert graph.superscope_edge_of(a) == (root, Inherits({"g"}))
    graph.validate()


def test_reference_without_superscope_raises():
    graph, root = _graph_with_root()
    with pytest.raises(LookupError):
        graph.add_reference_to_inherits_edge(root, "g")


def test_validate_detects_inaccessible_reference():
    graph, root = _graph_with_root()
    child = graph.add_scope(Scope("child", root))
    graph.add_inheritance_relation(child, root)
    graph.add_reference_to_inherits_edge(child, "missing")
    with pytest.raises(ValueError):
        graph.validate()


def test_provided_attrs_are_found_by_variable():
    graph, root = _graph_with_root()
    child = graph.add_scope(Scope("child", root))
    edge = ProvidedAttr("arg", VarRef("g"))
    graph.register_scope_provides_attr(root, child, edge)
    assert graph.scopes_getting_attr_using(root, "g") == [(child, edge)]
    assert graph.scopes_getting_attr_using(root, "other") == []
    assert graph.descendant_edges_of(root) == [(child, [edge])]


def test_provides_attr_from_wrong_ancestor_raises():
    graph, root = _graph_with_root()
    child = graph.add_scope(Scope("child", root))
    other = graph.add_scope(Scope("other", None))
    with pytest.raises(RuntimeError):
        graph.register_scope_provides_attr(other, child, ProvidedAttr("arg", Literal("x")))


def test_visualize_is_a_dot_digraph():
    graph, root = _graph_with_root()
    child = graph.add_scope(Scope("child", root))
    graph.add_inheritance_relation(child, root)
    graph.add_reference_to_inherits_edge(child, "g")
    graph.register_scope_provides_attr(root, child, ProvidedAttr("arg", VarRef("g")))
    output = graph.visualize()
    assert output.startswith("digraph {\n")
    assert output.endswith("}")
    assert '[label="ancestor"]' in output
    assert 'color = "red"' in output
    assert "inherits({'g'})" in output