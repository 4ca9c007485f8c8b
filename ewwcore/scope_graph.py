"""A graph of scopes in which variables are defined, inherited and provided as attributes.

Terminology:

* Subscope / superscope: a subscope *inherits* from its superscope and so has access
  to the superscope's variables. The variables a subscope takes from its superscope
  are recorded on the inheritance edge. Inheritance is transitive, and every step of
  a transitive reference is recorded explicitly.
* Descendant / ancestor: descendants are scopes used *within* an ancestor scope.
  An ancestor may provide attributes, computed from expressions, to its descendants.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .errors import print_error
from .scope import Listener, Scope
from .scope_graph_internal import Expr, ProvidedAttr, ScopeGraphInternal

_ROOT_NAME = "global"


class ScopeGraph:
    """Scopes linked by inheritance and hierarchy, propagating value changes to listeners."""

    def __init__(self, graph: ScopeGraphInternal, root_index: int) -> None:
        self.graph = graph
        self.root_index = root_index

    def __repr__(self) -> str:
        return f"ScopeGraph(graph={self.graph!r}, root_index={self.root_index})"

    @classmethod
    def from_global_vars(cls, variables: Mapping[str, Any]) -> ScopeGraph:
        """Create a graph holding only the global scope with the given variables."""
        graph = ScopeGraphInternal()
        root_index = graph.add_scope(Scope(name=_ROOT_NAME, ancestor=None, data=dict(variables)))
        return cls(graph, root_index)

    def update_global_value(self, var_name: str, value: Any) -> None:
        self.update_value(self.root_index, var_name, value)

    def clear(self, variables: Mapping[str, Any]) -> None:
        """Drop all state and start again with a fresh global scope."""
        self.graph.clear()
        self.root_index = self.graph.add_scope(Scope(name=_ROOT_NAME, ancestor=None, data=dict(variables)))

    def remove_scope(self, scope_index: int) -> None:
        self.graph.remove_scope(scope_index)

    def validate(self) -> None:
        self.graph.validate()

    def visualize(self) -> str:
        return self.graph.visualize()

    def currently_used_globals(self) -> set[str]:
        return self.variables_used_in_self_or_subscopes_of(self.root_index)

    def currently_unused_globals(self) -> set[str]:
        root = self.graph.scope_at(self.root_index)
        if root is None:
            raise RuntimeError("No root scope in graph")
        return set(root.data) - self.currently_used_globals()

    def scope_at(self, index: int) -> Scope | None:
        return self.graph.scope_at(index)

    def evaluate_in_scope(self, index: int, expr: Expr) -> Any:
        """Evaluate ``expr`` with the variables visible in scope ``index``.

        Raises LookupError if a referenced variable is not available. Any other
        evaluation failure is reported and yields an empty string.
        """
        values = self.lookup_variables_in_scope(index, expr.collect_var_refs())
        try:
            return expr.eval(values)
        except Exception as err:  # noqa: BLE001 - evaluation errors are reported, not fatal
            print_error(err)
            return ""

    def register_new_scope(
        self,
        name: str,
        superscope: int | None,
        calling_scope: int,
        attributes: Mapping[str, Expr],
    ) -> int:
        """Add a scope created by ``calling_scope``, optionally inheriting from ``superscope``.

        Attribute expressions are evaluated in the calling scope; attributes that
        reference variables are registered so that later changes propagate.
        """
        # Evaluate everything first so that a failure leaves the graph untouched.
        scope_variables = {
            attr_name: self.evaluate_in_scope(calling_scope, expression)
            for attr_name, expression in attributes.items()
        }

        new_index = self.graph.add_scope(Scope(name=name, ancestor=calling_scope, data=scope_variables))
        if superscope is not None:
            self.graph.add_inheritance_relation(new_index, superscope)

        for attr_name, expression in attributes.items():
            var_refs = expression.collect_var_refs()
            if var_refs:
                self.graph.register_scope_provides_attr(
                    calling_scope, new_index, ProvidedAttr(attr_name=attr_name, expression=expression)
                )
                for used_variable in var_refs:
                    self.register_scope_referencing_variable(calling_scope, used_variable)

        self.validate()
        return new_index

    def register_listener(self, scope_index: int, listener: Listener) -> None:
        """Register ``listener`` on the scope and call it once with the current values.

        A listener that needs no variables is only called once and not stored.
        """
        if not listener.needed_variables:
            self._call_listener(listener, {})
            return

        for required_var in listener.needed_variables:
            self.register_scope_referencing_variable(scope_index, required_var)
        scope = self.graph.scope_at(scope_index)
        if scope is None:
            raise LookupError("Scope not in graph")
        for required_var in listener.needed_variables:
            scope.add_listener(required_var, listener)

        values = self.lookup_variables_in_scope(scope_index, listener.needed_variables)
        self._call_listener(listener, values)
        self.validate()

    def register_scope_referencing_variable(self, scope_index: int, var_name: str) -> None:
        """Record that a scope uses ``var_name``, along the whole inheritance chain if needed."""
        current = scope_index
        while True:
            scope = self.graph.scope_at(current)
            if scope is None:
                raise LookupError("scope not in graph")
            if var_name in scope.data:
                return
            superscope = self.graph.superscope_of(current)
            if superscope is None:
                raise LookupError(f"Variable {var_name} not in scope")
            self.graph.add_reference_to_inherits_edge(current, var_name)
            current = superscope

    def update_value(self, original_scope_index: int, updated_var: str, new_value: Any) -> None:
        """Set a variable in the closest scope defining it and propagate the change."""
        scope_index = self.find_scope_with_variable(original_scope_index, updated_var)
        if scope_index is None:
            raise LookupError(f"Variable {updated_var} not in scope")
        scope = self.graph.scope_at(scope_index)
        if scope is not None and updated_var in scope.data:
            scope.data[updated_var] = new_value
        self.notify_value_changed(scope_index, updated_var)
        self.graph.validate()

    def notify_value_changed(self, scope_index: int, updated_var: str) -> None:
        """Re-evaluate dependent attributes, call listeners, and recurse into referencing subscopes."""
        edges = list(self.graph.scopes_getting_attr_using(scope_index, updated_var))
        for referencing_scope, edge in edges:
            try:
                value = self.evaluate_in_scope(scope_index, edge.expression)
                self.update_value(referencing_scope, edge.attr_name, value)
            except Exception as err:  # noqa: BLE001 - one failing attribute must not stop the rest
                print_error(err)

        self._call_listeners_in_scope(scope_index, updated_var)

        for subscope in self.graph.subscopes_referencing(scope_index, updated_var):
            self.notify_value_changed(subscope, updated_var)

    def _call_listeners_in_scope(self, scope_index: int, updated_var: str) -> None:
        scope = self.graph.scope_at(scope_index)
        if scope is None:
            raise LookupError("Scope not in graph")
        for listener in list(scope.listeners.get(updated_var, ())):
            values = self.lookup_variables_in_scope(scope_index, listener.needed_variables)
            self._call_listener(listener, values)

    def _call_listener(self, listener: Listener, values: dict[str, Any]) -> None:
        try:
            listener.f(self, values)
        except Exception as err:  # noqa: BLE001 - listener failures are reported
            wrapped = RuntimeError("Error while updating UI after state change")
            wrapped.__cause__ = err
            print_error(wrapped)

    def find_scope_with_variable(self, index: int, var_name: str) -> int | None:
        """Return the closest scope, following inheritance, that defines ``var_name``."""
        current: int | None = index
        while current is not None:
            scope = self.graph.scope_at(current)
            if scope is None:
                return None
            if var_name in scope.data:
                return current
            current = self.graph.superscope_of(current)
        return None

    def lookup_variable_in_scope(self, index: int, var_name: str) -> Any | None:
        """Return the value of ``var_name`` as seen from scope ``index``, or None if unavailable."""
        found = self.find_scope_with_variable(index, var_name)
        if found is None:
            return None
        scope = self.graph.scope_at(found)
        return None if scope is None else scope.data[var_name]

    def variables_used_in_self_or_subscopes_of(self, index: int) -> set[str]:
        """All variables used by the scope or its descendants; empty for an unknown index."""
        scope = self.scope_at(index)
        if scope is None:
            return set()

        variables: set[str] = set(scope.listeners)
        descendant_edges = self.graph.descendant_edges_of(index)
        for _, provided_attrs in descendant_edges:
            for attr in provided_attrs:
                variables.update(attr.expression.collect_var_refs())
        for _, edge in self.graph.subscope_edges_of(index):
            variables.update(edge.references)

        superscope_edge = self.graph.superscope_edge_of(index)
        if superscope_edge is not None:
            variables.update(superscope_edge[1].references)

        for descendant, _ in descendant_edges:
            used = self.variables_used_in_self_or_subscopes_of(descendant)
            descendant_scope = self.scope_at(descendant)
            shadowed = set(descendant_scope.data) if descendant_scope is not None else set()
            variables.update(used - shadowed)

        return variables

    def lookup_variables_in_scope(self, scope_index: int, names: Iterable[str]) -> dict[str, Any]:
        """Look up several variables; raise LookupError if any is unavailable."""
        result: dict[str, Any] = {}
        for name in names:
            found = self.find_scope_with_variable(scope_index, name)
            scope = None if found is None else self.graph.scope_at(found)
            if scope is None:
                raise LookupError(f"Variable {name} neither in scope nor any superscope")
            result[name] = scope.data[name]
        return result