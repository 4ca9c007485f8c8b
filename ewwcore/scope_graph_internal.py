"""Expressions and the raw graph structure underlying the scope graph."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .one_to_n_map import OneToNElementsMap
from .scope import Scope

logger = logging.getLogger("ewwcore")


@dataclass(frozen=True)
class Literal:
    """A constant value."""

    value: Any

    def collect_var_refs(self) -> list[str]:
        return []

    def references_var(self, name: str) -> bool:
        return False

    def eval(self, values: Mapping[str, Any]) -> Any:
        return self.value


@dataclass(frozen=True)
class VarRef:
    """A reference to a variable by name."""

    name: str

    def collect_var_refs(self) -> list[str]:
        return [self.name]

    def references_var(self, name: str) -> bool:
        return self.name == name

    def eval(self, values: Mapping[str, Any]) -> Any:
        try:
            return values[self.name]
        except KeyError:
            raise LookupError(f"Unknown variable {self.name}") from None


@dataclass(frozen=True)
class Concat:
    """String concatenation of several expressions."""

    parts: tuple[Expr, ...]

    def __init__(self, parts) -> None:
        object.__setattr__(self, "parts", tuple(parts))

    def collect_var_refs(self) -> list[str]:
        return [name for part in self.parts for name in part.collect_var_refs()]

    def references_var(self, name: str) -> bool:
        return any(part.references_var(name) for part in self.parts)

    def eval(self, values: Mapping[str, Any]) -> str:
        return "".join(str(part.eval(values)) for part in self.parts)


Expr = Union[Literal, VarRef, Concat]


@dataclass
class ProvidedAttr:
    """An ancestor provides ``attr_name``, computed by ``expression``, to a descendant."""

    attr_name: str
    expression: Expr


@dataclass
class Inherits:
    """A subscope inherits from its superscope, referencing the variables in ``references``."""

    references: set[str] = field(default_factory=set)


def _set_repr(items: set[str]) -> str:
    return "{" + ", ".join(repr(item) for item in sorted(items)) + "}"


def _index_repr(index: int) -> str:
    return f"ScopeIndex({index})"


class ScopeGraphInternal:
    """Scopes plus two relations between them: hierarchy (ancestor to descendant) and inheritance.

    Unlike the public scope graph this may be inconsistent while changes are under way.
    """

    def __init__(self) -> None:
        self.last_index = 0
        self.scopes: dict[int, Scope] = {}
        self.hierarchy_relations: OneToNElementsMap[int, list[ProvidedAttr]] = OneToNElementsMap()
        self.inheritance_relations: OneToNElementsMap[int, Inherits] = OneToNElementsMap()

    def __repr__(self) -> str:
        return (
            f"ScopeGraphInternal(last_index={self.last_index}, scopes={self.scopes!r}, "
            f"hierarchy_relations={self.hierarchy_relations!r}, "
            f"inheritance_relations={self.inheritance_relations!r})"
        )

    def clear(self) -> None:
        self.scopes.clear()
        self.inheritance_relations.clear()
        self.hierarchy_relations.clear()

    def add_scope(self, scope: Scope) -> int:
        """Store a scope under a fresh index, linking it to its ancestor if it has one."""
        idx = self.last_index
        if scope.ancestor is not None:
            try:
                self.hierarchy_relations.insert(idx, scope.ancestor, [])
            except ValueError:
                pass
        scope.node_index = idx
        self.scopes[idx] = scope
        self.last_index += 1
        return idx

    def descendant_edges_of(self, index: int) -> list[tuple[int, list[ProvidedAttr]]]:
        return self.hierarchy_relations.get_children_edges_of(index)

    def subscope_edges_of(self, index: int) -> list[tuple[int, Inherits]]:
        return self.inheritance_relations.get_children_edges_of(index)

    def superscope_edge_of(self, index: int) -> tuple[int, Inherits] | None:
        return self.inheritance_relations.get_parent_edge_of(index)

    def remove_scope(self, index: int) -> None:
        """Remove a scope together with all its descendants."""
        self.scopes.pop(index, None)
        for descendant in list(self.hierarchy_relations.parent_to_children.get(index, ())):
            self.remove_scope(descendant)
        self.hierarchy_relations.remove(index)
        self.inheritance_relations.remove(index)

    def add_inheritance_relation(self, a: int, b: int) -> None:
        """Make ``a`` a subscope of ``b``."""
        self.inheritance_relations.insert(a, b, Inherits())

    def register_scope_provides_attr(self, a: int, b: int, edge: ProvidedAttr) -> None:
        """Register that scope ``a`` provides an attribute to its descendant ``b``."""
        entry = self.hierarchy_relations.get_parent_edge_of(b)
        if entry is None:
            logger.error(
                "Tried to register a provided attribute edge between two scopes "
                "that are not connected in the hierarchy map"
            )
            return
        superscope, edges = entry
        if superscope != a:
            raise RuntimeError(
                "Hierarchy map had a different superscope for a given scope than what was given here"
            )
        edges.append(edge)

    def scope_at(self, index: int) -> Scope | None:
        return self.scopes.get(index)

    def subscopes_referencing(self, index: int, var_name: str) -> list[int]:
        """Subscopes of ``index`` whose inheritance edge references ``var_name`` directly."""
        return [
            scope for scope, edge in self.inheritance_relations.get_children_edges_of(index)
            if var_name in edge.references
        ]

    def superscope_of(self, index: int) -> int | None:
        return self.inheritance_relations.get_parent_of(index)

    def scopes_getting_attr_using(self, index: int, var_name: str) -> list[tuple[int, ProvidedAttr]]:
        """Descendants of ``index`` that are provided an attribute whose expression uses ``var_name``."""
        return [
            (child, edge)
            for child, edges in self.hierarchy_relations.get_children_edges_of(index)
            for edge in edges
            if edge.expression.references_var(var_name)
        ]

    def add_reference_to_inherits_edge(self, subscope: int, var_name: str) -> None:
        """Record that ``subscope`` references ``var_name`` from its superscope."""
        entry = self.inheritance_relations.get_parent_edge_of(subscope)
        if entry is None:
            raise LookupError(f"Given scope {_index_repr(subscope)} does not have any superscope")
        entry[1].references.add(var_name)

    def validate(self) -> None:
        """Raise ValueError if the relations refer to missing scopes or inaccessible variables."""
        for child, (parent, _edges) in self.hierarchy_relations.child_to_parent.items():
            if child not in self.scopes:
                raise ValueError("hierarchy_relations lists key that is not in graph")
            if parent not in self.scopes:
                raise ValueError("hierarchy_relations values lists scope that is not in graph")

        inheritance = self.inheritance_relations.child_to_parent
        for child, (parent_idx, edge) in inheritance.items():
            if child not in self.scopes:
                raise ValueError("inheritance_relations lists key that is not in graph")
            parent_scope = self.scopes.get(parent_idx)
            if parent_scope is None:
                raise ValueError("inheritance_relations values lists scope that is not in graph")
            parent_edge = inheritance.get(parent_idx)
            for var in edge.references:
                has_access = var in parent_scope.data or (
                    parent_edge is not None and var in parent_edge[1].references
                )
                if not has_access:
                    raise ValueError("scope inherited variable that parent scope doesn't have access to")

        self.hierarchy_relations.validate()
        self.inheritance_relations.validate()

    def visualize(self) -> str:
        """Render the graph in graphviz dot format."""
        lines = ["digraph {"]
        for index, scope in self.scopes.items():
            data = [(k, v) for k, v in scope.data.items() if not k.startswith("EWW")]
            listeners = [
                f"on {var}: {[repr(list(l.needed_variables)) for l in ls]!r}"
                for var, ls in scope.listeners.items()
            ]
            label = f"data: {data!r}, listeners: {listeners!r}".replace('"', "'")
            lines.append(f'  "{_index_repr(index)}"[label="{scope.name}\\n{label}"]')
            if scope.ancestor is not None:
                lines.append(f'  "{_index_repr(scope.ancestor)}" -> "{_index_repr(index)}"[label="ancestor"]')

        for child, (parent, edges) in self.hierarchy_relations.child_to_parent.items():
            for edge in edges:
                label = f":{edge.attr_name} `{edge.expression!r}`".replace('"', "'")
                lines.append(
                    f'  "{_index_repr(parent)}" -> "{_index_repr(child)}" [color = "red", label = "{label}"]'
                )
        for child, (parent, edge) in self.inheritance_relations.child_to_parent.items():
            label = f"inherits({_set_repr(edge.references)})".replace('"', "'")
            lines.append(
                f'  "{_index_repr(child)}" -> "{_index_repr(parent)}" [color = "blue", label = "{label}"]'
            )
        return "\n".join(lines) + "\n}"