"""
Point in time readouts of an e-graph, as handed from the engine to the renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

import graphviz

from .keys import VertexKey

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


__all__ = ["EClassId", "ENode", "ENodeId", "GraphSnapshot", "InvariantViolation"]

EClassId: TypeAlias = int
ENodeId: TypeAlias = int


class InvariantViolation(RuntimeError):
    """
    Raised when the engine, the renderer or the controller break their contract with each other.

    This is never a user error and is not meant to be caught.
    """


@dataclass(frozen=True)
class ENode:
    label: str
    children: tuple[EClassId, ...] = ()


@dataclass(frozen=True)
class GraphSnapshot:
    """
    Mapping of e-class ids to their members, in order. Every child id must be a key of the mapping.
    """

    classes: Mapping[EClassId, tuple[tuple[ENodeId, ENode], ...]] = field(default_factory=dict)

    @classmethod
    def create(cls, classes: Mapping[EClassId, Iterable[tuple[ENodeId, ENode]]]) -> GraphSnapshot:
        return cls({eclass: tuple(members) for eclass, members in classes.items()})

    def __iter__(self) -> Iterator[tuple[EClassId, tuple[tuple[ENodeId, ENode], ...]]]:
        return iter(self.classes.items())

    def __len__(self) -> int:
        return len(self.classes)

    @property
    def n_nodes(self) -> int:
        return sum(len(members) for members in self.classes.values())

    def check(self) -> None:
        """
        Raises if any e-node refers to a class that is not in the snapshot.
        """
        for eclass, members in self.classes.items():
            for enode_id, enode in members:
                for child in enode.children:
                    if child not in self.classes:
                        msg = f"E-node {enode_id} in class {eclass} refers to missing class {child}"
                        raise InvariantViolation(msg)

    def to_graphviz(self) -> graphviz.Digraph:
        """
        Static rendering with the same vertices and edges the reconciler would produce.
        """
        dot = graphviz.Digraph()
        for eclass, members in self.classes.items():
            class_name = str(VertexKey.eclass(eclass))
            dot.node(class_name, label=class_name, shape="circle")
            for enode_id, enode in members:
                node_name = str(VertexKey.enode(enode_id))
                dot.node(node_name, label=enode.label, shape="box")
                dot.edge(class_name, node_name, arrowhead="none", penwidth="3")
                for position, child in enumerate(enode.children):
                    dot.edge(node_name, str(VertexKey.eclass(child)), label=str(position))
        return dot
