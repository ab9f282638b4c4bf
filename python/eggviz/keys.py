"""
Structured identities for the vertices and edges of a rendered e-graph.

Class and node vertices live in separate namespaces, so a class and a node sharing a raw id never collide, and edge
keys are built from vertex keys rather than concatenated strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .snapshot import EClassId, ENodeId

__all__ = ["EdgeKey", "VertexKey"]


@dataclass(frozen=True, order=True)
class VertexKey:
    kind: Literal["class", "node"]
    id: EClassId | ENodeId

    @classmethod
    def eclass(cls, id: EClassId) -> VertexKey:
        return cls("class", id)

    @classmethod
    def enode(cls, id: ENodeId) -> VertexKey:
        return cls("node", id)

    def __str__(self) -> str:
        return f"{'C' if self.kind == 'class' else 'N'}{self.id}"


@dataclass(frozen=True, order=True)
class EdgeKey:
    """
    A membership edge (class to node) has no position, a child edge (node to class) has the argument index.

    Both endpoints are compared before the position, and the two edge kinds never share an origin kind, so ordering
    never has to compare a position against None.
    """

    origin: VertexKey
    destination: VertexKey
    position: int | None = None

    @classmethod
    def membership(cls, eclass: EClassId, enode: ENodeId) -> EdgeKey:
        return cls(VertexKey.eclass(eclass), VertexKey.enode(enode))

    @classmethod
    def child(cls, enode: ENodeId, eclass: EClassId, position: int) -> EdgeKey:
        return cls(VertexKey.enode(enode), VertexKey.eclass(eclass), position)

    def __str__(self) -> str:
        base = f"{self.origin}:{self.destination}"
        return base if self.position is None else f"{base}${self.position}"
