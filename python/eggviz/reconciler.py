"""
Keeps a rendered graph in sync with a sequence of e-graph snapshots.

Each reconciliation makes one pass over the snapshot, upserting the vertex of every e-class and e-node and the edges
between them, then sweeps away everything that was not seen. An element whose key survives between snapshots is
only ever updated in place, and only when its attributes changed, so the layout of the rendered graph is not
disturbed by redraws.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

from . import config
from .keys import EdgeKey, VertexKey

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .snapshot import EClassId, ENode, ENodeId, GraphSnapshot


__all__ = [
    "Attributes",
    "GraphReconciler",
    "ReconcileReport",
    "RenderSurface",
    "VisualGraph",
    "child_edge",
    "class_vertex",
    "color_wheel",
    "membership_edge",
    "node_vertex",
]

logger = logging.getLogger(__name__)

Attributes: TypeAlias = dict[str, Any]


class RenderSurface(Protocol):
    """
    Incremental graph renderer. Keys are the string forms of vertex and edge keys.
    """

    def upsert_vertex(self, key: str, attributes: Mapping[str, Any]) -> None: ...

    def upsert_edge(self, key: str, attributes: Mapping[str, Any]) -> None: ...

    def remove_vertex(self, key: str) -> None: ...

    def remove_edge(self, key: str) -> None: ...


def color_wheel(id: int) -> str:
    """
    Color for a class id, rotating through the three channels and getting lighter as ids grow.
    """
    offset = 128 + sum(2 ** (6 - i) for i in range(-(-id // 3)))
    channels = [int(offset)] * 3
    # rotation 0 is blue, 1 is red, 2 is green
    channel = {0: 2, 1: 0, 2: 1}[id % 3]
    channels[channel] = (channels[channel] + 127) % 256
    red, green, blue = channels
    return f"rgb({red}, {green}, {blue})"


def class_vertex(eclass: EClassId) -> Attributes:
    key = VertexKey.eclass(eclass)
    return {"label": str(key), "group": eclass, **config.CLASS_VERTEX_STYLE}


def node_vertex(enode: ENode, eclass: EClassId) -> Attributes:
    attributes = {"label": enode.label, "group": eclass, **config.NODE_VERTEX_STYLE}
    if config.COLOR_BY_CLASS:
        attributes["color"] = color_wheel(eclass)
    return attributes


def membership_edge(eclass: EClassId, enode_id: ENodeId) -> Attributes:
    return {
        "from": str(VertexKey.eclass(eclass)),
        "to": str(VertexKey.enode(enode_id)),
        "label": "",
        **config.MEMBERSHIP_EDGE_STYLE,
    }


def child_edge(enode_id: ENodeId, child: EClassId, position: int) -> Attributes:
    return {
        "from": str(VertexKey.enode(enode_id)),
        "to": str(VertexKey.eclass(child)),
        "label": str(position),
        **config.CHILD_EDGE_STYLE,
    }


@dataclass
class VisualGraph:
    """
    What is currently on the render surface, with the attributes last sent for each element.
    """

    vertices: dict[VertexKey, Attributes] = field(default_factory=dict)
    edges: dict[EdgeKey, Attributes] = field(default_factory=dict)


@dataclass
class ReconcileReport:
    added: list[VertexKey | EdgeKey] = field(default_factory=list)
    updated: list[VertexKey | EdgeKey] = field(default_factory=list)
    removed: list[VertexKey | EdgeKey] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated or self.removed)

    def __str__(self) -> str:
        return f"+{len(self.added)} ~{len(self.updated)} -{len(self.removed)}"


class GraphReconciler:
    def __init__(self, surface: RenderSurface) -> None:
        self.surface = surface
        self.graph = VisualGraph()

    def reconcile(self, snapshot: GraphSnapshot) -> ReconcileReport:
        """
        Updates the surface so it shows exactly the snapshot, sending only the changes.

        Raises `InvariantViolation` before touching the surface if the snapshot refers to a missing class.
        """
        snapshot.check()
        report = ReconcileReport()
        seen_vertices: set[VertexKey] = set()
        seen_edges: set[EdgeKey] = set()
        for eclass, members in snapshot:
            class_key = VertexKey.eclass(eclass)
            self._upsert_vertex(class_key, class_vertex(eclass), report)
            seen_vertices.add(class_key)
            for enode_id, enode in members:
                node_key = VertexKey.enode(enode_id)
                self._upsert_vertex(node_key, node_vertex(enode, eclass), report)
                seen_vertices.add(node_key)

                edge_key = EdgeKey.membership(eclass, enode_id)
                self._upsert_edge(edge_key, membership_edge(eclass, enode_id), report)
                seen_edges.add(edge_key)

                # The same child class can appear at several positions, each is its own edge.
                for position, child in enumerate(enode.children):
                    edge_key = EdgeKey.child(enode_id, child, position)
                    self._upsert_edge(edge_key, child_edge(enode_id, child, position), report)
                    seen_edges.add(edge_key)

        # Edges first, so no edge is ever left dangling on the surface
        for edge_key in [key for key in self.graph.edges if key not in seen_edges]:
            self._remove_edge(edge_key, report)
        for vertex_key in [key for key in self.graph.vertices if key not in seen_vertices]:
            self._remove_vertex(vertex_key, report)
        logger.debug("Reconciled %d classes, %d e-nodes: %s", len(snapshot), snapshot.n_nodes, report)
        return report

    def clear(self) -> ReconcileReport:
        """
        Removes everything from the surface.
        """
        report = ReconcileReport()
        for edge_key in list(self.graph.edges):
            self._remove_edge(edge_key, report)
        for vertex_key in list(self.graph.vertices):
            self._remove_vertex(vertex_key, report)
        logger.debug("Cleared graph: %s", report)
        return report

    def _upsert_vertex(self, key: VertexKey, attributes: Attributes, report: ReconcileReport) -> None:
        previous = self.graph.vertices.get(key)
        if previous == attributes:
            return
        (report.added if previous is None else report.updated).append(key)
        self.graph.vertices[key] = attributes
        self.surface.upsert_vertex(str(key), attributes)

    def _upsert_edge(self, key: EdgeKey, attributes: Attributes, report: ReconcileReport) -> None:
        previous = self.graph.edges.get(key)
        if previous == attributes:
            return
        (report.added if previous is None else report.updated).append(key)
        self.graph.edges[key] = attributes
        self.surface.upsert_edge(str(key), attributes)

    def _remove_vertex(self, key: VertexKey, report: ReconcileReport) -> None:
        del self.graph.vertices[key]
        report.removed.append(key)
        self.surface.remove_vertex(str(key))

    def _remove_edge(self, key: EdgeKey, report: ReconcileReport) -> None:
        del self.graph.edges[key]
        report.removed.append(key)
        self.surface.remove_edge(str(key))
