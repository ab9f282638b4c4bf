from __future__ import annotations

from eggviz.keys import *


def test_vertex_namespaces():
    assert str(VertexKey.eclass(0)) == "C0"
    assert str(VertexKey.enode(0)) == "N0"
    assert VertexKey.eclass(0) != VertexKey.enode(0)


def test_edge_keys():
    assert str(EdgeKey.membership(1, 4)) == "C1:N4"
    assert str(EdgeKey.child(4, 1, 0)) == "N4:C1$0"
    assert EdgeKey.child(4, 1, 0) != EdgeKey.child(4, 1, 1)


def test_sorting_mixed_edges():
    keys = [EdgeKey.child(2, 0, 1), EdgeKey.membership(0, 2), EdgeKey.child(2, 0, 0), EdgeKey.membership(0, 1)]
    assert [str(key) for key in sorted(keys)] == ["C0:N1", "C0:N2", "N2:C0$0", "N2:C0$1"]
