from collections.abc import Mapping
from typing import Any

import pytest
from syrupy.extensions.single_file import SingleFileSnapshotExtension


class RecordingSurface:
    """
    Render surface that keeps what is shown and every call it received.
    """

    def __init__(self) -> None:
        self.vertices: dict[str, dict[str, Any]] = {}
        self.edges: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []

    def upsert_vertex(self, key: str, attributes: Mapping[str, Any]) -> None:
        self.calls.append(("upsert_vertex", key))
        self.vertices[key] = dict(attributes)

    def upsert_edge(self, key: str, attributes: Mapping[str, Any]) -> None:
        self.calls.append(("upsert_edge", key))
        self.edges[key] = dict(attributes)

    def remove_vertex(self, key: str) -> None:
        self.calls.append(("remove_vertex", key))
        del self.vertices[key]

    def remove_edge(self, key: str) -> None:
        self.calls.append(("remove_edge", key))
        del self.edges[key]


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


class DotSnapshotExtension(SingleFileSnapshotExtension):
    file_extension = "dot"

    def serialize(self, data, **kwargs) -> bytes:
        return str(data).encode()


@pytest.fixture
def snapshot_dot(snapshot):
    return snapshot.with_defaults(extension_class=DotSnapshotExtension)
