import contextlib
import copy
import pathlib
import webbrowser
from collections.abc import Iterator, Mapping
from typing import Any

import anywidget
import traitlets
from IPython.display import display
from ipywidgets.embed import embed_minimal_html

from . import config
from .ipython_magic import IN_IPYTHON

CURRENT_DIR = pathlib.Path(__file__).parent

__all__ = ["EGraphCanvas"]


class EGraphCanvas(anywidget.AnyWidget):
    """
    Force directed rendering of an e-graph, updated one vertex or edge at a time.

    The front end only adds, updates or removes the items whose attributes changed, so vertices that stay keep their
    position. Wrap a set of changes in `batch()` to send them as a single message.
    """

    _esm = CURRENT_DIR / "canvas.js"
    _css = CURRENT_DIR / "canvas.css"
    vertices = traitlets.Dict().tag(sync=True)
    edges = traitlets.Dict().tag(sync=True)
    physics = traitlets.Dict().tag(sync=True)
    height = traitlets.Unicode("600px").tag(sync=True)

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("physics", copy.deepcopy(config.PHYSICS))
        kwargs.setdefault("height", config.CANVAS_HEIGHT)
        super().__init__(**kwargs)
        self._batch: tuple[dict[str, Any], dict[str, Any]] | None = None

    @contextlib.contextmanager
    def batch(self) -> Iterator[tuple[dict[str, Any], dict[str, Any]]]:
        """
        Yields working copies of the vertices and edges, assigned back to the traits once on exit in a single message.

        Traits only sync on assignment, so changes made outside a batch copy the whole dict each time. Nested batches
        share the outer one.
        """
        if self._batch is not None:
            yield self._batch
            return
        self._batch = batch = (dict(self.vertices), dict(self.edges))
        try:
            yield batch
        finally:
            self._batch = None
            with self.hold_sync():
                self.vertices, self.edges = batch

    def upsert_vertex(self, key: str, attributes: Mapping[str, Any]) -> None:
        with self.batch() as (vertices, _):
            vertices[key] = {**attributes, "id": key}

    def upsert_edge(self, key: str, attributes: Mapping[str, Any]) -> None:
        with self.batch() as (_, edges):
            edges[key] = {**attributes, "id": key}

    def remove_vertex(self, key: str) -> None:
        with self.batch() as (vertices, _):
            del vertices[key]

    def remove_edge(self, key: str) -> None:
        with self.batch() as (_, edges):
            del edges[key]

    def display_or_open(self) -> None:
        """
        Displays the widget if we are in a Jupyter environment, otherwise saves it to a file and opens it.
        """
        if IN_IPYTHON:
            display(self)
            return
        file = pathlib.Path.cwd() / "eggviz.html"
        embed_minimal_html(file, views=[self], drop_defaults=False)
        print("E-graph canvas saved to", file)
        webbrowser.open(file.as_uri())
