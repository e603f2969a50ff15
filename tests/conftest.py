import sys
from pathlib import Path

# Ensure the flat top-level packages import without installation
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from collections import namedtuple

import pytest

from graph import Graph


SimpleEdge = namedtuple("SimpleEdge", "source target weight")


class EdgeListGraph:
    """Bare graph exposing only the two methods the engine consumes."""

    def __init__(self, vertices, edges):
        self._vertices = list(vertices)
        self._out = {v: [] for v in self._vertices}
        for u, v, w in edges:
            self._out[u].append(SimpleEdge(u, v, w))

    def vertices(self):
        return iter(self._vertices)

    def out_edges(self, v):
        return list(self._out[v])


def build_graph(vertices, edges) -> Graph:
    g = Graph()
    for v in vertices:
        g.create_node(node_id=v)
    for u, v, w in edges:
        g.create_edge(u, v, weight=w)
    return g


@pytest.fixture
def triangle():
    """S1: A→B(1), B→C(1), A→C(5)."""
    return build_graph("ABC", [("A", "B", 1), ("B", "C", 1), ("A", "C", 5)])


@pytest.fixture
def disconnected():
    """S2: C has no incoming edge."""
    return build_graph("ABC", [("A", "B", 3)])


@pytest.fixture
def diamond():
    """S4: two equal-cost routes to D."""
    return build_graph("ABCD", [("A", "B", 2), ("A", "C", 2), ("B", "D", 3), ("C", "D", 3)])


@pytest.fixture
def shortcut():
    """S5: A→C→B beats the direct A→B."""
    return build_graph("ABCD", [("A", "B", 10), ("A", "C", 1), ("C", "B", 2), ("B", "D", 1)])


@pytest.fixture
def cycle():
    """S6: A→B→C→A."""
    return build_graph("ABC", [("A", "B", 1), ("B", "C", 1), ("C", "A", 1)])
