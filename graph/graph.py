"""
graph.py — Graph Container & Generator
=======================================
Directed, weighted graph the editor builds and the engine reads.

Responsibilities:
  1. CRUD on nodes & edges                  (add / remove / get)
  2. Adjacency queries                      (vertices, out_edges, neighbours)
  3. Random graph factory                   (demos, property tests)
  4. Import from an adjacency list          (text → graph)
  5. Serialisation round-trip               (to_dict / from_dict)

Design decisions:
  - Nodes & edges stored in plain dicts keyed by id for O(1) lookup.
    Dict order is insertion order, and that order is what the engine
    uses for tie-breaks.
  - A separate adjacency dict `_adj[node_id] → [edge_id, …]` is kept
    incrementally so out-edge queries are O(degree), not O(E).
  - `vertices()` / `out_edges()` are the whole interface the engine needs.
"""

import math
import random
from typing import Dict, Iterator, List, Optional, Tuple

from algorithms.errors import GraphFormatError
from graph.edge import Edge
from graph.node import Node


class Graph:
    """
    Attributes:
        nodes : {node_id: Node}
        edges : {edge_id: Edge}
        _adj  : {node_id: [edge_id, …]} outgoing edges in insertion order
    """

    def __init__(self):
        self.nodes: Dict[str, Node]      = {}
        self.edges: Dict[str, Edge]      = {}
        self._adj:  Dict[str, List[str]] = {}

    # ==================================================================
    # NODE CRUD
    # ==================================================================
    def add_node(self, node: Node) -> Node:
        self.nodes[node.id] = node
        self._adj.setdefault(node.id, [])
        return node

    def create_node(self, x: float = 0.0, y: float = 0.0, label: Optional[str] = None, node_id: Optional[str] = None) -> Node:
        """Convenience: create + add in one call."""
        return self.add_node(Node(x=x, y=y, label=label, node_id=node_id))

    def remove_node(self, node_id: str) -> None:
        if node_id not in self.nodes:
            return
        # remove every edge touching this node
        for eid in [eid for eid, e in self.edges.items() if node_id in (e.source, e.target)]:
            self.remove_edge(eid)
        del self.nodes[node_id]
        self._adj.pop(node_id, None)

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    # ==================================================================
    # EDGE CRUD
    # ==================================================================
    def add_edge(self, edge: Edge) -> Edge:
        for end in (edge.source, edge.target):
            if end not in self.nodes:
                self.create_node(node_id=end)
        self.edges[edge.id] = edge
        self._adj[edge.source].append(edge.id)
        return edge

    def create_edge(self, source: str, target: str, weight: float = 1.0, edge_id: Optional[str] = None) -> Edge:
        return self.add_edge(Edge(source=source, target=target, weight=weight, edge_id=edge_id))

    def remove_edge(self, edge_id: str) -> None:
        e = self.edges.pop(edge_id, None)
        if e is None:
            return
        self._adj[e.source] = [eid for eid in self._adj.get(e.source, []) if eid != edge_id]

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self.edges.get(edge_id)

    def get_edge_between(self, a: str, b: str) -> Optional[Edge]:
        """First edge a → b, or None."""
        for eid in self._adj.get(a, []):
            e = self.edges[eid]
            if e.target == b:
                return e
        return None

    # ==================================================================
    # ADJACENCY QUERIES
    # ==================================================================
    def vertices(self) -> Iterator[str]:
        return iter(self.nodes)

    def out_edges(self, node_id: str) -> List[Edge]:
        return [self.edges[eid] for eid in self._adj.get(node_id, [])]

    def neighbours(self, node_id: str) -> List[Tuple[str, Edge]]:
        """Return [(target_id, edge)] for every outgoing edge."""
        return [(e.target, e) for e in self.out_edges(node_id)]

    def degree(self, node_id: str) -> int:
        return len(self._adj.get(node_id, []))

    # ==================================================================
    # SERIALISATION
    # ==================================================================
    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes.values()],
            "edges": [e.to_dict() for e in self.edges.values()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Graph":
        g = cls()
        try:
            for nd in data.get("nodes", []):
                g.add_node(Node.from_dict(nd))
            for ed in data.get("edges", []):
                g.add_edge(Edge.from_dict(ed))
        except (KeyError, TypeError, AttributeError) as exc:
            raise GraphFormatError(f"Malformed graph dict: {exc!r}") from exc
        return g

    # ==================================================================
    # GENERATORS: factory class-methods
    # ==================================================================
    @classmethod
    def generate_random(
        cls,
        num_nodes: int = 10,
        edge_probability: float = 0.3,
        weight_range: Tuple[int, int] = (1, 10),
        seed: Optional[int] = None,
        canvas_w: float = 800,
        canvas_h: float = 500,
    ) -> "Graph":
        """
        Erdős–Rényi style random digraph.
        Each ordered pair (i, j), i ≠ j, gets an edge with probability
        `edge_probability`.  Weights are integers drawn from `weight_range`
        (a lower bound of 0 produces zero-weight edges too).
        """
        rnd = random.Random(seed)
        g = cls()
        ids = [str(i) for i in range(num_nodes)]
        for nid, (x, y) in zip(ids, _circle_layout(num_nodes, canvas_w, canvas_h)):
            g.create_node(x, y, label=nid, node_id=nid)

        for i in range(num_nodes):
            for j in range(num_nodes):
                if i != j and rnd.random() < edge_probability:
                    g.create_edge(ids[i], ids[j], weight=rnd.randint(*weight_range))
        return g

    @classmethod
    def from_adjacency_list(
        cls,
        text: str,
        canvas_w: float = 800,
        canvas_h: float = 500,
    ) -> "Graph":
        """
        Parse a simple text adjacency list.

        Supported formats (one node per line):
            A: B C D            → A→B, A→C, A→D  (weight 1)
            A: B(3) C(7)        → A→B weight 3, A→C weight 7
            0 → 1,2,3           → alternate arrow syntax
            0: 1(5), 2(3)       → comma-separated with weights
            # comment           → ignored

        Vertices are created in order of first mention; a repeated
        (source, target) pair keeps the first edge.  Nodes are laid out
        in a circle.
        """
        adjacency: Dict[str, List[Tuple[str, float]]] = {}

        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            # split on ':' or '→' / '->'
            for sep in (":", "→", "->"):
                if sep in line:
                    src, _, rest = line.partition(sep)
                    break
            else:
                raise GraphFormatError(f"line {lineno}: expected 'A: B C' or 'A -> B C', got {line!r}")

            src = src.strip()
            if not src:
                raise GraphFormatError(f"line {lineno}: missing source vertex")
            adjacency.setdefault(src, [])

            for token in rest.replace(",", " ").split():
                # optional weight: "B(3)" or "B"
                if "(" in token and token.endswith(")"):
                    tgt, w_str = token[:-1].split("(", 1)
                    try:
                        w = float(w_str)
                    except ValueError:
                        raise GraphFormatError(f"line {lineno}: bad weight {w_str!r} in {token!r}") from None
                elif "(" in token or ")" in token:
                    raise GraphFormatError(f"line {lineno}: unbalanced weight parentheses in {token!r}")
                else:
                    tgt, w = token, 1.0
                if not tgt:
                    raise GraphFormatError(f"line {lineno}: empty target in {token!r}")
                adjacency.setdefault(tgt, [])
                adjacency[src].append((tgt, w))

        g = cls()
        labels = list(adjacency)
        for label, (x, y) in zip(labels, _circle_layout(len(labels), canvas_w, canvas_h)):
            g.create_node(x, y, label=label, node_id=label)

        for src, targets in adjacency.items():
            seen = set()
            for tgt, w in targets:
                if tgt in seen:
                    continue
                seen.add(tgt)
                g.create_edge(src, tgt, weight=w)
        return g

    # ==================================================================
    # UTILITY
    # ==================================================================
    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    def has_negative_edges(self) -> bool:
        return any(e.weight < 0 for e in self.edges.values())

    def node_ids(self) -> List[str]:
        return list(self.nodes.keys())

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count()}, edges={self.edge_count()})"


def _circle_layout(n: int, canvas_w: float, canvas_h: float) -> List[Tuple[float, float]]:
    cx, cy = canvas_w / 2, canvas_h / 2
    radius = min(canvas_w, canvas_h) * 0.35
    return [
        (cx + radius * math.cos(2 * math.pi * i / n), cy + radius * math.sin(2 * math.pi * i / n))
        for i in range(n)
    ]
