"""
edge.py — Directed Weighted Edge
================================
`source` and `target` are node-id strings, NOT Node references, which
keeps edges serialisable and free of circular references.

Parallel edges are allowed (each has its own id); the engine scans every
one of them.
"""

from typing import Optional
import uuid


class Edge:
    """
    Attributes:
        id     : Unique identifier.
        source : ID of the tail node.
        target : ID of the head node.
        weight : Non-negative cost (default 1).
    """

    __slots__ = ("id", "source", "target", "weight")

    def __init__(
        self,
        source: str,
        target: str,
        weight: float = 1.0,
        edge_id: Optional[str] = None,
    ):
        self.id:     str   = edge_id if edge_id is not None else str(uuid.uuid4())[:8]
        self.source: str   = source
        self.target: str   = target
        self.weight: float = weight

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "id":     self.id,
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Edge":
        return cls(
            source=data["source"],
            target=data["target"],
            weight=data.get("weight", 1.0),
            edge_id=data.get("id"),
        )

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        return f"Edge({self.source} → {self.target}, w={self.weight})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Edge) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
