"""
edge_queue.py — Outgoing-Edge Iterator Store
=============================================
For every vertex a one-shot queue of its outgoing edges, copied from the
graph when the run starts.  The driver consumes edges strictly from the
front; nothing is ever pushed back, so each edge is examined at most once.

The order inside a queue is fixed at construction by an edge ordering:

    by_insertion_order – the order the graph reports out-edges
    by_weight          – lightest first (ties: insertion order)
    by_target_id       – target id ascending (ties: insertion order);
                         ids must be mutually comparable

The ordering changes tie-breaks and the descriptor stream, never the
final distances.
"""

from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional

from algorithms.errors import ConfigError
from algorithms.step import EdgeSnapshot


EdgeOrdering = Callable[[List[EdgeSnapshot]], List[EdgeSnapshot]]


def by_insertion_order(edges: List[EdgeSnapshot]) -> List[EdgeSnapshot]:
    return list(edges)


def by_weight(edges: List[EdgeSnapshot]) -> List[EdgeSnapshot]:
    # sorted() is stable, so equal weights keep insertion order
    return sorted(edges, key=lambda e: e.weight)


def by_target_id(edges: List[EdgeSnapshot]) -> List[EdgeSnapshot]:
    try:
        return sorted(edges, key=lambda e: e.target)
    except TypeError as exc:
        raise ConfigError(
            f"edge_order 'by_target_id' needs comparable vertex ids: {exc}"
        ) from exc


EDGE_ORDERINGS: Dict[str, EdgeOrdering] = {
    "by_insertion_order": by_insertion_order,
    "by_weight":          by_weight,
    "by_target_id":       by_target_id,
}


def get_ordering(name: str) -> EdgeOrdering:
    """Return the ordering function registered under `name`."""
    try:
        return EDGE_ORDERINGS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown edge_order {name!r}; expected one of {sorted(EDGE_ORDERINGS)}"
        ) from None


class OutgoingEdgeQueues:
    """
    Attributes:
        _queues : one deque per vertex index, already ordered.
        _taken  : how many edges have been popped in total.
    """

    def __init__(self, per_vertex: Iterable[List[EdgeSnapshot]], ordering: EdgeOrdering):
        self._queues: List[Deque[EdgeSnapshot]] = [deque(ordering(edges)) for edges in per_vertex]
        self._taken:  int = 0

    def is_empty(self, idx: int) -> bool:
        return not self._queues[idx]

    def pop_front(self, idx: int) -> Optional[EdgeSnapshot]:
        """Remove and return the front edge of vertex `idx`, or None when drained."""
        queue = self._queues[idx]
        if not queue:
            return None
        self._taken += 1
        return queue.popleft()

    def remaining(self, idx: int) -> List[EdgeSnapshot]:
        return list(self._queues[idx])

    def remaining_count(self) -> int:
        return sum(len(q) for q in self._queues)

    @property
    def taken(self) -> int:
        return self._taken


__all__ = [
    "EdgeOrdering",
    "EDGE_ORDERINGS",
    "OutgoingEdgeQueues",
    "by_insertion_order",
    "by_weight",
    "by_target_id",
    "get_ordering",
]
