"""
frontier.py — Tentative Distances & Unvisited Set
==================================================
The frontier store owns `distance[]` and the unvisited membership for one
run and answers "which unvisited vertex is closest to the source?".

Vertices are dense integer indices handed out by the engine (graph
insertion order).  Ties on the minimum distance always resolve to the
LOWEST index, whichever implementation is in use, so the descriptor stream
does not depend on the frontier choice.

Two implementations:
  - ScanFrontier : O(V) linear scan per query.  Plenty for graphs a human
                   watches being solved.
  - HeapFrontier : heapq keyed by (distance, index) with lazy deletion.
"""

import heapq
import math
from typing import List, Optional, Protocol, Tuple

INF = math.inf


class Frontier(Protocol):
    """What the driver needs from a frontier store."""

    def distance(self, idx: int) -> float:
        ...

    def update(self, idx: int, value: float) -> None:
        ...

    def is_unvisited(self, idx: int) -> bool:
        ...

    def discard(self, idx: int) -> None:
        ...

    def unvisited_count(self) -> int:
        ...

    def min_distance(self) -> float:
        ...

    def select(self) -> Optional[int]:
        ...


# ---------------------------------------------------------------------------
# Linear scan
# ---------------------------------------------------------------------------
class ScanFrontier:
    """Bitmap of unvisited vertices plus a flat distance list."""

    def __init__(self, size: int, source: int):
        self._dist:      List[float] = [INF] * size
        self._unvisited: List[bool]  = [True] * size
        self._remaining: int         = size
        self._dist[source] = 0.0

    def distance(self, idx: int) -> float:
        return self._dist[idx]

    def distances(self) -> List[float]:
        return list(self._dist)

    def update(self, idx: int, value: float) -> None:
        self._dist[idx] = value

    def is_unvisited(self, idx: int) -> bool:
        return self._unvisited[idx]

    def discard(self, idx: int) -> None:
        if self._unvisited[idx]:
            self._unvisited[idx] = False
            self._remaining -= 1

    def unvisited_count(self) -> int:
        return self._remaining

    def unvisited_indices(self) -> List[int]:
        return [i for i, flag in enumerate(self._unvisited) if flag]

    def min_distance(self) -> float:
        best = INF
        for i, flag in enumerate(self._unvisited):
            if flag and self._dist[i] < best:
                best = self._dist[i]
        return best

    def select(self) -> Optional[int]:
        """Lowest-index unvisited vertex at the minimum distance, or None."""
        best, best_idx = INF, None
        for i, flag in enumerate(self._unvisited):
            # strict < keeps the first index on ties
            if flag and self._dist[i] < best:
                best, best_idx = self._dist[i], i
        return best_idx


# ---------------------------------------------------------------------------
# Binary heap
# ---------------------------------------------------------------------------
class HeapFrontier(ScanFrontier):
    """
    Same state as ScanFrontier plus a min-heap of (distance, index).

    Stale entries (vertex already visited, or distance changed since the
    push) are popped and dropped when they reach the top.  Only finite
    distances are pushed, so an empty heap means min_distance() == ∞.
    """

    def __init__(self, size: int, source: int):
        super().__init__(size, source)
        self._heap: List[Tuple[float, int]] = [(0.0, source)]

    def update(self, idx: int, value: float) -> None:
        super().update(idx, value)
        if self._unvisited[idx] and value < INF:
            heapq.heappush(self._heap, (value, idx))

    def _prune(self) -> None:
        heap = self._heap
        while heap:
            d, i = heap[0]
            if self._unvisited[i] and self._dist[i] == d:
                return
            heapq.heappop(heap)

    def min_distance(self) -> float:
        self._prune()
        return self._heap[0][0] if self._heap else INF

    def select(self) -> Optional[int]:
        self._prune()
        return self._heap[0][1] if self._heap else None


FRONTIERS = {
    "scan": ScanFrontier,
    "heap": HeapFrontier,
}


__all__ = ["Frontier", "ScanFrontier", "HeapFrontier", "FRONTIERS", "INF"]
