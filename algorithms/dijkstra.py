"""
dijkstra.py — Stepwise Dijkstra Engine
=======================================
Dijkstra's single-source shortest paths, advanced one micro-step per
call so a UI can draw every intermediate state.

    engine = StepwiseDijkstra(graph, source="A")
    while engine.has_next_step():
        result = engine.step()        # → StepResult
        redraw(result, engine.distances())

Phase cycle (exactly one phase per step() call, none ever skipped):

    SELECT_UNVISITED ──► SELECT_NEIGHBOR ──► RELAX
          ▲                │    ▲   │          │
          └── queue empty ─┘    └───┘◄─────────┘
                          target visited

The graph is SNAPSHOT at construction: vertex ids, out-edges and weights
are copied, so editing the Graph afterwards does not touch a running
engine.  Each vertex gets a dense index in graph insertion order; every
tie (equal minimum distance) resolves to the lowest index.

Relaxation modes (DijkstraConfig.relaxation):
  - "guarded"       : classic `if nd < dist[v]` update.
  - "unconditional" : always overwrite dist[v] / pred[v], reproducing the
                      trace of the classroom tool this visualizer replaces.
                      Self-loops are still never written, so a vertex can
                      not push its own distance up while it is current.
"""

import logging
import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, Union

from algorithms.edge_queue import EDGE_ORDERINGS, OutgoingEdgeQueues, get_ordering
from algorithms.errors import (
    ConfigError,
    InputError,
    InvalidWeight,
    NegativeWeight,
    SourceNotInGraph,
    StepAfterCompletion,
    UnknownVertex,
    Unreachable,
)
from algorithms.frontier import FRONTIERS, INF
from algorithms.paths import PredecessorMap
from algorithms.step import EdgeSnapshot, StepKind, StepResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pseudocode (side panel; StepResult.pseudocode_line indexes into it)
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def Dijkstra(graph, source):",                        # 0
    "    dist ← {v: ∞ for v in V};  dist[source] ← 0",     # 1
    "    unvisited ← V;  out[v] ← ordered out-edges(v)",   # 2
    "    while min(dist[v] for v in unvisited) < ∞:",      # 3
    "        u ← argmin dist over unvisited",              # 4
    "        while out[u] is not empty:",                  # 5
    "            (u, v, w) ← out[u].pop_front()",          # 6
    "            if v not in unvisited: continue",         # 7
    "            if dist[u] + w < dist[v]:",               # 8
    "                dist[v] ← dist[u] + w;  pred[v] ← u", # 9
    "        unvisited.remove(u)",                         # 10
]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
RELAXATION_MODES = ("guarded", "unconditional")


@dataclass(frozen=True)
class DijkstraConfig:
    """
    Attributes:
        edge_order : "by_weight" | "by_insertion_order" | "by_target_id".
        frontier   : "scan" (linear min scan) or "heap" (binary heap).
        relaxation : "guarded" or "unconditional".
    """

    edge_order: str = "by_weight"
    frontier:   str = "scan"
    relaxation: str = "guarded"

    def __post_init__(self):
        if self.edge_order not in EDGE_ORDERINGS:
            raise ConfigError(
                f"Unknown edge_order {self.edge_order!r}; expected one of {sorted(EDGE_ORDERINGS)}"
            )
        if self.frontier not in FRONTIERS:
            raise ConfigError(
                f"Unknown frontier {self.frontier!r}; expected one of {sorted(FRONTIERS)}"
            )
        if self.relaxation not in RELAXATION_MODES:
            raise ConfigError(
                f"Unknown relaxation {self.relaxation!r}; expected one of {list(RELAXATION_MODES)}"
            )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "DijkstraConfig":
        """Build from a plain mapping; unknown keys and None values are rejected / skipped."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config option(s): {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if v is not None})

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ---------------------------------------------------------------------------
# Phase: tagged variant, `current` / `edge` exist only where meaningful
# ---------------------------------------------------------------------------
class PhaseLabel(Enum):
    SELECT_UNVISITED = "select_unvisited"
    SELECT_NEIGHBOR  = "select_neighbor"
    RELAX            = "relax"


@dataclass(frozen=True)
class SelectUnvisited:
    label = PhaseLabel.SELECT_UNVISITED


@dataclass(frozen=True)
class SelectNeighbor:
    current: int
    label = PhaseLabel.SELECT_NEIGHBOR


@dataclass(frozen=True)
class Relax:
    current: int
    edge:    EdgeSnapshot
    target:  int
    label = PhaseLabel.RELAX


Phase = Union[SelectUnvisited, SelectNeighbor, Relax]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
class StepwiseDijkstra:
    """
    Attributes:
        source      : Source vertex id (fixed for the run).
        config      : DijkstraConfig in effect.
        steps_taken : Number of micro-steps performed so far.
    """

    def __init__(self, graph, source: Hashable, config: Optional[DijkstraConfig] = None):
        self.config: DijkstraConfig = config or DijkstraConfig()
        self.source: Hashable       = source
        self.steps_taken: int       = 0

        # arena: vertex id ↔ dense index
        self._ids:   List[Hashable]      = list(graph.vertices())
        self._index: Dict[Hashable, int] = {v: i for i, v in enumerate(self._ids)}
        if source not in self._index:
            raise SourceNotInGraph(f"Source {source!r} is not a vertex of the graph")

        per_vertex = [self._snapshot_edges(graph, v) for v in self._ids]

        self._src:      int = self._index[source]
        self._frontier      = FRONTIERS[self.config.frontier](len(self._ids), self._src)
        self._queues        = OutgoingEdgeQueues(per_vertex, get_ordering(self.config.edge_order))
        self._pred          = PredecessorMap()
        self._phase: Phase  = SelectUnvisited()
        self._edge_count    = sum(len(edges) for edges in per_vertex)

        logger.info(
            "Dijkstra run created: source=%r vertices=%d edges=%d config=%s",
            source, len(self._ids), self._edge_count, self.config.to_dict(),
        )

    def _snapshot_edges(self, graph, v: Hashable) -> List[EdgeSnapshot]:
        edges = []
        for e in graph.out_edges(v):
            w = e.weight
            try:
                w = float(w)
            except (TypeError, ValueError):
                raise InvalidWeight(f"Edge {v!r}→{e.target!r} has non-numeric weight {e.weight!r}") from None
            if math.isnan(w) or math.isinf(w):
                raise InvalidWeight(f"Edge {v!r}→{e.target!r} has non-finite weight {w}")
            if w < 0:
                raise NegativeWeight(f"Edge {v!r}→{e.target!r} has negative weight {w}")
            if e.target not in self._index:
                raise InputError(f"Edge {v!r}→{e.target!r} points outside the graph")
            edges.append(EdgeSnapshot(v, e.target, w, getattr(e, "id", None)))
        return edges

    # ==================================================================
    # STEP API
    # ==================================================================
    def has_next_step(self) -> bool:
        f = self._frontier
        return f.unvisited_count() > 0 and f.min_distance() < INF

    def step(self) -> StepResult:
        """Run exactly one micro-step and describe it."""
        if not self.has_next_step():
            raise StepAfterCompletion(
                f"Run from {self.source!r} finished after {self.steps_taken} steps"
            )

        phase = self._phase
        if isinstance(phase, SelectUnvisited):
            result = self._select_unvisited()
        elif isinstance(phase, SelectNeighbor):
            result = self._select_neighbor(phase.current)
        else:
            result = self._relax(phase)

        self.steps_taken += 1
        logger.debug("step %d: %s", result.step_number, result.explanation)
        return result

    def run(self, on_step: Callable[[StepResult], Any]) -> int:
        """Step until finished, handing every StepResult to `on_step`.  Returns the step count."""
        if not callable(on_step):
            raise TypeError("run() needs an on_step callback")
        count = 0
        while self.has_next_step():
            on_step(self.step())
            count += 1
        return count

    # ------------------------------------------------------------------
    # Micro-steps
    # ------------------------------------------------------------------
    def _select_unvisited(self) -> StepResult:
        u = self._frontier.select()
        d = self._frontier.distance(u)
        self._phase = SelectNeighbor(u)
        vid = self._ids[u]
        return StepResult(
            kind=StepKind.SELECTED_UNVISITED,
            step_number=self.steps_taken,
            vertex=vid,
            pseudocode_line=4,
            explanation=(
                f"Select '{vid}': closest unvisited vertex (distance {d}). "
                f"Scan its outgoing edges next."
            ),
        )

    def _select_neighbor(self, u: int) -> StepResult:
        uid = self._ids[u]
        edge = self._queues.pop_front(u)

        if edge is None:
            self._frontier.discard(u)
            self._phase = SelectUnvisited()
            return StepResult(
                kind=StepKind.FINISHED_VERTEX,
                step_number=self.steps_taken,
                vertex=uid,
                pseudocode_line=10,
                explanation=f"All edges of '{uid}' scanned; '{uid}' is now visited.",
            )

        v = self._index[edge.target]
        if self._frontier.is_unvisited(v):
            self._phase = Relax(u, edge, v)
            return StepResult(
                kind=StepKind.EXAMINED_EDGE,
                step_number=self.steps_taken,
                vertex=uid,
                edge=edge,
                relaxed=True,
                pseudocode_line=6,
                explanation=(
                    f"Take edge {uid}→{edge.target} (w={edge.weight}); "
                    f"'{edge.target}' is unvisited, relax it next."
                ),
            )

        # target already visited: drop the edge, stay in SELECT_NEIGHBOR
        return StepResult(
            kind=StepKind.EXAMINED_EDGE,
            step_number=self.steps_taken,
            vertex=uid,
            edge=edge,
            relaxed=False,
            pseudocode_line=7,
            explanation=f"Edge {uid}→{edge.target} (w={edge.weight}): '{edge.target}' already visited, skip.",
        )

    def _relax(self, phase: Relax) -> StepResult:
        u, v, edge = phase.current, phase.target, phase.edge
        du = self._frontier.distance(u)
        dv = self._frontier.distance(v)
        nd = du + edge.weight

        if self.config.relaxation == "guarded":
            write = nd < dv
        else:
            write = u != v

        if write:
            self._frontier.update(v, nd)
            self._pred.set(v, u)
            explanation = f"Relax {edge.source}→{edge.target}: {du} + {edge.weight} = {nd} (was {dv}), UPDATE."
        else:
            explanation = f"Relax {edge.source}→{edge.target}: {du} + {edge.weight} = {nd} ≥ {dv}, no change."

        self._phase = SelectNeighbor(u)
        return StepResult(
            kind=StepKind.RELAXED,
            step_number=self.steps_taken,
            vertex=self._ids[u],
            edge=edge,
            new_distance=nd,
            updated=write,
            pseudocode_line=9 if write else 8,
            explanation=explanation,
        )

    # ==================================================================
    # QUERIES
    # ==================================================================
    def _idx(self, v: Hashable) -> int:
        try:
            return self._index[v]
        except (KeyError, TypeError):
            raise UnknownVertex(f"Unknown vertex {v!r}") from None

    def distance_of(self, v: Hashable) -> float:
        return self._frontier.distance(self._idx(v))

    def path_to(self, v: Hashable) -> List[Hashable]:
        """Vertex ids source … v along recorded predecessors."""
        idx = self._idx(v)
        try:
            chain = self._pred.chain(self._src, idx)
        except Unreachable:
            raise Unreachable(f"Vertex {v!r} is not reachable from {self.source!r}") from None
        return [self._ids[i] for i in chain]

    def predecessor_of(self, v: Hashable) -> Optional[Hashable]:
        p = self._pred.get(self._idx(v))
        return None if p is None else self._ids[p]

    def vertices(self) -> List[Hashable]:
        return list(self._ids)

    def distances(self) -> Dict[Hashable, float]:
        return {vid: self._frontier.distance(i) for i, vid in enumerate(self._ids)}

    def predecessors(self) -> Dict[Hashable, Hashable]:
        return {self._ids[v]: self._ids[u] for v, u in self._pred.items()}

    def unvisited(self) -> List[Hashable]:
        return [self._ids[i] for i in self._frontier.unvisited_indices()]

    def is_unvisited(self, v: Hashable) -> bool:
        return self._frontier.is_unvisited(self._idx(v))

    def remaining_edges(self, v: Hashable) -> List[EdgeSnapshot]:
        return self._queues.remaining(self._idx(v))

    @property
    def phase(self) -> PhaseLabel:
        return self._phase.label

    @property
    def current(self) -> Optional[Hashable]:
        """Vertex being expanded; None in SELECT_UNVISITED."""
        if isinstance(self._phase, SelectUnvisited):
            return None
        return self._ids[self._phase.current]

    @property
    def pending_edge(self) -> Optional[EdgeSnapshot]:
        return self._phase.edge if isinstance(self._phase, Relax) else None

    @property
    def is_finished(self) -> bool:
        return not self.has_next_step()

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def step_bound(self) -> int:
        """Upper bound on micro-steps: |V| selections, |V| finishes, ≤ 2 steps per edge."""
        return 2 * len(self._ids) + 2 * self._edge_count

    # ==================================================================
    # TEXT SUMMARY
    # ==================================================================
    def summary(self) -> str:
        lines = []
        for i, vid in enumerate(self._ids):
            if i == self._src:
                continue
            lines.append(f"vertex = {vid}, distance = {float(self._frontier.distance(i))}\n")

        lines.append("\npaths:\n")
        for i, vid in enumerate(self._ids):
            if i == self._src or i not in self._pred:
                continue
            lines.append("".join(f"{p} " for p in self.path_to(vid)) + "\n")
        return "".join(lines)

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return (
            f"StepwiseDijkstra(source={self.source!r}, phase={self.phase.value}, "
            f"steps={self.steps_taken}, unvisited={self._frontier.unvisited_count()})"
        )


__all__ = [
    "PSEUDOCODE",
    "RELAXATION_MODES",
    "DijkstraConfig",
    "PhaseLabel",
    "Phase",
    "SelectUnvisited",
    "SelectNeighbor",
    "Relax",
    "StepwiseDijkstra",
]
