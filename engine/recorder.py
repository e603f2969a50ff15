"""
recorder.py — Run Recorder, Metrics & Replay
=============================================
Records a complete run (every StepResult, pulled one step at a time
through the step callback), computes the metrics the analytics panel
shows, and rebuilds engine state from a descriptor log.

Usage:
    rec = Recorder()
    rec.start(graph, source="A", config=DijkstraConfig(frontier="heap"))
    rec.run_to_completion()          # step() until done, recording each
    metrics = rec.get_metrics()      # the analytics card
    rec.export()                     # serialisable snapshot for save/replay

Replay:
    replay(source, vertices, steps) is an independent simulator: it knows
    nothing about queues or frontiers, it only applies what each
    descriptor says happened.  Fed the full log of a run, it must land on
    exactly the engine's final distances and predecessors.
"""

import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, List, Optional, Set

from algorithms import DijkstraConfig, InputError, StepKind, StepResult, StepwiseDijkstra


# ---------------------------------------------------------------------------
# Metrics dataclass: what the Analytics panel renders
# ---------------------------------------------------------------------------
@dataclass
class RunMetrics:
    source:            str   = ""
    vertices:          int   = 0
    edges:             int   = 0
    vertices_visited:  int   = 0       # FINISHED_VERTEX count
    vertices_reached:  int   = 0       # finite distance at the end
    edges_examined:    int   = 0       # EXAMINED_EDGE count
    edges_skipped:     int   = 0       # examined against an already-visited target
    relaxations:       int   = 0       # RELAXED count
    updates:           int   = 0       # RELAXED steps that wrote dist / pred
    total_steps:       int   = 0
    wall_time_ms:      float = 0.0
    config:            Dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Replay state
# ---------------------------------------------------------------------------
@dataclass
class ReplayState:
    distances:    Dict[Hashable, float]    = field(default_factory=dict)
    predecessors: Dict[Hashable, Hashable] = field(default_factory=dict)
    unvisited:    Set[Hashable]            = field(default_factory=set)
    current:      Optional[Hashable]       = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distances":    {str(v): (None if math.isinf(d) else d) for v, d in self.distances.items()},
            "predecessors": {str(v): u for v, u in self.predecessors.items()},
            "unvisited":    sorted(map(str, self.unvisited)),
            "current":      self.current,
        }


def replay(source: Hashable, vertices: Iterable[Hashable], steps: Iterable[StepResult]) -> ReplayState:
    """Rebuild distances / predecessors / unvisited by applying `steps` in order."""
    vertices = list(vertices)
    state = ReplayState(
        distances={v: math.inf for v in vertices},
        unvisited=set(vertices),
    )
    if source not in state.distances:
        raise InputError(f"Replay source {source!r} is not among the vertices")
    state.distances[source] = 0.0

    for s in steps:
        if s.kind is StepKind.SELECTED_UNVISITED:
            if s.vertex not in state.unvisited:
                raise InputError(f"step {s.step_number}: selected {s.vertex!r} is not unvisited")
            state.current = s.vertex
        elif s.kind is StepKind.EXAMINED_EDGE:
            if s.edge is None or s.edge.source != state.current:
                raise InputError(f"step {s.step_number}: edge does not leave the current vertex")
        elif s.kind is StepKind.RELAXED:
            if s.updated:
                state.distances[s.edge.target]    = s.new_distance
                state.predecessors[s.edge.target] = s.edge.source
        elif s.kind is StepKind.FINISHED_VERTEX:
            state.unvisited.discard(s.vertex)
            state.current = None
    return state


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class Recorder:
    """
    Attributes:
        steps   : Full list of StepResults from the run.
        metrics : Computed RunMetrics (available after run_to_completion).
        engine  : The StepwiseDijkstra being recorded.
    """

    def __init__(self):
        self.steps:   List[StepResult]            = []
        self.metrics: Optional[RunMetrics]        = None
        self.engine:  Optional[StepwiseDijkstra]  = None
        self._graph = None

    # ------------------------------------------------------------------
    # Setup & run
    # ------------------------------------------------------------------
    def start(self, graph, source: Hashable, config: Optional[DijkstraConfig] = None) -> StepwiseDijkstra:
        """Build the engine for this run.  Errors from the engine propagate."""
        self.engine  = StepwiseDijkstra(graph, source, config)
        self._graph  = graph
        self.steps   = []
        self.metrics = None
        return self.engine

    def run_to_completion(self) -> RunMetrics:
        """Step the engine until it finishes, recording every step, then compute metrics."""
        if self.engine is None:
            raise RuntimeError("Call start() first.")

        t0 = time.monotonic()
        self.engine.run(on_step=self.record_step)
        wall_ms = (time.monotonic() - t0) * 1000

        self.metrics = self._compute_metrics(wall_ms)
        return self.metrics

    def get_metrics(self) -> Optional[RunMetrics]:
        return self.metrics

    def record_step(self, step: StepResult) -> None:
        self.steps.append(step)

    def replay(self) -> ReplayState:
        """Replay everything recorded so far."""
        if self.engine is None:
            raise RuntimeError("Call start() first.")
        return replay(self.engine.source, self.engine.vertices(), self.steps)

    # ------------------------------------------------------------------
    # Export (serialisable snapshot)
    # ------------------------------------------------------------------
    def export(self) -> Dict[str, Any]:
        engine = self.engine
        return {
            "source":  engine.source if engine else None,
            "config":  engine.config.to_dict() if engine else {},
            "graph":   self._graph.to_dict() if hasattr(self._graph, "to_dict") else {},
            "metrics": self.metrics.__dict__ if self.metrics else {},
            "steps":   [s.to_dict() for s in self.steps],
            "summary": engine.summary() if engine else "",
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _compute_metrics(self, wall_ms: float) -> RunMetrics:
        engine = self.engine
        kinds = [s.kind for s in self.steps]
        examined = [s for s in self.steps if s.kind is StepKind.EXAMINED_EDGE]
        relaxed  = [s for s in self.steps if s.kind is StepKind.RELAXED]

        return RunMetrics(
            source=str(engine.source),
            vertices=len(engine.vertices()),
            edges=engine.edge_count,
            vertices_visited=kinds.count(StepKind.FINISHED_VERTEX),
            vertices_reached=sum(1 for d in engine.distances().values() if d < math.inf),
            edges_examined=len(examined),
            edges_skipped=sum(1 for s in examined if not s.relaxed),
            relaxations=len(relaxed),
            updates=sum(1 for s in relaxed if s.updated),
            total_steps=len(self.steps),
            wall_time_ms=round(wall_ms, 2),
            config=engine.config.to_dict(),
        )
