"""
step.py — Micro-Step Descriptor
================================
Every call to StepwiseDijkstra.step() returns one StepResult.  It is the
only coupling between the engine and whatever draws it:

    • SELECTED_UNVISITED – the closest unvisited vertex became `current`
    • EXAMINED_EDGE      – the front edge of current's queue was taken
                           (relaxed=False when its target is already visited)
    • RELAXED            – the pending edge was relaxed
    • FINISHED_VERTEX    – current's queue drained, it left the unvisited set

Design decisions:
  - StepResult is a frozen dataclass.  The engine is the only writer;
    the stepper / recorder / web layer are pure readers.
  - Descriptors carry ids and numbers only, never references into the
    engine, so a buffered step can not change after the fact.
  - `pseudocode_line` and `explanation` feed the side panel in learning
    mode; they carry no algorithmic meaning.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable, NamedTuple, Optional


# ---------------------------------------------------------------------------
# Step kinds
# ---------------------------------------------------------------------------
class StepKind(Enum):
    SELECTED_UNVISITED = "selected_unvisited"
    EXAMINED_EDGE      = "examined_edge"
    RELAXED            = "relaxed"
    FINISHED_VERTEX    = "finished_vertex"


# ---------------------------------------------------------------------------
# Edge as the engine sees it
# ---------------------------------------------------------------------------
class EdgeSnapshot(NamedTuple):
    """Immutable copy of one outgoing edge, taken when the run starts."""

    source: Hashable
    target: Hashable
    weight: float
    id:     Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id":     self.id,
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
        }


# ---------------------------------------------------------------------------
# StepResult
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StepResult:
    """
    Attributes:
        kind            : Which micro-step ran.
        step_number     : 0-based index of this step in the run.
        vertex          : Vertex selected / finished (for edge steps: the
                          vertex whose queue the edge came from).
        edge            : EdgeSnapshot examined or relaxed (None for vertex steps).
        relaxed         : (EXAMINED_EDGE only) True when a RELAX step follows.
        new_distance    : (RELAXED only) distance[u] + weight(u→v).
        updated         : (RELAXED only) True when distance and predecessor were written.
        pseudocode_line : 0-based line of PSEUDOCODE executing now.
        explanation     : Human-readable "why" text for learning mode.
    """

    kind:            StepKind
    step_number:     int                    = 0
    vertex:          Optional[Hashable]     = None
    edge:            Optional[EdgeSnapshot] = None
    relaxed:         bool                   = False
    new_distance:    Optional[float]        = None
    updated:         bool                   = False
    pseudocode_line: int                    = 0
    explanation:     str                    = ""

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe view; infinite distances become None."""
        nd = self.new_distance
        if nd is not None and math.isinf(nd):
            nd = None
        return {
            "kind":            self.kind.value,
            "step_number":     self.step_number,
            "vertex":          self.vertex,
            "edge":            self.edge.to_dict() if self.edge else None,
            "relaxed":         self.relaxed,
            "new_distance":    nd,
            "updated":         self.updated,
            "pseudocode_line": self.pseudocode_line,
            "explanation":     self.explanation,
        }


__all__ = ["StepKind", "EdgeSnapshot", "StepResult"]
