"""
algorithms/ — Stepwise Dijkstra Engine
=======================================
Public API:

    from algorithms import StepwiseDijkstra, DijkstraConfig, StepResult, StepKind
    from algorithms import INFO            # metadata card for the side panel

The engine is split the way the algorithm is:
    frontier.py    – distances, unvisited set, min query
    edge_queue.py  – per-vertex one-shot out-edge queues
    paths.py       – predecessor map, path reconstruction
    dijkstra.py    – phase state machine driving the three
"""

from dataclasses import dataclass, field
from typing import List

from algorithms.dijkstra import (
    PSEUDOCODE,
    RELAXATION_MODES,
    DijkstraConfig,
    PhaseLabel,
    StepwiseDijkstra,
)
from algorithms.edge_queue import EDGE_ORDERINGS
from algorithms.errors import (
    ConfigError,
    DijkstraError,
    GraphFormatError,
    InputError,
    InternalInvariantViolation,
    InvalidWeight,
    NegativeWeight,
    SourceNotInGraph,
    StepAfterCompletion,
    UnknownVertex,
    Unreachable,
)
from algorithms.frontier import FRONTIERS
from algorithms.step import EdgeSnapshot, StepKind, StepResult


# ---------------------------------------------------------------------------
# AlgoInfo: metadata card the UI shows next to the canvas
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    key:              str
    label:            str
    pseudocode:       List[str]
    edge_orders:      List[str] = field(default_factory=list)
    frontiers:        List[str] = field(default_factory=list)
    relaxations:      List[str] = field(default_factory=list)
    complexity_time:  str       = ""
    complexity_space: str       = ""
    description:      str       = ""

    def to_dict(self) -> dict:
        return dict(self.__dict__)


INFO = AlgoInfo(
    key="dijkstra",
    label="Dijkstra's Algorithm (stepwise)",
    pseudocode=PSEUDOCODE,
    edge_orders=list(EDGE_ORDERINGS),
    frontiers=list(FRONTIERS),
    relaxations=list(RELAXATION_MODES),
    complexity_time="O(V² + E) scan / O((V + E) log V) heap",
    complexity_space="O(V + E)",
    description="Expands the closest unvisited vertex, one edge at a time. Non-negative weights only.",
)


__all__ = [
    "AlgoInfo",
    "INFO",
    "PSEUDOCODE",
    "DijkstraConfig",
    "PhaseLabel",
    "StepwiseDijkstra",
    "EdgeSnapshot",
    "StepKind",
    "StepResult",
    "DijkstraError",
    "InputError",
    "SourceNotInGraph",
    "NegativeWeight",
    "InvalidWeight",
    "UnknownVertex",
    "GraphFormatError",
    "ConfigError",
    "StepAfterCompletion",
    "Unreachable",
    "InternalInvariantViolation",
]
