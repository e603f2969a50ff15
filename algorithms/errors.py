"""
errors.py — Exception Hierarchy
================================
Every error the engine, the playback layer, the CLI and the web API raise
derives from DijkstraError, so callers can catch the whole family in one
clause while still getting the builtin base they expect (ValueError for bad
input, RuntimeError for misuse, LookupError for missing paths).
"""


class DijkstraError(Exception):
    """Base class for all package-specific errors."""


class InputError(DijkstraError, ValueError):
    """Raised for an invalid graph or source handed to the engine."""


class SourceNotInGraph(InputError):
    """The requested source vertex is not a vertex of the graph."""


class NegativeWeight(InputError):
    """An edge carries a negative weight; Dijkstra cannot handle it."""


class InvalidWeight(InputError):
    """An edge weight is NaN or infinite."""


class UnknownVertex(InputError, KeyError):
    """A query named a vertex the engine never saw."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead
        return str(self.args[0]) if self.args else ""


class GraphFormatError(InputError):
    """Parsing a textual graph description failed."""


class ConfigError(DijkstraError, ValueError):
    """Raised for unknown or invalid configuration options."""


class StepAfterCompletion(DijkstraError, RuntimeError):
    """step() was called after has_next_step() returned False."""


class Unreachable(DijkstraError, LookupError):
    """No predecessor chain leads from the source to the requested vertex."""


class InternalInvariantViolation(DijkstraError, AssertionError):
    """Engine state contradicts one of its invariants; this is a bug."""


__all__ = [
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
