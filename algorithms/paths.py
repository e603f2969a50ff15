"""
paths.py — Predecessor Map & Path Reconstruction
=================================================
Every successful relaxation of u→v records pred[v] = u here.  Paths are
rebuilt on demand by walking the chain backwards into an explicit stack,
so very long chains never hit the recursion limit.
"""

from typing import Dict, List, Optional

from algorithms.errors import InternalInvariantViolation, Unreachable


class PredecessorMap:
    """Partial mapping vertex-index → vertex-index."""

    def __init__(self):
        self._pred: Dict[int, int] = {}

    def set(self, v: int, u: int) -> None:
        self._pred[v] = u

    def get(self, v: int) -> Optional[int]:
        return self._pred.get(v)

    def __contains__(self, v: int) -> bool:
        return v in self._pred

    def __len__(self) -> int:
        return len(self._pred)

    def items(self):
        return self._pred.items()

    def chain(self, source: int, v: int) -> List[int]:
        """
        Indices on the path source → … → v.

        Raises:
            Unreachable                : the chain stops before reaching source.
            InternalInvariantViolation : a vertex repeats in the chain.
        """
        if v == source:
            return [source]

        stack: List[int] = []
        seen = set()
        cur: Optional[int] = v
        while cur != source:
            if cur is None:
                raise Unreachable(v)
            if cur in seen:
                raise InternalInvariantViolation(
                    f"predecessor cycle through vertex index {cur}"
                )
            seen.add(cur)
            stack.append(cur)
            cur = self._pred.get(cur)
        stack.append(source)

        path = []
        while stack:
            path.append(stack.pop())
        return path


__all__ = ["PredecessorMap"]
