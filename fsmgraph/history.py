"""
Transition history: which state led to which, and at what step.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

START_STATE = "start"
END_STATE = "end"


@dataclass(frozen=True)
class Transition:
    """One recorded transition."""

    source: str
    destination: str
    step: int


class TransitionHistory:
    """Adjacency map of recorded transitions with per-edge step lists.

    The layout is ``source -> destination -> [step, ...]``. A pair only
    appears once it has been traversed, so every edge holds at least one
    step. Steps are numbered from 1 and each transition consumes exactly
    one, so across a run they form a contiguous range.

    Sources and destinations keep the order in which they were first
    recorded, which keeps rendered graphs stable from one export to the next.
    """

    def __init__(self):
        self._edges: Dict[str, Dict[str, List[int]]] = {}
        self._step = 0

    @property
    def step(self) -> int:
        """The step number of the most recent transition (0 before any)."""
        return self._step

    def record(self, source: str, destination: str) -> Transition:
        self._step += 1
        destinations = self._edges.setdefault(source, {})
        destinations.setdefault(destination, []).append(self._step)
        return Transition(source, destination, self._step)

    def steps(self, source: str, destination: str) -> List[int]:
        """Steps at which source -> destination fired, in recording order."""
        return list(self._edges.get(source, {}).get(destination, []))

    def edges(self) -> Iterator[Tuple[str, str, List[int]]]:
        for source, destinations in self._edges.items():
            for destination, steps in destinations.items():
                yield source, destination, list(steps)

    def transitions(self) -> List[Transition]:
        """Every recorded transition, ordered by step."""
        flat = [
            Transition(source, destination, step)
            for source, destination, steps in self.edges()
            for step in steps
        ]
        return sorted(flat, key=lambda t: t.step)

    def as_dict(self) -> Dict[str, Dict[str, List[int]]]:
        return {
            source: {destination: list(steps) for destination, steps in destinations.items()}
            for source, destinations in self._edges.items()
        }

    def __contains__(self, edge: object) -> bool:
        if not isinstance(edge, tuple) or len(edge) != 2:
            return False
        source, destination = edge
        return destination in self._edges.get(source, {})

    def __len__(self) -> int:
        return sum(len(steps) for _, _, steps in self.edges())

    def __bool__(self) -> bool:
        return bool(self._edges)

    def __repr__(self) -> str:
        return f"TransitionHistory(step={self._step}, edges={self.as_dict()!r})"
