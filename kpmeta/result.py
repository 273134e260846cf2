from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .solution import Solution


@dataclass(frozen=True)
class SearchResult:
    """
    Outcome of one strategy run on one instance.

    iterations counts LNS iterations or search nodes, depending on the method.
    """
    method: str
    best_value: int
    elapsed_ms: float
    iterations: int
    proven_optimal: bool
    known_optimal: Optional[int] = None
    instance: str = ""
    solution: Optional[Solution] = field(default=None, compare=False, repr=False)

    @property
    def gap_percent(self) -> float:
        # Undefined (-1) without a positive known optimum.
        if self.known_optimal is None or self.known_optimal <= 0:
            return -1.0
        return 100.0 * (self.known_optimal - self.best_value) / self.known_optimal

    def as_row(self) -> Dict[str, object]:
        return {
            "instance": self.instance,
            "method": self.method,
            "value": self.best_value,
            "time_ms": round(self.elapsed_ms, 3),
            "nodes": self.iterations,
            "optimal": self.proven_optimal,
            "optimal_known": -1 if self.known_optimal is None else self.known_optimal,
            "gap_percent": round(self.gap_percent, 2),
        }
