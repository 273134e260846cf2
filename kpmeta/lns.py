from __future__ import annotations

import enum
import logging
import random
import time
from typing import Callable, List, Optional, Tuple

from .constructive import greedy_construct
from .instance import Instance, Idx
from .oracle import CpSatOracle, Oracle
from .result import SearchResult
from .solution import Fixing, Solution, is_feasible
from .timing import Deadline, elapsed_ms_since

logger = logging.getLogger(__name__)

# Slack tolerated on top of the per-iteration slice before an oracle call counts as an overrun.
OVERRUN_TOLERANCE_MS = 50.0


class LNSState(enum.Enum):
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    FINISHED = "finished"


class LNSEngine:
    """
    Anytime Large Neighborhood Search for the 0/1 knapsack.

    Starts from the greedy solution, then repeatedly:
      - relaxes each item independently with probability neighborhood_fraction,
      - fixes every other item to its state in the incumbent,
      - asks the oracle for the best completion within slice_ms,
      - keeps the answer only if it is feasible and strictly better.
    Stops once the global budget is spent (or max_iterations is reached).
    """

    def __init__(
        self,
        inst: Instance,
        oracle: Oracle,
        neighborhood_fraction: float = 0.15,
        slice_ms: float = 100.0,
        rng: Optional[random.Random] = None,
        max_iterations: Optional[int] = None,
        on_improve: Optional[Callable[[Solution, float], None]] = None,
    ):
        if not 0.0 < neighborhood_fraction <= 1.0:
            raise ValueError(f"neighborhood_fraction must be in (0, 1], got {neighborhood_fraction}")
        if slice_ms <= 0:
            raise ValueError(f"slice_ms must be > 0, got {slice_ms}")
        if max_iterations is not None and max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {max_iterations}")

        self.inst = inst
        self.oracle = oracle
        self.rho = float(neighborhood_fraction)
        self.slice_ms = float(slice_ms)
        self.rng = rng if rng is not None else random.Random(0)
        self.max_iterations = max_iterations
        self.on_improve = on_improve

        self.state = LNSState.INITIALIZING
        self.best: Optional[Solution] = None
        self.iterations = 0
        self.overruns = 0
        self.trace: List[Tuple[float, int]] = []

    @property
    def best_value(self) -> int:
        return self.best.value if self.best is not None else 0

    def sample_relaxed(self) -> List[Idx]:
        """Destroy step: each index is relaxed independently with probability rho."""
        return [i for i in range(self.inst.n) if self.rng.random() < self.rho]

    def _accept(self, candidate: Optional[Solution], fixing: Fixing) -> bool:
        if candidate is None:
            return False
        if not is_feasible(self.inst, candidate) or not fixing.respects(candidate):
            logger.warning("%s answer violates capacity or fixing, ignored", self.oracle.name)
            return False
        return candidate.value > self.best_value

    def _improve(self, sol: Solution, elapsed_ms: float) -> None:
        self.best = sol
        self.trace.append((elapsed_ms, sol.value))
        if self.on_improve is not None:
            self.on_improve(sol, elapsed_ms)

    def step(self, deadline: Deadline) -> bool:
        """One relax / fix / re-optimize iteration. Returns True if the incumbent improved."""
        if self.best is None:
            raise RuntimeError("step() called before run() seeded an incumbent")
        relaxed = self.sample_relaxed()
        fixing = Fixing.around(self.inst, self.best, relaxed)

        t_call = time.monotonic()
        outcome = self.oracle.solve(self.inst, fixing, self.slice_ms)
        call_ms = elapsed_ms_since(t_call)
        if call_ms > self.slice_ms + OVERRUN_TOLERANCE_MS:
            self.overruns += 1
            logger.warning("%s overran its slice: %.1f ms for %.1f ms requested",
                           self.oracle.name, call_ms, self.slice_ms)

        self.iterations += 1
        if not self._accept(outcome.solution, fixing):
            return False

        logger.debug("iteration %d: %d -> %d (%d relaxed)",
                     self.iterations, self.best_value, outcome.solution.value, len(relaxed))
        self._improve(outcome.solution, deadline.elapsed_ms())
        return True

    def run(self, time_limit_ms: float) -> SearchResult:
        if time_limit_ms < 0:
            raise ValueError(f"time_limit_ms must be >= 0, got {time_limit_ms}")

        self.state = LNSState.INITIALIZING
        self.iterations = 0
        self.overruns = 0
        self.trace = []
        deadline = Deadline(time_limit_ms)

        self._improve(greedy_construct(self.inst), deadline.elapsed_ms())
        logger.info("LNS on %s: seed value %d, budget %.0f ms, rho=%.2f, slice=%.0f ms",
                    self.inst.name or "instance", self.best_value, time_limit_ms, self.rho, self.slice_ms)

        self.state = LNSState.ITERATING
        # Nothing fits: no neighborhood can change the empty incumbent.
        if self.inst.has_fitting_item():
            while not deadline.expired():
                if self.max_iterations is not None and self.iterations >= self.max_iterations:
                    break
                self.step(deadline)
        self.state = LNSState.FINISHED

        elapsed = deadline.elapsed_ms()
        logger.info("LNS on %s finished: value %d after %d iterations in %.0f ms (%d overruns)",
                    self.inst.name or "instance", self.best_value, self.iterations, elapsed, self.overruns)

        return SearchResult(
            method="lns",
            best_value=self.best_value,
            elapsed_ms=elapsed,
            iterations=self.iterations,
            proven_optimal=False,
            known_optimal=self.inst.known_optimal,
            instance=self.inst.name,
            solution=self.best,
        )


def run_lns(
    inst: Instance,
    time_limit_ms: float,
    oracle: Optional[Oracle] = None,
    neighborhood_fraction: float = 0.15,
    slice_ms: float = 100.0,
    seed: int = 0,
    max_iterations: Optional[int] = None,
) -> SearchResult:
    """
    LNS:
      - greedy seed
      - repeat until time limit:
          relax a random subset, re-optimize it with the oracle,
          keep the result if strictly better.
    """
    engine = LNSEngine(
        inst,
        oracle if oracle is not None else CpSatOracle(),
        neighborhood_fraction=neighborhood_fraction,
        slice_ms=slice_ms,
        rng=random.Random(seed),
        max_iterations=max_iterations,
    )
    return engine.run(time_limit_ms)
