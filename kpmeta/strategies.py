from __future__ import annotations

import logging
import random
import time
from typing import Callable, Dict, Optional

from .constructive import greedy_construct, probabilistic_construct
from .instance import Instance
from .lns import run_lns
from .oracle import BranchAndBoundOracle, CpSatOracle, MipOracle, Oracle
from .result import SearchResult
from .solution import Fixing
from .timing import elapsed_ms_since

logger = logging.getLogger(__name__)


def run_greedy(inst: Instance) -> SearchResult:
    t0 = time.monotonic()
    sol = greedy_construct(inst)
    return SearchResult(
        method="greedy",
        best_value=sol.value,
        elapsed_ms=elapsed_ms_since(t0),
        iterations=0,
        proven_optimal=False,
        known_optimal=inst.known_optimal,
        instance=inst.name,
        solution=sol,
    )


def run_probabilistic(inst: Instance, alpha: float = 1.0, seed: int = 0) -> SearchResult:
    t0 = time.monotonic()
    sol = probabilistic_construct(inst, random.Random(seed), alpha=alpha)
    return SearchResult(
        method="grasp",
        best_value=sol.value,
        elapsed_ms=elapsed_ms_since(t0),
        iterations=0,
        proven_optimal=False,
        known_optimal=inst.known_optimal,
        instance=inst.name,
        solution=sol,
    )


def run_exact(
    inst: Instance,
    time_limit_ms: float,
    oracle: Optional[Oracle] = None,
    method: Optional[str] = None,
) -> SearchResult:
    """Whole instance handed to the oracle, every item free. method defaults to exact_<oracle name>."""
    if time_limit_ms <= 0:
        raise ValueError(f"time_limit_ms must be > 0, got {time_limit_ms}")
    oracle = oracle if oracle is not None else CpSatOracle()

    t0 = time.monotonic()
    outcome = oracle.solve(inst, Fixing.free(inst.n), time_limit_ms)
    elapsed = elapsed_ms_since(t0)

    value = outcome.solution.value if outcome.solution is not None else 0
    logger.info("exact %s on %s: status=%s value=%d in %.0f ms",
                oracle.name, inst.name or "instance", outcome.status, value, elapsed)
    return SearchResult(
        method=method or f"exact_{oracle.name}",
        best_value=value,
        elapsed_ms=elapsed,
        iterations=outcome.nodes,
        proven_optimal=outcome.optimal,
        known_optimal=inst.known_optimal,
        instance=inst.name,
        solution=outcome.solution,
    )


Strategy = Callable[..., SearchResult]

STRATEGIES: Dict[str, Strategy] = {
    "greedy": lambda inst, **kw: run_greedy(inst),
    "grasp": lambda inst, **kw: run_probabilistic(inst, alpha=kw["alpha"], seed=kw["seed"]),
    "lns": lambda inst, **kw: run_lns(
        inst,
        kw["time_limit_ms"],
        neighborhood_fraction=kw["rho"],
        slice_ms=kw["slice_ms"],
        seed=kw["seed"],
    ),
    "exact_cpsat": lambda inst, **kw: run_exact(inst, kw["time_limit_ms"], CpSatOracle(seed=kw["seed"]),
                                                 method="exact_cpsat"),
    "exact_mip": lambda inst, **kw: run_exact(inst, kw["time_limit_ms"], MipOracle(), method="exact_mip"),
    "exact_bnb": lambda inst, **kw: run_exact(inst, kw["time_limit_ms"], BranchAndBoundOracle(),
                                               method="exact_bnb"),
}


def solve_one(
    inst: Instance,
    method: str,
    time_limit_ms: float,
    seed: int = 0,
    alpha: float = 1.0,
    rho: float = 0.15,
    slice_ms: float = 100.0,
) -> SearchResult:
    method = method.lower()
    if method not in STRATEGIES:
        raise ValueError(f"Unknown method: {method} (expected one of {', '.join(STRATEGIES)})")
    return STRATEGIES[method](
        inst,
        time_limit_ms=time_limit_ms,
        seed=seed,
        alpha=alpha,
        rho=rho,
        slice_ms=slice_ms,
    )
