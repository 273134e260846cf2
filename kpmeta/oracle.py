from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ortools.linear_solver import pywraplp
from ortools.sat.python import cp_model

from .errors import OracleUnavailable
from .instance import Instance, Idx
from .solution import Fixing, Solution, is_feasible
from .timing import Deadline

logger = logging.getLogger(__name__)

OPTIMAL = "OPTIMAL"
FEASIBLE = "FEASIBLE"
NO_SOLUTION = "NO_SOLUTION"


@dataclass(frozen=True)
class OracleOutcome:
    """Answer of one oracle call. solution is None exactly when status is NO_SOLUTION."""
    solution: Optional[Solution]
    status: str
    nodes: int = 0

    @property
    def found(self) -> bool:
        return self.solution is not None

    @property
    def optimal(self) -> bool:
        return self.status == OPTIMAL


NO_SOLUTION_OUTCOME = OracleOutcome(None, NO_SOLUTION, 0)


class Oracle(abc.ABC):
    """
    Bounded-time solving capability for a (partially fixed) knapsack instance.

    Fixed entries of the Fixing are hard equality constraints; free entries are
    decided by the oracle. Must return at or before time_budget_ms, best effort.
    """
    name: str = "oracle"

    @abc.abstractmethod
    def solve(self, inst: Instance, fixing: Fixing, time_budget_ms: float) -> OracleOutcome:
        pass


class SubproblemOracle(Oracle):
    """
    Oracle that only searches over the free items.

    Handles budget validation and the trivial cases (fixed part too heavy,
    nothing left free) before delegating to _optimize().
    """

    def solve(self, inst: Instance, fixing: Fixing, time_budget_ms: float) -> OracleOutcome:
        if time_budget_ms <= 0:
            raise ValueError(f"time budget must be > 0 ms, got {time_budget_ms}")
        if len(fixing) != inst.n:
            raise ValueError(f"fixing has {len(fixing)} entries for {inst.n} items")

        base = fixing.fixed_in()
        residual = inst.capacity - fixing.fixed_weight(inst)
        if residual < 0:
            return NO_SOLUTION_OUTCOME

        free = [i for i in fixing.free_indices() if inst.items[i].weight <= residual]
        if not free:
            return OracleOutcome(Solution.from_indices(inst, base), OPTIMAL, 0)

        chosen, status, nodes = self._optimize(inst, free, residual, time_budget_ms)
        if status == NO_SOLUTION:
            return OracleOutcome(None, NO_SOLUTION, nodes)

        sol = Solution.from_indices(inst, list(base) + list(chosen))
        if not is_feasible(inst, sol):
            logger.warning("%s returned an infeasible selection (weight=%d > %d), discarded",
                           self.name, sol.weight, inst.capacity)
            return OracleOutcome(None, NO_SOLUTION, nodes)

        logger.debug("%s: %d free items, status=%s value=%d nodes=%d",
                     self.name, len(free), status, sol.value, nodes)
        return OracleOutcome(sol, status, nodes)

    @abc.abstractmethod
    def _optimize(self, inst: Instance, free: Sequence[Idx], residual: int,
                  time_budget_ms: float) -> Tuple[List[Idx], str, int]:
        """Returns (chosen free indices, status, node count)."""
        pass


class CpSatOracle(SubproblemOracle):
    """OR-Tools CP-SAT over the free items."""
    name = "cpsat"

    def __init__(self, num_workers: int = 1, seed: int = 0):
        self.num_workers = int(num_workers)
        self.seed = int(seed)

    def _optimize(self, inst, free, residual, time_budget_ms):
        model = cp_model.CpModel()
        x = {i: model.NewBoolVar(f"x_{i}") for i in free}
        model.Add(sum(inst.items[i].weight * x[i] for i in free) <= residual)
        model.Maximize(sum(inst.items[i].profit * x[i] for i in free))

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = time_budget_ms / 1000.0
        solver.parameters.num_workers = self.num_workers
        solver.parameters.random_seed = self.seed

        status = solver.Solve(model)
        nodes = int(solver.NumBranches())

        if status == cp_model.MODEL_INVALID:
            raise OracleUnavailable(f"CP-SAT rejected the model: {model.Validate()}")
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            return [], NO_SOLUTION, nodes

        chosen = [i for i in free if solver.Value(x[i])]
        return chosen, (OPTIMAL if status == cp_model.OPTIMAL else FEASIBLE), nodes


class MipOracle(SubproblemOracle):
    """OR-Tools linear solver wrapper (MILP backend such as SCIP or CBC)."""

    def __init__(self, backend: str = "SCIP"):
        self.backend = backend
        self.name = f"mip_{backend.lower()}"

    def _create_solver(self) -> pywraplp.Solver:
        solver = pywraplp.Solver.CreateSolver(self.backend)
        if solver is None:
            raise OracleUnavailable(f"MIP backend '{self.backend}' is not available in this OR-Tools build")
        return solver

    def _optimize(self, inst, free, residual, time_budget_ms):
        solver = self._create_solver()

        x = {i: solver.IntVar(0, 1, f"x_{i}") for i in free}

        capacity = solver.RowConstraint(0, float(residual), "capacity")
        for i in free:
            capacity.SetCoefficient(x[i], float(inst.items[i].weight))

        objective = solver.Objective()
        for i in free:
            objective.SetCoefficient(x[i], float(inst.items[i].profit))
        objective.SetMaximization()

        solver.SetTimeLimit(max(1, int(time_budget_ms)))
        status = solver.Solve()

        if status in (pywraplp.Solver.ABNORMAL, pywraplp.Solver.MODEL_INVALID):
            raise OracleUnavailable(f"MIP backend '{self.backend}' failed with status {status}")
        if status not in (pywraplp.Solver.OPTIMAL, pywraplp.Solver.FEASIBLE):
            return [], NO_SOLUTION, 0

        nodes = int(solver.nodes())
        chosen = [i for i in free if x[i].solution_value() > 0.5]
        return chosen, (OPTIMAL if status == pywraplp.Solver.OPTIMAL else FEASIBLE), nodes


class BranchAndBoundOracle(SubproblemOracle):
    """
    Depth-first branch and bound over the free items, pure Python.

    Items are branched in ratio order (take first), pruned with the fractional
    (Dantzig) bound, and the search starts from the greedy completion so a
    feasible answer exists even when the budget cuts the search short.
    """
    name = "bnb"

    def __init__(self, check_every: int = 256):
        self.check_every = max(1, int(check_every))

    def _optimize(self, inst, free, residual, time_budget_ms):
        deadline = Deadline(time_budget_ms)
        order = sorted(free, key=lambda i: (-inst.items[i].ratio, i))
        ws = [inst.items[i].weight for i in order]
        ps = [inst.items[i].profit for i in order]
        m = len(order)

        def bound(k: int, cap: int, val: int) -> int:
            b = float(val)
            for j in range(k, m):
                if ws[j] <= cap:
                    cap -= ws[j]
                    b += ps[j]
                else:
                    b += cap * ps[j] / ws[j]
                    break
            return int(b + 1e-9)

        # Greedy completion as starting incumbent.
        best_val = 0
        cap = residual
        taken = []
        for j in range(m):
            if ws[j] <= cap:
                cap -= ws[j]
                best_val += ps[j]
                taken.append(j)
        best_taken = tuple(taken)

        nodes = 0
        complete = True
        stack: List[Tuple[int, int, int, Tuple[int, ...]]] = [(0, residual, 0, ())]
        while stack:
            nodes += 1
            if nodes % self.check_every == 0 and deadline.expired():
                complete = False
                break

            k, cap, val, taken_k = stack.pop()
            if val > best_val:
                best_val = val
                best_taken = taken_k
            if k == m or bound(k, cap, val) <= best_val:
                continue

            stack.append((k + 1, cap, val, taken_k))
            if ws[k] <= cap:
                stack.append((k + 1, cap - ws[k], val + ps[k], taken_k + (k,)))

        chosen = [order[j] for j in best_taken]
        return chosen, (OPTIMAL if complete else FEASIBLE), nodes
