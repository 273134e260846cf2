from __future__ import annotations

from typing import List, Set
import random

from .instance import Instance, Idx
from .solution import Solution


def ratio_order(inst: Instance) -> List[Idx]:
    """Indices by decreasing profit/weight ratio, ties broken by index."""
    return sorted(range(inst.n), key=lambda i: (-inst.items[i].ratio, i))


def greedy_construct(inst: Instance) -> Solution:
    """Construction gloutonne : ratio profit/poids décroissant, on prend tout ce qui rentre."""
    chosen: Set[Idx] = set()
    residual = inst.capacity

    for i in ratio_order(inst):
        w = inst.items[i].weight
        if w <= residual:
            chosen.add(i)
            residual -= w

    return Solution.from_indices(inst, chosen)


def probabilistic_construct(inst: Instance, rng: random.Random, alpha: float = 1.0) -> Solution:
    """
    Randomized proportional construction (GRASP-style).

    Among the candidates that still fit, item i is drawn with probability
    proportional to (profit/weight) ** alpha. alpha = 0 gives uniform draws,
    large alpha approaches the deterministic greedy.
    """
    if alpha < 0:
        raise ValueError(f"alpha must be >= 0, got {alpha}")

    candidates: List[Idx] = list(range(inst.n))
    chosen: Set[Idx] = set()
    residual = inst.capacity

    while candidates:
        feasible = [i for i in candidates if inst.items[i].weight <= residual]
        if not feasible:
            break

        # Scaled by the best ratio so large alpha cannot overflow; the distribution is unchanged.
        top = max(inst.items[i].ratio for i in feasible)
        h = [(inst.items[i].ratio / top) ** alpha for i in feasible]
        total = sum(h)
        r = rng.random()

        picked = feasible[-1]
        cumulative = 0.0
        for i, hi in zip(feasible, h):
            cumulative += hi / total
            if cumulative >= r:
                picked = i
                break

        chosen.add(picked)
        residual -= inst.items[picked].weight
        candidates.remove(picked)

    return Solution.from_indices(inst, chosen)
