from __future__ import annotations

import glob
import math
import os
import random
import re
from typing import List, Optional

from .errors import InstanceError
from .instance import Instance

DIFFICULTIES = ("facile", "moyen", "difficile")

# Upper bound on n for the first two tiers; larger kplib sizes are "difficile".
TIER_LIMITS = (50, 200)

_SIZE_DIR = re.compile(r"^n(\d+)$")

GENERATED = "Generated"


def _instance_name(path: str) -> str:
    """kplib/00Uncorrelated/n00050/R01000/s000.kp -> 00Uncorrelated_n00050_R01000_s000"""
    norm = path.replace("\\", "/")
    if "kplib/" in norm:
        norm = norm.split("kplib/", 1)[1]
    else:
        norm = os.path.basename(norm)
    if norm.endswith(".kp"):
        norm = norm[:-3]
    return norm.replace("/", "_")


def _kplib_parts(path: str) -> List[str]:
    norm = path.replace("\\", "/")
    if "kplib/" not in norm:
        return []
    return norm.split("kplib/", 1)[1].split("/")


def difficulty_for_size(n: int) -> str:
    if n <= TIER_LIMITS[0]:
        return DIFFICULTIES[0]
    if n <= TIER_LIMITS[1]:
        return DIFFICULTIES[1]
    return DIFFICULTIES[2]


def kplib_family(path: str) -> str:
    """kplib/02StronglyCorrelated/n00100/... -> 02StronglyCorrelated ("" outside kplib)"""
    parts = _kplib_parts(path)
    return parts[0] if len(parts) > 1 else ""


def kplib_difficulty(path: str) -> str:
    """Tier from the nNNNNN folder of a kplib path, "" when there is none."""
    for part in _kplib_parts(path):
        m = _SIZE_DIR.match(part)
        if m:
            return difficulty_for_size(int(m.group(1)))
    return ""


def read_kp(path: str, difficulty: str = "", known_optimal: Optional[int] = None) -> Instance:
    """
    Reads a kplib .kp file:
      n
      capacity
      profit weight     (n lines)
    Blank lines are ignored. Without an explicit difficulty, the tier is
    taken from the size folder of a kplib path.
    """
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        lines = [line.strip() for line in f if line.strip()]

    if len(lines) < 2:
        raise InstanceError(f"{path}: file too short")

    try:
        n = int(lines[0])
        capacity = int(lines[1])
    except ValueError as e:
        raise InstanceError(f"{path}: bad header: {e}") from e

    if len(lines) < 2 + n:
        raise InstanceError(f"{path}: expected {n} items, found {len(lines) - 2}")

    profits: List[int] = []
    weights: List[int] = []
    for line in lines[2:2 + n]:
        parts = line.split()
        if len(parts) < 2:
            raise InstanceError(f"{path}: invalid item line '{line}'")
        try:
            profits.append(int(parts[0]))
            weights.append(int(parts[1]))
        except ValueError as e:
            raise InstanceError(f"{path}: invalid item line '{line}'") from e

    return Instance.build(
        weights,
        profits,
        capacity,
        name=_instance_name(path),
        known_optimal=known_optimal,
        difficulty=difficulty or kplib_difficulty(path),
        family=kplib_family(path),
    )


def iter_kp_files(folder: str) -> List[str]:
    return sorted(glob.glob(os.path.join(folder, "**", "*.kp"), recursive=True))


def generate_uncorrelated(n: int, max_weight: int, seed: int = 0, name: str = "", difficulty: str = "") -> Instance:
    """Weights in 1..R, profits in 1..2R, capacity = half of the total weight."""
    rng = random.Random(seed)
    weights = [rng.randint(1, max_weight) for _ in range(n)]
    profits = [rng.randint(1, 2 * max_weight) for _ in range(n)]
    return Instance.build(weights, profits, sum(weights) // 2, name=name, difficulty=difficulty,
                          family=GENERATED)


def generate_profit_ceiling(
    n: int,
    h: int,
    H: int = 10,
    r: int = 1000,
    d: int = 3,
    seed: int = 123456,
    name: str = "",
) -> Instance:
    """
    Profit ceiling instances: profit = d * ceil(w / d), weights in 1..r.
    Capacity of the h-th instance of a series of H is floor(h / (H + 1) * sum(w)).
    """
    if not 1 <= h <= H:
        raise ValueError(f"h must be in [1, {H}], got {h}")
    rng = random.Random(seed)
    weights = [rng.randint(1, r) for _ in range(n)]
    profits = [d * math.ceil(w / d) for w in weights]
    capacity = math.floor(h / (H + 1) * sum(weights))
    return Instance.build(weights, profits, capacity, name=name or f"ceiling_n{n}_h{h}",
                          difficulty=difficulty_for_size(n), family=GENERATED)


def fallback_instances(seed: int = 42) -> List[Instance]:
    """Ten generated instances per difficulty tier, used when no benchmark file is found."""
    tiers = ((10, 20, 50), (40, 60, 100), (100, 150, 200))
    rng = random.Random(seed)
    instances: List[Instance] = []
    for (lo, hi, max_weight), difficulty in zip(tiers, DIFFICULTIES):
        for i in range(10):
            n = rng.randint(lo, hi)
            instances.append(generate_uncorrelated(
                n,
                max_weight,
                seed=rng.randrange(2**31),
                name=f"{difficulty}_gen_{i}",
                difficulty=difficulty,
            ))
    return instances


def ceiling_instances(sizes=(50, 100, 500), H: int = 10, seed: int = 123456) -> List[Instance]:
    """One profit ceiling series (h = 1..H, same weights, growing capacity) per size."""
    instances: List[Instance] = []
    for k, n in enumerate(sizes):
        for h in range(1, H + 1):
            instances.append(generate_profit_ceiling(n, h, H=H, seed=seed + k))
    return instances


GENERATORS = {
    "uncorrelated": lambda seed: fallback_instances(seed=seed),
    "ceiling": lambda seed: ceiling_instances(seed=seed),
}
