from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Tuple

from .instance import Instance, Idx


@dataclass(frozen=True)
class Solution:
    selected: FrozenSet[Idx]
    value: int
    weight: int

    @staticmethod
    def empty() -> "Solution":
        return Solution(frozenset(), 0, 0)

    @staticmethod
    def from_indices(inst: Instance, indices: Iterable[Idx]) -> "Solution":
        sel = frozenset(indices)
        value = sum(inst.items[i].profit for i in sel)
        weight = sum(inst.items[i].weight for i in sel)
        return Solution(sel, value, weight)

    def includes(self, i: Idx) -> bool:
        return i in self.selected

    def size(self) -> int:
        return len(self.selected)

    def selection(self, n: int) -> Tuple[bool, ...]:
        """Index -> included mapping, one entry per item."""
        return tuple(i in self.selected for i in range(n))


def is_feasible(inst: Instance, sol: Solution) -> bool:
    """Indices in range, totals consistent with the items, weight within capacity."""
    if any(i < 0 or i >= inst.n for i in sol.selected):
        return False
    weight = sum(inst.items[i].weight for i in sol.selected)
    value = sum(inst.items[i].profit for i in sol.selected)
    if weight != sol.weight or value != sol.value:
        return False
    return weight <= inst.capacity


@dataclass(frozen=True)
class Fixing:
    """
    Neighborhood descriptor: values[i] is None when item i is free,
    otherwise the inclusion state the item is fixed to.
    """
    values: Tuple[Optional[bool], ...]

    @staticmethod
    def free(n: int) -> "Fixing":
        return Fixing(tuple(None for _ in range(n)))

    @staticmethod
    def around(inst: Instance, incumbent: Solution, relaxed: Iterable[Idx]) -> "Fixing":
        rel = set(relaxed)
        return Fixing(tuple(
            None if i in rel else (i in incumbent.selected)
            for i in range(inst.n)
        ))

    def __len__(self) -> int:
        return len(self.values)

    def free_indices(self) -> List[Idx]:
        return [i for i, v in enumerate(self.values) if v is None]

    def fixed_in(self) -> List[Idx]:
        return [i for i, v in enumerate(self.values) if v is True]

    def fixed_weight(self, inst: Instance) -> int:
        return sum(inst.items[i].weight for i in self.fixed_in())

    def respects(self, sol: Solution) -> bool:
        for i, v in enumerate(self.values):
            if v is not None and (i in sol.selected) != v:
                return False
        return True
