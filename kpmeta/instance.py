from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .errors import InstanceError

Idx = int


def _is_int(x) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


@dataclass(frozen=True)
class Item:
    weight: int
    profit: int

    def __post_init__(self) -> None:
        if not _is_int(self.weight) or not _is_int(self.profit):
            raise InstanceError(f"Item weight/profit must be integers, got ({self.weight!r}, {self.profit!r})")
        if self.weight <= 0:
            raise InstanceError(f"Item weight must be > 0, got {self.weight}")
        if self.profit <= 0:
            raise InstanceError(f"Item profit must be > 0, got {self.profit}")

    @property
    def ratio(self) -> float:
        return self.profit / self.weight


@dataclass(frozen=True)
class Instance:
    """
    0/1 knapsack instance. Items are addressed by their position in `items`.

    known_optimal is None when the optimum of the instance is not known.
    family is the benchmark class the instance comes from (e.g. 00Uncorrelated).
    """
    items: Tuple[Item, ...]
    capacity: int
    name: str = ""
    known_optimal: Optional[int] = None
    difficulty: str = ""
    family: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        if not _is_int(self.capacity):
            raise InstanceError(f"{self.name or 'instance'}: capacity must be an integer, got {self.capacity!r}")
        if self.capacity < 0:
            raise InstanceError(f"{self.name or 'instance'}: capacity must be >= 0, got {self.capacity}")
        for it in self.items:
            if not isinstance(it, Item):
                raise InstanceError(f"{self.name or 'instance'}: expected Item, got {type(it).__name__}")

    @property
    def n(self) -> int:
        return len(self.items)

    @property
    def weights(self) -> Tuple[int, ...]:
        return tuple(it.weight for it in self.items)

    @property
    def profits(self) -> Tuple[int, ...]:
        return tuple(it.profit for it in self.items)

    def has_fitting_item(self) -> bool:
        """True if at least one item fits in the empty knapsack."""
        return any(it.weight <= self.capacity for it in self.items)

    @staticmethod
    def build(
        weights: Iterable[int],
        profits: Iterable[int],
        capacity: int,
        name: str = "",
        known_optimal: Optional[int] = None,
        difficulty: str = "",
        family: str = "",
    ) -> "Instance":
        ws = list(weights)
        ps = list(profits)
        if len(ws) != len(ps):
            raise InstanceError(f"{name or 'instance'}: {len(ws)} weights but {len(ps)} profits")
        items = tuple(Item(weight=w, profit=p) for w, p in zip(ws, ps))
        return Instance(
            items=items,
            capacity=capacity,
            name=name,
            known_optimal=known_optimal,
            difficulty=difficulty,
            family=family,
        )
